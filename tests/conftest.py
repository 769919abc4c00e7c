"""Test configuration and fixtures."""

import os
import shutil
import subprocess

import pytest

from tests.helpers import T_NEW, T_OLD, deployment_item, deployment_list


@pytest.fixture
def history_lines():
    """Tag history of one series, newest first."""
    return [
        f"{T_NEW}  (HEAD -> main, tag: myapp-def456)",
        f"{T_OLD}  (tag: myapp-abc123)",
        f"{T_OLD - 100}  (tag: other-999aaa)",
    ]


@pytest.fixture
def cluster_payload():
    """Two namespaces with digest, tag-only and unknown images."""
    return deployment_list(
        deployment_item(
            "ns2",
            "api",
            [{"name": "api", "image": "repo/myapp@sha256:def456"}],
        ),
        deployment_item(
            "ns1",
            "web",
            [
                {"name": "web", "image": "repo/myapp@sha256:abc123"},
                {"name": "sidecar", "image": "envoyproxy/envoy:v1.28"},
            ],
        ),
        deployment_item(
            "ns1",
            "batch",
            [{"name": "job", "image": "repo/other@sha256:999aaa"}],
        ),
    )


def _git(repo, *args, date=None):
    env = dict(os.environ, HOME=str(repo), GIT_CONFIG_NOSYSTEM="1")
    if date is not None:
        env["GIT_AUTHOR_DATE"] = f"{date} +0000"
        env["GIT_COMMITTER_DATE"] = f"{date} +0000"
    subprocess.run(
        [
            "git",
            "-c",
            "user.name=Test",
            "-c",
            "user.email=test@example.com",
            "-c",
            "commit.gpgsign=false",
            "-c",
            "tag.gpgsign=false",
            *args,
        ],
        cwd=repo,
        env=env,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repository(tmp_path):
    """Git checkout with tags myapp-abc123 (older) and myapp-def456 (newer)."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "commit", "-q", "--allow-empty", "-m", "first", date=T_OLD)
    _git(repo, "tag", "myapp-abc123")
    _git(repo, "commit", "-q", "--allow-empty", "-m", "second", date=T_NEW)
    _git(repo, "tag", "myapp-def456")
    return repo


def pytest_configure(config):
    """Configure pytest markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test requiring git"
    )
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")
