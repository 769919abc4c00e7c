"""Tests for the command line interface."""

import asyncio
import json

import pytest

from image_rot import cli
from image_rot.exceptions import ConfigError
from tests.helpers import deployment_item, deployment_list


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every CLI test without a config file."""
    monkeypatch.delenv("IMAGE_ROT_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def snapshot(tmp_path, cluster_payload):
    path = tmp_path / "deployments.json"
    path.write_text(json.dumps(cluster_payload))
    return str(path)


def test_choose_cluster_single():
    """Test a single configured cluster is used without prompting."""
    assert cli.choose_cluster(["prod"], input_func=pytest.fail) == "prod"


def test_choose_cluster_none():
    """Test no configured clusters falls back to the current context."""
    assert cli.choose_cluster([]) is None


def test_choose_cluster_prompt():
    """Test picking a cluster by number or name."""
    answers = iter(["7", "bogus", "2"])
    chosen = cli.choose_cluster(
        ["staging", "prod"], input_func=lambda prompt: next(answers), interactive=True
    )
    assert chosen == "prod"

    chosen = cli.choose_cluster(
        ["staging", "prod"], input_func=lambda prompt: "staging", interactive=True
    )
    assert chosen == "staging"


def test_choose_cluster_not_interactive():
    """Test several clusters without a terminal need --context."""
    with pytest.raises(ConfigError, match="--context"):
        cli.choose_cluster(["staging", "prod"], interactive=False)


def test_main_without_history(snapshot, capsys):
    """Test the table is printed with empty age and rot without git."""
    exit_code = cli.main(["--from-file", snapshot])

    out = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert out[0].startswith("Namespace")
    assert len(out) == 2 + 4
    assert out[2].rstrip() == "ns1        batch       job"


def test_main_ignore_unknown_without_history(snapshot, capsys):
    """Test every row is hidden when ages are unknown and ignored."""
    exit_code = cli.main(["--from-file", snapshot, "--ignore-unknown"])

    assert exit_code == 0
    assert len(capsys.readouterr().out.splitlines()) == 2


def test_main_bad_checkout_path(snapshot, tmp_path, capsys):
    """Test a checkout path that is not a directory exits non-zero."""
    exit_code = cli.main(
        ["--from-file", snapshot, "--git-repository", str(tmp_path / "missing")]
    )

    assert exit_code == 1
    assert capsys.readouterr().out == ""


def test_main_malformed_snapshot(tmp_path, capsys):
    """Test malformed cluster data exits non-zero."""
    path = tmp_path / "broken.json"
    path.write_text("not json")

    assert cli.main(["--from-file", str(path)]) == 1
    assert capsys.readouterr().out == ""


def test_main_reads_config_file(tmp_path, capsys):
    """Test settings from the config file are applied."""
    snapshot = tmp_path / "one.json"
    snapshot.write_text(
        json.dumps(
            deployment_list(
                deployment_item("ns1", "foo", [{"name": "web", "image": "img:1"}])
            )
        )
    )
    config = tmp_path / "custom.json"
    config.write_text(json.dumps({"ignore-unknown": True}))

    exit_code = cli.main(["--config", str(config), "--from-file", str(snapshot)])

    assert exit_code == 0
    assert "foo" not in capsys.readouterr().out


@pytest.mark.integration
def test_main_with_git_repository(snapshot, git_repository, capsys):
    """Test the full run against a real git checkout."""
    exit_code = cli.main(
        ["--from-file", snapshot, "--git-repository", str(git_repository)]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "5 days" in out
    assert "0 days" in out


def test_choose_cluster_end_of_input():
    """Test closing the prompt without an answer is a config error."""

    def closed_stdin(prompt):
        raise EOFError

    with pytest.raises(ConfigError, match="No cluster chosen"):
        cli.choose_cluster(["staging", "prod"], input_func=closed_stdin, interactive=True)


def test_main_prompt_closed_exits_non_zero(tmp_path, monkeypatch, capsys):
    """Test closing the cluster prompt exits with an error instead of a traceback."""
    config = tmp_path / "clusters.json"
    config.write_text(json.dumps({"clusters": ["staging", "prod"]}))

    def closed_stdin(prompt):
        raise EOFError

    class Terminal:
        def isatty(self):
            return True

    monkeypatch.setattr("builtins.input", closed_stdin)
    monkeypatch.setattr(cli.sys, "stdin", Terminal())

    assert cli.main(["--config", str(config)]) == 1
    assert capsys.readouterr().out == ""


def test_main_picks_cluster_before_running(tmp_path, monkeypatch):
    """Test the cluster is chosen outside the event loop."""
    config = tmp_path / "clusters.json"
    config.write_text(json.dumps({"clusters": ["staging", "prod"]}))
    seen = {}

    def pick(clusters):
        with pytest.raises(RuntimeError):
            asyncio.get_running_loop()
        seen["clusters"] = clusters
        return "prod"

    async def fake_run(args, config, context):
        seen["context"] = context
        return ""

    monkeypatch.setattr(cli, "choose_cluster", pick)
    monkeypatch.setattr(cli, "run", fake_run)

    assert cli.main(["--config", str(config)]) == 0
    assert seen == {"clusters": ["staging", "prod"], "context": "prod"}
