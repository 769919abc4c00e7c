"""Test helpers: in-memory cluster and history collaborators."""

from image_rot.core.cluster import parse_deployment_list
from image_rot.models import Deployment

DAY_MS = 24 * 60 * 60 * 1000

# Tag commit times (seconds) of the myapp series used across tests
T_OLD = 1700000000
T_NEW = T_OLD + 5 * 24 * 60 * 60


def deployment_item(namespace: str, name: str, containers: list[dict]) -> dict:
    """Build a deployment object shaped like the Kubernetes API returns it."""
    return {
        "metadata": {"namespace": namespace, "name": name},
        "spec": {"template": {"spec": {"containers": containers}}},
    }


def deployment_list(*items: dict) -> dict:
    """Wrap deployment objects in a DeploymentList document."""
    return {"apiVersion": "apps/v1", "kind": "DeploymentList", "items": list(items)}


class FakeClusterReader:
    """Cluster reader returning a fixed deployment list."""

    def __init__(self, payload: dict):
        self.payload = payload
        self.calls = 0

    async def list_deployments(self) -> list[Deployment]:
        self.calls += 1
        return parse_deployment_list(self.payload)


class FakeHistoryReader:
    """History reader filtering fixed log lines like git log | grep."""

    def __init__(self, lines: list[str]):
        self.lines = lines
        self.queries: list[tuple[str, bool]] = []

    async def query_log(self, pattern: str, newest_only: bool = False) -> str:
        self.queries.append((pattern, newest_only))
        matches = [line for line in self.lines if pattern in line]
        if newest_only:
            matches = matches[:1]
        return "\n".join(matches)
