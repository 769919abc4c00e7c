"""Deployment listing readers for kubectl, the Kubernetes API and snapshots."""

import asyncio
import json
import logging
from typing import Any, Optional

import aiofiles
import aiohttp

from ..exceptions import ClusterReadError, ProcessTimeoutError
from ..models import Container, Deployment
from .process import run_command

logger = logging.getLogger(__name__)

DEPLOYMENTS_PATH = "/apis/apps/v1/deployments"


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _require_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ClusterReadError(f"Missing {key} in {where}: {json.dumps(data)}")
    return value


def parse_container(data: Any, where: str) -> Container:
    """Validate one pod template container entry."""
    if not isinstance(data, dict):
        raise ClusterReadError(f"Invalid container entry in {where}: {data!r}")

    image = data.get("image") or ""
    if not isinstance(image, str):
        raise ClusterReadError(f"Invalid image in {where}: {image!r}")

    return Container(name=_require_str(data, "name", where), image=image)


def parse_deployment(data: Any) -> Deployment:
    """Validate one deployment item of a listing.

    Args:
        data: Deployment object as returned by the Kubernetes API

    Returns:
        Deployment with its pod template containers

    Raises:
        ClusterReadError: If required fields are missing or malformed
    """
    if not isinstance(data, dict):
        raise ClusterReadError(f"Invalid deployment entry: {data!r}")

    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        raise ClusterReadError(f"Deployment without metadata: {json.dumps(data)}")

    namespace = _require_str(metadata, "namespace", "deployment metadata")
    name = _require_str(metadata, "name", "deployment metadata")
    where = f"deployment {namespace}/{name}"

    template = _mapping(_mapping(data.get("spec")).get("template"))
    containers = _mapping(template.get("spec")).get("containers") or []
    if not isinstance(containers, list):
        raise ClusterReadError(f"Containers of {where} is not a list")

    return Deployment(
        namespace=namespace,
        name=name,
        containers=[parse_container(container, where) for container in containers],
    )


def parse_deployment_list(payload: Any) -> list[Deployment]:
    """Validate a deployment list document.

    Args:
        payload: Decoded JSON of a DeploymentList

    Returns:
        Deployments in listing order

    Raises:
        ClusterReadError: If the document is not a deployment list
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        raise ClusterReadError(f"Response is not a deployment list: {payload!r}")

    return [parse_deployment(item) for item in payload["items"]]


def decode_deployment_list(raw: str) -> list[Deployment]:
    """Decode and validate a JSON deployment list.

    Raises:
        ClusterReadError: If the text is not JSON, including the raw payload
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ClusterReadError(
            f"Failed to parse JSON from response: {e}\n{raw}"
        ) from e

    return parse_deployment_list(payload)


class KubectlClusterReader:
    """Lists deployments through the kubectl binary."""

    def __init__(
        self,
        context: Optional[str] = None,
        timeout: Optional[float] = None,
        kubectl_binary: str = "kubectl",
    ) -> None:
        """Initialize the kubectl reader.

        Args:
            context: kubeconfig context name (None uses the current context)
            timeout: Command timeout in seconds
            kubectl_binary: kubectl executable to run
        """
        self.context = context
        self.timeout = timeout
        self.kubectl_binary = kubectl_binary

    def _command(self) -> list[str]:
        args = [self.kubectl_binary]
        if self.context:
            args += ["--context", self.context]
        return args + ["get", "deploy", "--all-namespaces", "-o", "json"]

    async def list_deployments(self) -> list[Deployment]:
        """List deployments in all namespaces.

        Raises:
            ClusterReadError: If kubectl cannot run or its output is malformed
        """
        try:
            result = await run_command(self._command(), timeout=self.timeout)
        except (OSError, ProcessTimeoutError) as e:
            raise ClusterReadError(f"Failed to run kubectl: {e}") from e

        if result.returncode != 0:
            logger.warning(
                f"kubectl exited with code {result.returncode}: {result.stderr.strip()}"
            )

        return decode_deployment_list(result.stdout)


class ApiClusterReader:
    """Lists deployments from a Kubernetes API server over HTTP."""

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        timeout: float = 30,
        verify_ssl: bool = True,
        connector: Optional[aiohttp.TCPConnector] = None,
    ) -> None:
        """Initialize the API reader.

        Args:
            api_url: API server URL (e.g., http://localhost:8001 for kubectl proxy)
            token: Bearer token sent in the Authorization header
            timeout: Request timeout in seconds
            verify_ssl: Verify the server certificate
            connector: aiohttp connector for connection pooling
        """
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.connector = connector
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "ApiClusterReader":
        """Enter async context manager."""
        if not self.session:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self.session = aiohttp.ClientSession(
                connector=self.connector,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def list_deployments(self) -> list[Deployment]:
        """List deployments in all namespaces.

        Raises:
            ClusterReadError: If the request fails or the body is malformed
        """
        if not self.session:
            await self.__aenter__()

        url = f"{self.api_url}{DEPLOYMENTS_PATH}"
        logger.debug(f"Requesting: {url}")
        request_options = {} if self.verify_ssl else {"ssl": False}
        try:
            async with self.session.get(url, **request_options) as resp:
                resp.raise_for_status()
                raw = await resp.text()
        except asyncio.TimeoutError as e:
            raise ClusterReadError(
                f"Listing deployments timed out after {self.timeout}s"
            ) from e
        except aiohttp.ClientError as e:
            raise ClusterReadError(f"Failed to list deployments: {e}") from e

        return decode_deployment_list(raw)


class SnapshotClusterReader:
    """Lists deployments from a saved `kubectl get deploy -A -o json` file."""

    def __init__(self, path: str) -> None:
        self.path = path

    async def list_deployments(self) -> list[Deployment]:
        """Read and validate the snapshot file.

        Raises:
            ClusterReadError: If the file cannot be read or is malformed
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            raise ClusterReadError(f"Cannot read snapshot {self.path}: {e}") from e

        return decode_deployment_list(raw)
