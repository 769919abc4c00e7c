"""Audit configuration and config file loading."""

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import aiofiles

from ..exceptions import ConfigError

CONFIG_ENV_VAR = "IMAGE_ROT_CONFIG"
DEFAULT_CONFIG_FILE = "image-rot.json"


@dataclass
class AuditConfig:
    """Settings for one audit run."""

    clusters: list[str] = field(default_factory=list)
    git_repository: Optional[str] = None
    ignore_unknown: bool = False
    timeout: Optional[float] = None
    concurrency: Optional[int] = None

    def merged(self, **overrides: Any) -> "AuditConfig":
        """Return a copy with every non-None override applied."""
        return replace(
            self, **{key: value for key, value in overrides.items() if value is not None}
        )


def _check_type(key: str, value: Any, expected: tuple[type, ...]) -> None:
    # bool is an int subclass, keep it out of numeric settings
    if isinstance(value, bool) and bool not in expected:
        raise ConfigError(f"Config key {key!r} has invalid value: {value!r}")
    if not isinstance(value, expected):
        raise ConfigError(f"Config key {key!r} has invalid value: {value!r}")


def parse_config(data: Any) -> AuditConfig:
    """Build an AuditConfig from a decoded config document.

    Keys may be hyphenated ("git-repository") or use underscores.

    Raises:
        ConfigError: If the document has unknown keys or invalid values
    """
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object")

    known = {f.name for f in fields(AuditConfig)}
    values: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = raw_key.replace("-", "_")
        if key not in known:
            raise ConfigError(f"Unknown config key: {raw_key!r}")
        values[key] = value

    if "clusters" in values:
        clusters = values["clusters"]
        if not isinstance(clusters, list) or not all(
            isinstance(name, str) for name in clusters
        ):
            raise ConfigError(f"Config key 'clusters' has invalid value: {clusters!r}")
    if values.get("git_repository") is not None:
        _check_type("git-repository", values["git_repository"], (str,))
    if "ignore_unknown" in values:
        _check_type("ignore-unknown", values["ignore_unknown"], (bool,))
    if values.get("timeout") is not None:
        _check_type("timeout", values["timeout"], (int, float))
    if values.get("concurrency") is not None:
        _check_type("concurrency", values["concurrency"], (int,))
        if values["concurrency"] < 1:
            raise ConfigError("Config key 'concurrency' must be at least 1")

    return AuditConfig(**values)


def default_config_path() -> Optional[Path]:
    """Locate the config file from the environment or the working directory."""
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    local_path = Path(DEFAULT_CONFIG_FILE)
    if local_path.exists():
        return local_path
    return None


async def load_config(path: Optional[Path] = None) -> AuditConfig:
    """Load the audit configuration.

    Args:
        path: JSON config file (None falls back to the default location)

    Returns:
        AuditConfig, with defaults when no config file exists

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    if path is None:
        path = default_config_path()
        if path is None:
            return AuditConfig()

    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    return parse_config(data)
