"""Image rot - audit the age of container images deployed in a cluster."""

__version__ = "0.1.0"

from .core.cluster import ApiClusterReader, KubectlClusterReader, SnapshotClusterReader
from .core.config import AuditConfig, load_config
from .core.history import GitHistoryReader
from .exceptions import (
    ClusterReadError,
    ConfigError,
    HistoryReadError,
    ImageRotError,
    ProcessTimeoutError,
    TagLogParseError,
)
from .models import Container, ContainerRow, Deployment, ReportRow, TagLogEntry
from .report import build_report, render_table
from .resolver import enrich_rows, resolve_image

__all__ = [
    "build_report",
    "render_table",
    "enrich_rows",
    "resolve_image",
    "ApiClusterReader",
    "KubectlClusterReader",
    "SnapshotClusterReader",
    "GitHistoryReader",
    "AuditConfig",
    "load_config",
    "Container",
    "ContainerRow",
    "Deployment",
    "ReportRow",
    "TagLogEntry",
    "ImageRotError",
    "ConfigError",
    "ClusterReadError",
    "HistoryReadError",
    "TagLogParseError",
    "ProcessTimeoutError",
]
