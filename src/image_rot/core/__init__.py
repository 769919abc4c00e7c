"""External collaborators: cluster, git history, processes and config."""

from .cluster import ApiClusterReader, KubectlClusterReader, SnapshotClusterReader
from .config import AuditConfig, load_config
from .history import GitHistoryReader

__all__ = [
    "ApiClusterReader",
    "KubectlClusterReader",
    "SnapshotClusterReader",
    "GitHistoryReader",
    "AuditConfig",
    "load_config",
]
