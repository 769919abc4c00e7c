"""Data models for cluster state, history entries and report rows."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Container:
    """Container declared in a deployment pod template."""

    name: str
    image: str


@dataclass
class Deployment:
    """Deployment with its pod template containers."""

    namespace: str
    name: str
    containers: List[Container] = field(default_factory=list)


@dataclass
class ContainerRow:
    """One (deployment, container) pair, enriched with image timestamps.

    Timestamps are milliseconds since the epoch. ``image_created`` is only set
    when a tag matching the image digest was found, ``newest_image_created``
    only when ``image_created`` is set and a series prefix could be derived.
    """

    namespace: str
    deployment: str
    container: str
    image: str
    image_created: Optional[int] = None
    newest_image_created: Optional[int] = None


@dataclass
class TagLogEntry:
    """Parsed git log line."""

    timestamp: Optional[int] = None  # ms since epoch
    matched_tag: str = ""


@dataclass
class ReportRow:
    """Formatted table row. Empty strings mark unknown values."""

    namespace: str
    deployment: str
    container: str
    created: str
    age: str
    rot: str
    rot_days: Optional[int] = None
