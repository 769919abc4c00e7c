"""Image age and rot report building."""

import logging
import time
from datetime import datetime, tzinfo
from typing import Optional, Protocol

from .models import ContainerRow, Deployment, ReportRow
from .resolver import HistoryReader, enrich_rows

logger = logging.getLogger(__name__)

MS_PER_DAY = 24 * 60 * 60 * 1000

COLUMNS = [
    "Namespace",
    "Deployment",
    "Container Name",
    "Image created",
    "Image age",
    "Image rot",
]


class ClusterReader(Protocol):
    """Read-only view of the cluster deployments."""

    async def list_deployments(self) -> list[Deployment]: ...


def flatten_deployments(deployments: list[Deployment]) -> list[ContainerRow]:
    """Create one row per container of every deployment, in listing order."""
    return [
        ContainerRow(
            namespace=deployment.namespace,
            deployment=deployment.name,
            container=container.name,
            image=container.image,
        )
        for deployment in deployments
        for container in deployment.containers
    ]


def _whole_days(delta_ms: int) -> int:
    # Truncate toward zero so negative differences round like positive ones
    return int(delta_ms / MS_PER_DAY)


def age_days(now_ms: int, created_ms: Optional[int]) -> Optional[int]:
    """Whole days between now and the image creation, None when unknown."""
    if created_ms is None:
        return None
    return _whole_days(now_ms - created_ms)


def rot_days(newest_ms: Optional[int], created_ms: Optional[int]) -> Optional[int]:
    """Whole days between the image and the newest image of its series."""
    if newest_ms is None or created_ms is None:
        return None
    return _whole_days(newest_ms - created_ms)


def format_date(timestamp_ms: Optional[int], tz: Optional[tzinfo] = None) -> str:
    """Format a millisecond timestamp as YYYY-MM-DD (local time by default)."""
    if timestamp_ms is None:
        return ""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz).strftime("%Y-%m-%d")


def format_days(days: Optional[int]) -> str:
    """Format a day count for display, empty when unknown."""
    if days is None:
        return ""
    return f"{days} days"


def to_report_rows(
    rows: list[ContainerRow],
    now_ms: int,
    ignore_unknown: bool = False,
    tz: Optional[tzinfo] = None,
) -> list[ReportRow]:
    """Compute age and rot for every row and format the table cells.

    Args:
        rows: Enriched container rows
        now_ms: Current time in milliseconds since the epoch
        ignore_unknown: Drop rows whose image creation time is unknown
        tz: Timezone for the creation date (None for local time)

    Returns:
        Report rows in input order
    """
    if ignore_unknown:
        rows = [row for row in rows if row.image_created is not None]

    report_rows = []
    for row in rows:
        rot = rot_days(row.newest_image_created, row.image_created)
        report_rows.append(
            ReportRow(
                namespace=row.namespace,
                deployment=row.deployment,
                container=row.container,
                created=format_date(row.image_created, tz),
                age=format_days(age_days(now_ms, row.image_created)),
                rot=format_days(rot),
                rot_days=rot,
            )
        )
    return report_rows


def sort_report_rows(rows: list[ReportRow]) -> list[ReportRow]:
    """Sort by namespace, then rot (unknown last), then deployment.

    The sort is stable, so rows equal on all keys keep their input order.
    """
    return sorted(
        rows,
        key=lambda row: (
            row.namespace,
            row.rot_days is None,
            row.rot_days or 0,
            row.deployment,
        ),
    )


def render_table(rows: list[ReportRow]) -> str:
    """Render report rows as a fixed-column text table."""
    cells = [
        [row.namespace, row.deployment, row.container, row.created, row.age, row.rot]
        for row in rows
    ]
    widths = [len(title) for title in COLUMNS]
    for line in cells:
        widths = [max(width, len(cell)) for width, cell in zip(widths, line)]

    def format_line(values: list[str]) -> str:
        return "  ".join(
            value.ljust(width) for value, width in zip(values, widths)
        ).rstrip()

    output = [format_line(COLUMNS), format_line(["-" * width for width in widths])]
    output.extend(format_line(line) for line in cells)
    return "\n".join(output) + "\n"


async def build_report(
    cluster: ClusterReader,
    history: Optional[HistoryReader],
    ignore_unknown: bool = False,
    now_ms: Optional[int] = None,
    tz: Optional[tzinfo] = None,
    concurrency: Optional[int] = None,
) -> list[ReportRow]:
    """Run the audit and return the sorted report rows.

    Args:
        cluster: Deployment listing reader
        history: Tag history reader (None disables image resolution)
        ignore_unknown: Drop rows whose image creation time is unknown
        now_ms: Reference time in milliseconds (defaults to the current time)
        tz: Timezone for creation dates (None for local time)
        concurrency: Maximum rows resolved at once (None for no limit)

    Returns:
        Sorted report rows

    Raises:
        ClusterReadError: If the deployment listing fails
    """
    deployments = await cluster.list_deployments()
    rows = flatten_deployments(deployments)
    logger.info(f"Found {len(rows)} containers in {len(deployments)} deployments")

    if history is None:
        logger.info("Missing git path, no git metadata will be provided!")
    else:
        failed = await enrich_rows(rows, history, concurrency)
        resolved = sum(1 for row in rows if row.image_created is not None)
        logger.info(f"Resolved {resolved} of {len(rows)} images ({failed} failed)")

    if now_ms is None:
        now_ms = int(time.time() * 1000)

    return sort_report_rows(to_report_rows(rows, now_ms, ignore_unknown, tz))
