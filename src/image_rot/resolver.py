"""Async image timestamp resolution against git tag history."""

import asyncio
import logging
from typing import Optional, Protocol

from .exceptions import HistoryReadError, TagLogParseError
from .models import ContainerRow
from .utils.digest import extract_digest, series_prefix
from .utils.taglog import parse_tag_log

logger = logging.getLogger(__name__)


class HistoryReader(Protocol):
    """Read-only view of tag history, newest first."""

    async def query_log(self, pattern: str, newest_only: bool = False) -> str: ...


async def resolve_image(row: ContainerRow, history: HistoryReader) -> None:
    """Populate the image timestamps of one row.

    Rows without a digest, without matching history, or without a matching
    tag keep both timestamps unset. Both fields are assigned together once
    all queries succeeded.

    Args:
        row: Row to enrich in place
        history: Tag history reader

    Raises:
        TagLogParseError: If history output is malformed
        HistoryReadError: If a history query fails
    """
    digest = extract_digest(row.image)
    if not digest:
        return

    output = await history.query_log(digest)
    if not output:
        return

    entry = parse_tag_log(output, digest)
    if not entry.matched_tag:
        return

    newest_image_created: Optional[int] = None
    prefix = series_prefix(entry.matched_tag, digest)
    if prefix:
        newest_output = await history.query_log(prefix, newest_only=True)
        newest_image_created = parse_tag_log(newest_output, prefix).timestamp

    row.image_created = entry.timestamp
    row.newest_image_created = newest_image_created


async def enrich_rows(
    rows: list[ContainerRow],
    history: HistoryReader,
    concurrency: Optional[int] = None,
) -> int:
    """Resolve all rows concurrently and wait for every row to settle.

    A row whose history is unreadable or malformed is logged and left
    unresolved without affecting the other rows.

    Args:
        rows: Rows to enrich in place
        history: Tag history reader
        concurrency: Maximum rows resolved at once (None for no limit)

    Returns:
        Number of rows whose resolution failed
    """
    semaphore = asyncio.Semaphore(concurrency) if concurrency else None

    async def resolve_row(row: ContainerRow) -> bool:
        """Resolve a single row, reporting whether it succeeded."""
        try:
            if semaphore:
                async with semaphore:
                    await resolve_image(row, history)
            else:
                await resolve_image(row, history)
        except (TagLogParseError, HistoryReadError) as e:
            logger.warning(
                f"Cannot resolve image {row.image} of "
                f"{row.namespace}/{row.deployment}/{row.container}: {e}"
            )
            return False
        return True

    results = await asyncio.gather(*(resolve_row(row) for row in rows))
    return results.count(False)
