"""Example usage of the image rot audit as a library."""

import asyncio
import logging
import sys

from image_rot import (
    GitHistoryReader,
    ImageRotError,
    KubectlClusterReader,
    build_report,
    render_table,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main(repository_path: str, context: str | None = None) -> int:
    """Audit one cluster against a local checkout."""
    try:
        cluster = KubectlClusterReader(context=context, timeout=60)
        history = GitHistoryReader(repository_path, timeout=60)

        rows = await build_report(cluster, history, ignore_unknown=True)
        print(render_table(rows), end="")

        # Highlight the stalest images
        stale = [row for row in rows if row.rot_days and row.rot_days > 30]
        for row in stale:
            logger.info(
                f"{row.namespace}/{row.deployment}/{row.container} is {row.rot} behind"
            )

    except ImageRotError as e:
        logger.error(f"Audit failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: audit_example.py <git checkout> [kube context]")
        sys.exit(2)
    sys.exit(asyncio.run(main(*sys.argv[1:3])))
