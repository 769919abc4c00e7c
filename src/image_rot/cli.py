"""Command line entry point for the image rot audit."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from .core.cluster import ApiClusterReader, KubectlClusterReader, SnapshotClusterReader
from .core.config import AuditConfig, load_config
from .core.history import GitHistoryReader
from .exceptions import ConfigError, ImageRotError
from .report import build_report, render_table

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="image-rot",
        description=(
            "Report the age of deployed container images and how far they "
            "lag behind the newest tagged build"
        ),
    )
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument("--context", help="kubeconfig context to audit")
    parser.add_argument(
        "--git-repository",
        help="Local checkout whose tags mark built image revisions",
    )
    parser.add_argument(
        "--ignore-unknown",
        action="store_true",
        default=None,
        help="Hide containers whose image age is unknown",
    )
    parser.add_argument(
        "--api-server", help="Kubernetes API URL to query instead of kubectl"
    )
    parser.add_argument("--token", help="Bearer token for --api-server")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS verification for --api-server",
    )
    parser.add_argument(
        "--from-file",
        help="Read deployments from a saved `kubectl get deploy -A -o json` file",
    )
    parser.add_argument(
        "--timeout", type=float, help="Timeout in seconds for each external call"
    )
    parser.add_argument(
        "--concurrency", type=int, help="Maximum images resolved at once"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser.parse_args(argv)


def choose_cluster(
    clusters: list[str],
    input_func: Callable[[str], str] = input,
    interactive: Optional[bool] = None,
) -> Optional[str]:
    """Pick the cluster context to audit from the configured list.

    Args:
        clusters: Configured kubeconfig context names
        input_func: Prompt function
        interactive: Whether a prompt is possible (defaults to stdin being a tty)

    Returns:
        The chosen context, or None to use kubectl's current context

    Raises:
        ConfigError: If several clusters are configured and none can be chosen
    """
    if not clusters:
        return None
    if len(clusters) == 1:
        return clusters[0]

    if interactive is None:
        interactive = sys.stdin.isatty()
    if not interactive:
        raise ConfigError(
            "Several clusters are configured, pass --context to pick one"
        )

    prompt = "\n".join(
        [f"{index}) {name}" for index, name in enumerate(clusters, start=1)]
        + ["Cluster: "]
    )
    while True:
        try:
            answer = input_func(prompt).strip()
        except EOFError as e:
            raise ConfigError("No cluster chosen") from e
        if answer in clusters:
            return answer
        if answer.isdigit() and 1 <= int(answer) <= len(clusters):
            return clusters[int(answer) - 1]
        print(f"Invalid choice: {answer!r}", file=sys.stderr)


async def run(
    args: argparse.Namespace, config: AuditConfig, context: Optional[str] = None
) -> str:
    """Run the audit described by the arguments and config, return the table."""
    history = None
    if config.git_repository:
        history = GitHistoryReader(config.git_repository, timeout=config.timeout)

    report_options = dict(
        ignore_unknown=config.ignore_unknown, concurrency=config.concurrency
    )

    if args.from_file:
        rows = await build_report(
            SnapshotClusterReader(args.from_file), history, **report_options
        )
    elif args.api_server:
        async with ApiClusterReader(
            args.api_server,
            token=args.token,
            timeout=config.timeout or 30,
            verify_ssl=not args.insecure,
        ) as cluster:
            rows = await build_report(cluster, history, **report_options)
    else:
        cluster = KubectlClusterReader(context=context, timeout=config.timeout)
        rows = await build_report(cluster, history, **report_options)

    return render_table(rows)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = asyncio.run(load_config(args.config)).merged(
            git_repository=args.git_repository,
            ignore_unknown=args.ignore_unknown,
            timeout=args.timeout,
            concurrency=args.concurrency,
        )
        logger.debug(f"config used: {config}")

        context = None
        if not (args.from_file or args.api_server):
            context = args.context or choose_cluster(config.clusters)

        table = asyncio.run(run(args, config, context))
    except ImageRotError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        return 130

    sys.stdout.write(table)
    return 0
