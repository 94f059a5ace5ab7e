"""fullreindex command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from fullreindex.config import ReindexConfig, default_worker_count
from fullreindex.errors import ClusterConnectionError, ConfigurationError
from fullreindex.reindexer import Reindexer

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_PARTIAL = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fullreindex",
        description="Copy every document of a Solr collection into another collection "
        "using parallel hash-partitioned workers.",
    )
    parser.add_argument(
        "-s", "--source",
        required=True,
        help="Name of the source collection",
    )
    parser.add_argument(
        "-d", "--dest", "--destination",
        dest="dest",
        required=True,
        help="Name of the target collection",
    )
    parser.add_argument(
        "-z", "--cluster", "--zk",
        dest="cluster",
        required=True,
        help="Solr base URL, e.g. http://localhost:8983/solr",
    )
    parser.add_argument(
        "-n", "--total-threads", "--totalThreads",
        dest="total_threads",
        type=int,
        default=None,
        help="Total number of worker threads (default: CPU count)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every copied document",
    )
    parser.add_argument(
        "--fail-on-partial",
        action="store_true",
        help=f"Exit with status {EXIT_PARTIAL} if any worker stopped before finishing its partition",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the fullreindex command."""
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    if not argv:
        parser.print_help(sys.stderr)
        return EXIT_FAILURE

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
    )

    total_threads = args.total_threads if args.total_threads is not None else default_worker_count()
    try:
        config = ReindexConfig(
            source_collection=args.source,
            dest_collection=args.dest,
            cluster_address=args.cluster,
            worker_count=total_threads,
        )
    except ConfigurationError as exc:
        print(f"fullreindex: {exc}", file=sys.stderr)
        return EXIT_USAGE

    reindexer = Reindexer(config)
    try:
        reindexer.connect()
    except ClusterConnectionError as exc:
        print(f"fullreindex: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    print("Starting to reindex.")
    report = reindexer.run()
    print("Completed reindexing.")

    if report.failed and args.fail_on_partial:
        return EXIT_PARTIAL
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
