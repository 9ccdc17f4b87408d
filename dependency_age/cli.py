"""
Command-line interface for the dependency age tool.
"""

import argparse
import asyncio
import logging
import sys
from datetime import timedelta
from pathlib import Path

from .analyzer import DependencyAgeAnalyzer
from .config import DEFAULT_MAX_OLD_VERSIONS, AnalyzerConfig, default_cache_dir
from .exceptions import LockfileReadError, MalformedResolutionError
from .lockfile import DEFAULT_LOCKFILE
from .registry import DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT
from .reporting import print_summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dependency-age",
        description="Report version spread and publish age of the dependencies in a yarn.lock"
    )

    parser.add_argument(
        "lockfile",
        nargs="?",
        default=None,
        help=f"Path to the lockfile. Default: ./{DEFAULT_LOCKFILE}"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print a version table for every package"
    )

    parser.add_argument(
        "--no-cache",
        dest="cache",
        action="store_false",
        help="Ignore cached registry metadata (the cache is still refreshed)"
    )

    parser.add_argument(
        "--max-old-versions",
        type=int,
        default=DEFAULT_MAX_OLD_VERSIONS,
        help=f"Number of oldest versions to report, 0 to disable. Default: {DEFAULT_MAX_OLD_VERSIONS}"
    )

    parser.add_argument(
        "--cache-dir",
        default=None,
        help=f"Cache directory. Default: {default_cache_dir()}"
    )

    parser.add_argument(
        "--cache-ttl-hours",
        type=float,
        default=24.0,
        help="Hours before cached metadata is refetched. Default: 24"
    )

    parser.add_argument(
        "--registry-url",
        default=DEFAULT_REGISTRY_URL,
        help=f"npm registry base URL. Default: {DEFAULT_REGISTRY_URL}"
    )

    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum concurrent registry lookups. Default: unlimited"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"HTTP timeout in seconds. Default: {DEFAULT_TIMEOUT:g}"
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Export results as JSON and CSV into this directory"
    )

    parser.add_argument(
        "--get-worksheets",
        action="store_true",
        help="Also export an Excel file with one sheet per package (needs --output-dir)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level. Default: WARNING"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> AnalyzerConfig:
    options = {}
    if args.lockfile is not None:
        options["lockfile"] = Path(args.lockfile)
    if args.cache_dir is not None:
        options["cache_dir"] = Path(args.cache_dir)
    if args.output_dir is not None:
        options["output_dir"] = Path(args.output_dir)

    return AnalyzerConfig(
        verbose=args.verbose,
        use_cache=args.cache,
        max_old_versions=args.max_old_versions,
        cache_ttl=timedelta(hours=args.cache_ttl_hours),
        registry_url=args.registry_url,
        max_concurrency=args.max_concurrency,
        timeout=args.timeout,
        get_worksheets=args.get_worksheets,
        **options,
    )


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.get_worksheets and args.output_dir is None:
        parser.error("--get-worksheets requires --output-dir")

    try:
        config = config_from_args(args)
    except (ValueError, OverflowError) as e:
        parser.error(str(e))

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    analyzer = DependencyAgeAnalyzer(config)
    try:
        result = asyncio.run(analyzer.analyze())
    except (LockfileReadError, MalformedResolutionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(result.report)
    for name, path in result.exports.items():
        print(f"Saved {name} to: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
