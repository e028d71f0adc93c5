"""CLI entry point for running registered tests."""

import argparse
import importlib
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from loguru import logger

from ulight.engine.decorators import get_registry
from ulight.engine.registry import TestRegistry
from ulight.engine.reporting import build_report, render_report
from ulight.engine.types import EngineConfig


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ulight",
        description="Run registered tests and print a results report",
    )
    parser.add_argument(
        "-b", "--benchmark",
        action="store_true",
        help="Report benchmark timings",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="List passed, skipped and incomplete tests",
    )
    parser.add_argument(
        "-s", "--stress",
        action="store_true",
        help="Run stress tests instead of skipping them",
    )
    parser.add_argument(
        "-r", "--reports",
        action="store_true",
        help="Print messages reported back by tests",
    )
    parser.add_argument(
        "-m", "--module",
        action="append",
        default=[],
        dest="modules",
        metavar="MODULE",
        help="Import a module that registers tests (repeatable)",
    )
    parser.add_argument(
        "--json",
        type=Path,
        default=None,
        metavar="PATH",
        help="Also write the results as JSON to PATH",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Engine log level written to stderr",
    )
    parser.add_argument(
        "names",
        nargs="*",
        metavar="NAME",
        help="Only run the named tests",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> EngineConfig:
    """Map parsed arguments to an engine configuration."""
    return EngineConfig(
        benchmark=args.benchmark,
        verbose=args.verbose,
        stress=args.stress,
        reports=args.reports,
        selected=frozenset(args.names),
    )


def run(
    argv: Optional[Sequence[str]] = None,
    registry: Optional[TestRegistry] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Execute tests and write the report.

    Args:
        argv: Command line arguments, without the program name.
        registry: Registry to execute. Defaults to the decorator registry.
        stream: Report destination. Defaults to stdout.

    Returns:
        0 if no executed test failed, 1 otherwise.
    """
    args = build_parser().parse_args(argv)
    stream = stream or sys.stdout

    if args.modules and str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))
    for module in args.modules:
        logger.debug(f"Importing test module {module}")
        importlib.import_module(module)

    if registry is None:
        registry = get_registry()
    config = registry.configure(config_from_args(args))
    registry.execute()

    result = build_report(registry)
    render_report(result, stream, config)

    if args.json is not None:
        args.json.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Wrote JSON report to {args.json}")

    return 0 if result.success else 1


def main() -> None:
    """CLI entry point."""
    argv = sys.argv[1:]
    args, _ = build_parser().parse_known_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    sys.exit(run(argv))


if __name__ == "__main__":  # pragma: no cover
    main()
