# src/main.py — v1
"""CLI entry point — save and load commands.

Usage:
    tabgraph save <label>... -o <directory> [options]
    tabgraph load <archive-or-directory>

Status lines go to stdout, logs to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tabgraph.config.settings import ConfigurationError, Settings
from tabgraph.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = Settings()
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    _setup_logging(settings, args.verbose)

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tabgraph",
        description=f"tabgraph v{__version__} — graph to tabular files and back",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- save ---
    p_save = subparsers.add_parser(
        "save", help="Export node labels to tabular files",
    )
    p_save.add_argument("labels", nargs="+", help="Node labels to export")
    p_save.add_argument(
        "-o", "--output", type=Path, required=True,
        help="Output directory (created if missing)",
    )
    p_save.add_argument(
        "--archive", default=None,
        help="Archive name (default from settings); empty string keeps loose files",
    )
    p_save.add_argument(
        "--no-relationships", action="store_true",
        help="Do not export relationships",
    )
    p_save.add_argument(
        "--neighbors", action="store_true",
        help="Also export labels of neighboring nodes",
    )
    p_save.add_argument(
        "--trim-values", action="store_true",
        help="Trim whitespace around string values",
    )
    p_save.set_defaults(func=_cmd_save)

    # --- load ---
    p_load = subparsers.add_parser(
        "load", help="Import a zip archive or a directory of tabular files",
    )
    p_load.add_argument("path", type=Path, help="Archive or directory")
    p_load.set_defaults(func=_cmd_load)

    return parser


def _cmd_save(args: argparse.Namespace, settings: Settings) -> int:
    """Execute an export."""
    from tabgraph.io.exporter import ExportOrchestrator

    archive = args.archive if args.archive is not None else settings.default_archive_name
    return _run(
        settings,
        lambda store: ExportOrchestrator(store, settings).save(
            args.labels,
            args.output,
            archive_name=archive,
            save_relationships=not args.no_relationships,
            consider_neighbors=args.neighbors,
            trim_values=args.trim_values,
        ),
    )


def _cmd_load(args: argparse.Namespace, settings: Settings) -> int:
    """Execute an import."""
    from tabgraph.io.importer import ImportOrchestrator

    return _run(settings, lambda store: ImportOrchestrator(store, settings).load(args.path))


def _run(settings: Settings, operation) -> int:
    """Open the configured store, run *operation*, print its status lines."""
    from tabgraph.io.run_state import RunFailedError
    from tabgraph.store.graph_store_factory import create_graph_store

    store = create_graph_store(settings)
    try:
        summary = operation(store)
    except RunFailedError as exc:
        for line in exc.lines:
            print(line)
        print(f"Error : {exc}")
        return 1
    finally:
        store.close()

    for line in summary.lines():
        print(line)
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from tabgraph.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("neo4j").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
