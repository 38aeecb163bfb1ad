"""Command-line entry point for the folder-mirror daemon."""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv

from . import __version__
from .config import SyncConfig
from .config_loader import ensure_config, load_hierarchical_config
from .config_schema import build_config, to_sync_config
from .log_sink import FileLogSink
from .logger import setup_logging
from .sync.reporter import format_sync_result, result_to_json
from .worker import SyncWorker

logger = logging.getLogger(__name__)


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops: Ctrl+C surfaces as KeyboardInterrupt
            logger.debug("Signal handler for %s not supported", sig)


async def main(
    config: SyncConfig, once: bool = False, json_output: bool = False
) -> int:
    """Run the worker until it stops and return its exit code."""
    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)

    sink = FileLogSink(config.log_file)
    worker = SyncWorker(config, sink, stop_event=stop_event)

    logger.info(
        "Mirroring %s -> %s every %d ms (log: %s)",
        config.source_root,
        config.replica_root,
        config.interval_ms,
        config.log_file,
    )
    exit_code = await worker.run(once=once)

    if once and worker.last_result is not None:
        if json_output:
            print(json.dumps(result_to_json(worker.last_result), indent=2))
        else:
            print(format_sync_result(worker.last_result))

    return exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folder-mirror",
        description="Periodically mirror a source directory into a replica directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Mirror every 30 seconds, logging to ./logs/mirror.log
  folder-mirror 30000 logs/mirror.log /data/source /backup/replica

  # Take everything from FOLDER_MIRROR_* env vars or .folder_mirror/config.yml
  folder-mirror

  # Single cycle with a JSON report on stdout
  folder-mirror --once --json

  # Write a starter config file
  folder-mirror --init-config

Exit codes: 0 on a requested shutdown, 255 (-1) when the source directory
is missing, 2 on a configuration error.
        """,
    )
    parser.add_argument(
        "interval_ms",
        nargs="?",
        help="Sync interval in milliseconds (overrides FOLDER_MIRROR_INTERVAL_MS and config files)",
    )
    parser.add_argument(
        "log_file",
        nargs="?",
        help="Log file path (overrides FOLDER_MIRROR_LOG_FILE and config files)",
    )
    parser.add_argument(
        "source",
        nargs="?",
        help="Source directory (overrides FOLDER_MIRROR_SOURCE and config files)",
    )
    parser.add_argument(
        "replica",
        nargs="?",
        help="Replica directory (overrides FOLDER_MIRROR_REPLICA and config files)",
    )
    parser.add_argument(
        "--config",
        help="Config file path (takes precedence over FOLDER_MIRROR_CONFIG)",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Create a starter config file and exit",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single synchronization cycle, print a report and exit",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="With --once, print the report as JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Diagnostic log format on stderr (default: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"folder-mirror version {__version__}",
    )
    return parser


def run(argv: list[str] | None = None) -> None:
    """Parse arguments, resolve configuration and run the daemon."""
    args = build_parser().parse_args(argv)

    if args.init_config:
        path = ensure_config(Path(args.config) if args.config else None)
        print(f"Config file: {path}")
        sys.exit(0)

    load_dotenv()

    try:
        unified = build_config(load_hierarchical_config(args.config))
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"ERROR: Invalid config file: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(
        debug=args.debug,
        log_file=unified.logging.file,
        log_format=args.log_format or unified.logging.format,
        level=unified.logging.level,
    )

    config_overrides = {
        key: value
        for key, value in (
            ("interval_ms", args.interval_ms),
            ("log_file", args.log_file),
            ("source", args.source),
            ("replica", args.replica),
        )
        if value
    }
    try:
        config = to_sync_config(unified, cli_overrides=config_overrides)
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        exit_code = asyncio.run(
            main(config, once=args.once, json_output=args.json)
        )
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)

    sys.exit(exit_code)


if __name__ == "__main__":
    run()
