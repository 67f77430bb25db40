# src/main.py — v1
"""CLI entry point: run, check-config, restore commands.

Usage:
    pgbackup run
    pgbackup check-config
    pgbackup restore <file> [options]

The external scheduler invokes ``pgbackup run`` once per trigger.
Exit status: 0 dump succeeded, 1 dump failed, 2 invalid configuration.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from pydantic import ValidationError

from pgbackup.config.settings import ConfigurationError, Settings, load_settings
from pgbackup.core.errors import RestoreError
from pgbackup.logging.logger import setup_logging
from pgbackup.version import __version__

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pgbackup",
        description=f"pgbackup v{__version__}: scheduled PostgreSQL backup agent",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- run ---
    p_run = subparsers.add_parser(
        "run", help="Run one backup (dump, compress, encrypt, upload, notify)",
    )
    p_run.set_defaults(func=_cmd_run)

    # --- check-config ---
    p_check = subparsers.add_parser(
        "check-config", help="Validate configuration and describe what a run does",
    )
    p_check.set_defaults(func=_cmd_check_config)

    # --- restore ---
    p_restore = subparsers.add_parser(
        "restore", help="Decrypt/decompress a backup and restore it",
    )
    p_restore.add_argument("file", type=Path, help="Backup artifact")
    p_restore.add_argument(
        "-k", "--key", default=None,
        help="Encryption key (default: $ENCRYPTION_KEY)",
    )
    p_restore.add_argument(
        "-m", "--method", choices=["gpg", "openssl"], default=None,
        help="Encryption method for files without a .gpg/.enc suffix",
    )
    p_restore.add_argument("-H", "--host", default="localhost", help="PostgreSQL host")
    p_restore.add_argument("-p", "--port", type=int, default=5432, help="PostgreSQL port")
    p_restore.add_argument("-U", "--username", default="postgres", help="PostgreSQL user")
    p_restore.add_argument("-d", "--database", default=None, help="Target database")
    p_restore.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the decoded .pgdump here instead of running pg_restore",
    )
    p_restore.set_defaults(func=_cmd_restore)

    return parser


def _load(args: argparse.Namespace) -> Settings | None:
    """Load settings; configure logging from them. None on invalid config."""
    try:
        settings = load_settings()
    except (ValidationError, ConfigurationError) as exc:
        _setup_logging(args.verbose)
        logger.error("Invalid configuration: %s", exc)
        return None

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        max_bytes=settings.log_rotation,
        backup_count=settings.log_retention,
    )
    return settings


def _cmd_run(args: argparse.Namespace) -> int:
    """Execute one backup run."""
    from pgbackup.pipeline.orchestrator import BackupPipeline

    settings = _load(args)
    if settings is None:
        return EXIT_CONFIG_ERROR

    result = BackupPipeline(settings).run()
    return result.exit_code


def _cmd_check_config(args: argparse.Namespace) -> int:
    """Validate configuration and print a summary."""
    settings = _load(args)
    if settings is None:
        return EXIT_CONFIG_ERROR

    print("Configuration OK:")
    for line in settings.describe():
        print(f"  {line}")
    return 0


def _cmd_restore(args: argparse.Namespace) -> int:
    """Decode a backup artifact and restore it (or extract it)."""
    from pgbackup.pipeline.stages.dump import ConnectionParams
    from pgbackup.restore.restorer import BackupRestorer

    _setup_logging(args.verbose)

    if args.output is None and not args.database:
        logger.error("Target database is required (-d) unless --output is given")
        return 1

    key = args.key if args.key is not None else os.environ.get("ENCRYPTION_KEY", "")
    restorer = BackupRestorer(key=key, method=args.method)

    try:
        if args.output is not None:
            restorer.extract(args.file, args.output)
        else:
            restorer.restore(
                args.file,
                ConnectionParams(
                    host=args.host,
                    port=args.port,
                    user=args.username,
                    password=os.environ.get("PGPASSWORD", os.environ.get("POSTGRES_PASSWORD", "")),
                    database=args.database,
                ),
            )
    except RestoreError as exc:
        logger.error("Restore failed: %s", exc)
        return 1
    return 0


def _setup_logging(verbose: bool) -> None:
    """Logging for commands that run without validated settings."""
    setup_logging(level="DEBUG" if verbose else "INFO", log_format="text")


if __name__ == "__main__":
    sys.exit(main())
