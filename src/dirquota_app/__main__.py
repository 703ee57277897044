"""
Main entry point for DirQuota.

Usage:
    python -m dirquota_app [--config settings.cfg] [--log-file program.log]
    dirquota  (if installed)

Run it from cron. Everything it does is appended to the log file; only
startup failures are printed to the terminal.
"""

import argparse
import logging
import sys
import traceback
from pathlib import Path
from datetime import datetime
from typing import List, Optional

from dirquota_core.adapters.config_file import read_config
from dirquota_core.adapters.local_fs import LocalFS
from dirquota_core.adapters.logging_sink import LoggingEventSink
from dirquota_core.domain.errors import StartupError
from dirquota_core.services.enforcer import QuotaEnforcer, DEFAULT_MAX_CONSECUTIVE_DENIALS
from dirquota_core.services.runner import QuotaRunService

DEFAULT_CONFIG = "settings.cfg"
DEFAULT_LOG_FILE = "program.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

EXIT_OK = 0
EXIT_STARTUP_FAILED = 1

logger = logging.getLogger("dirquota")


def write_crash_log(log_file: Path):
    """Append the exception being handled to a crash log beside the run log."""
    crash_log = log_file.parent / "crash_log.txt"
    with open(crash_log, "a", encoding="utf-8") as f:
        f.write(f"\n{'='*60}\n")
        f.write(f"UNHANDLED EXCEPTION at {datetime.now()}\n")
        f.write(f"{'='*60}\n")
        f.write(traceback.format_exc())
        f.write("\n")


def setup_logging(log_file: Path, verbose: bool = False) -> logging.Handler:
    """
    Attach an append-mode file handler to the dirquota logger.

    Raises:
        StartupError: If the log file cannot be opened
    """
    try:
        # Undecodable filenames arrive as surrogate escapes
        handler = logging.FileHandler(log_file, mode="a", encoding="utf-8",
                                      errors="backslashreplace")
    except OSError as e:
        raise StartupError(f"cannot open log file {log_file}: {e}") from e

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    # Core modules log through their own module loggers
    core_logger = logging.getLogger("dirquota_core")
    core_logger.addHandler(handler)
    core_logger.setLevel(logger.level)
    core_logger.propagate = False
    return handler


def teardown_logging(handler: logging.Handler):
    for name in ("dirquota", "dirquota_core"):
        logging.getLogger(name).removeHandler(handler)
    handler.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirquota",
        description="Delete the oldest files in each configured directory "
                    "until it fits its size limit.",
    )
    parser.add_argument("--config", type=Path, default=Path(DEFAULT_CONFIG),
                        help=f"Config file (default: {DEFAULT_CONFIG})")
    parser.add_argument("--log-file", type=Path, default=Path(DEFAULT_LOG_FILE),
                        help=f"Log file, appended to (default: {DEFAULT_LOG_FILE})")
    parser.add_argument("--dry-run", action="store_true",
                        help="Log what would be deleted without deleting anything")
    parser.add_argument("--max-denials", type=int, default=DEFAULT_MAX_CONSECUTIVE_DENIALS,
                        help="Give up on a directory after this many undeletable "
                             "files in a row; 0 tries every file "
                             f"(default: {DEFAULT_MAX_CONSECUTIVE_DENIALS})")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug details")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run DirQuota once and return the process exit status."""
    args = build_parser().parse_args(argv)
    if args.max_denials < 0:
        print("dirquota: --max-denials must not be negative", file=sys.stderr)
        return EXIT_STARTUP_FAILED

    try:
        handler = setup_logging(args.log_file, args.verbose)
    except StartupError as e:
        print(f"dirquota: {e}", file=sys.stderr)
        return EXIT_STARTUP_FAILED

    try:
        logger.info("Program started: %s", datetime.now())
        try:
            quotas = read_config(args.config)
        except StartupError as e:
            logger.error("Cannot load configuration: %s", e)
            print(f"dirquota: {e}", file=sys.stderr)
            return EXIT_STARTUP_FAILED

        enforcer = QuotaEnforcer(
            fs=LocalFS(),
            events=LoggingEventSink(logger),
            max_consecutive_denials=args.max_denials or None,
            dry_run=args.dry_run,
        )
        QuotaRunService(enforcer).run(quotas)
        return EXIT_OK
    except Exception:
        logger.exception("Unhandled error, see crash log")
        write_crash_log(args.log_file)
        raise
    finally:
        teardown_logging(handler)


if __name__ == "__main__":
    sys.exit(main())
