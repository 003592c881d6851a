"""droidprep command-line interface.

Argparse-based CLI that initializes logging before any work starts.
Exposed via ``python -m droidprep`` and the ``droidprep`` console script.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Optional

from . import __version__
from .errors import PrepareError
from .logging_utils import LogMode, get_default_log_path, setup_logging
from .platform_paths import PLATFORM_DIR_ENV
from .project import PrepareReport, clean, prepare

LOG_MODE_ENV = "DROIDPREP_LOG_MODE"
DEBUG_ENV = "DROIDPREP_DEBUG"


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def _add_logging_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="DEBUG" if _env_flag(DEBUG_ENV) else "INFO",
        help=f"Set log level (default: INFO, DEBUG when {DEBUG_ENV} is set)",
    )
    parser.add_argument(
        "--log-mode",
        choices=[mode.value for mode in LogMode],
        default=os.environ.get(LOG_MODE_ENV, LogMode.NORMAL.value),
        help="Logging preset: quiet only shows warnings, verbose traces every file operation",
    )
    parser.add_argument(
        "--log-file",
        default=str(get_default_log_path()),
        help="Path to log file (default: per-user droidprep directory)",
    )
    parser.add_argument(
        "--log-format",
        choices=["plain", "json"],
        default="plain",
        help="Log format (plain or json)",
    )


def _build_logging_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    _add_logging_args(parent)
    return parent


def _add_project_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--project", default=".", help="Project root holding config.xml (default: cwd)")
    parser.add_argument(
        "--platform-dir",
        default=None,
        help=f"Android platform directory, relative to the project (default: ${PLATFORM_DIR_ENV} or platforms/android)",
    )


def build_parser() -> argparse.ArgumentParser:
    logging_parent = _build_logging_parent()
    parser = argparse.ArgumentParser(
        prog="droidprep",
        description="Prepare an Android platform project from its config.xml",
        parents=[logging_parent],
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=False)

    def add_subparser(name: str, **kwargs: object) -> argparse.ArgumentParser:
        parents = list(kwargs.pop("parents", []))
        parents.insert(0, logging_parent)
        return sub.add_parser(name, parents=parents, **kwargs)

    p_prepare = add_subparser("prepare", help="Synchronize config.xml, www and resources into the platform")
    _add_project_args(p_prepare)
    p_prepare.add_argument("--jvmargs", default=None, help="Value for org.gradle.jvmargs in gradle.properties")
    p_prepare.add_argument("--json", action="store_true", help="Print the prepare report as JSON")

    p_clean = add_subparser("clean", help="Remove files copied by prepare")
    _add_project_args(p_clean)
    p_clean.add_argument("--no-prepare", action="store_true", help="Skip cleaning prepared files")

    return parser


def _emit_report(report: PrepareReport, as_json: bool) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
        return
    print(f"Prepared {report.platform_root} ({report.package_name}, versionCode {report.version_code})")


def cmd_prepare(args: argparse.Namespace) -> int:
    report = prepare(args.project, platform_dir=args.platform_dir, jvmargs=args.jvmargs)
    _emit_report(report, args.json)
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    report = clean(args.project, platform_dir=args.platform_dir, no_prepare=args.no_prepare)
    logging.getLogger(__name__).info(
        "Cleaned %s (www=%s icons=%s resources=%s)",
        report.platform_root, report.www_updated, report.icons_updated, report.resources_updated,
    )
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging before doing any work
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        json_format=(args.log_format == "json"),
        log_mode=args.log_mode,
    )

    handlers = {"prepare": cmd_prepare, "clean": cmd_clean}
    handler = handlers.get(args.command or "")
    if handler is None:
        parser.print_help()
        return 2

    log = logging.getLogger(__name__)
    try:
        return handler(args)
    except PrepareError as e:
        log.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":  # Allow direct module execution
    raise SystemExit(main())
