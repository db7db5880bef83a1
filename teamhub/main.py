"""Command-line entry point for the TeamHub package."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .core.config import Settings, get_settings
from .core.errors import StorageError
from .core.logging_config import setup_logging
from .repositories import build_repositories, run_sync

logger = logging.getLogger(__name__)

LISTABLE = ("employees", "departments", "leaves")


def list_records(kind: str, settings: Settings) -> list[dict]:
    """Fetch every record of ``kind`` in its UI shape."""
    repos = build_repositories(settings)
    repo = {"employees": repos.employees, "departments": repos.departments, "leaves": repos.leaves}[kind]
    try:
        return [record.to_ui() for record in run_sync(repo.service.get_all())]
    finally:
        run_sync(repos.aclose())


def main(argv: Sequence[str] | None = None) -> int:
    """Parse CLI arguments and dispatch to the requested workflow."""

    parser = argparse.ArgumentParser(
        prog="teamhub",
        description="Run the TeamHub HR desktop application or dump its records.",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the bundled mock data even when the record API is configured.",
    )
    parser.add_argument(
        "--list",
        choices=LISTABLE,
        metavar="{" + ",".join(LISTABLE) + "}",
        help="Print all records of one kind as JSON and exit.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to TEAMHUB_LOG_LEVEL or INFO).",
    )

    args = parser.parse_args(None if argv is None else list(argv))

    settings = get_settings()
    if args.mock:
        settings = settings.model_copy(update={"backend": "mock"})
    setup_logging(args.log_level or settings.log_level)

    if args.list:
        try:
            records = list_records(args.list, settings)
        except StorageError as ex:
            logger.error("Could not list %s: %s", args.list, ex)
            print(f"error: {ex}", file=sys.stderr)
            return 1
        print(json.dumps(records, indent=2))
        return 0

    from .app import run_app

    return run_app(settings)


if __name__ == "__main__":
    raise SystemExit(main())
