"""Cron entry point for removing staging directories left by crashed uploads."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from src.media_catalog.logging import configure_logging
from src.media_catalog.media.staging_area import StagingArea

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(slots=True)
class CleanupSummary:
    removed: int
    dry_run: bool


def perform_cleanup(
    root: Path,
    *,
    ttl_seconds: int,
    dry_run: bool,
    reference_time: datetime | None = None,
) -> CleanupSummary:
    """Execute cleanup logic and return summary counters."""
    staging = StagingArea(root=root)
    max_age = timedelta(seconds=ttl_seconds)
    now = reference_time or datetime.now(timezone.utc)

    if dry_run:
        return CleanupSummary(removed=len(staging.list_stale(max_age, now)), dry_run=True)

    return CleanupSummary(removed=staging.cleanup_stale(max_age, now), dry_run=False)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove stale media staging directories.")
    parser.add_argument("--root", type=Path, default=os.getenv("STAGING_ROOT"), help="Staging root directory.")
    parser.add_argument(
        "--ttl-seconds",
        type=int,
        default=int(os.getenv("STAGING_TTL_SECONDS", DEFAULT_TTL_SECONDS)),
        help="Remove directories older than this many seconds.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting files.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    if args.root is None:
        print("cleanup failed: staging root not configured (--root or STAGING_ROOT)", file=sys.stderr)
        return 2
    configure_logging()
    try:
        summary = perform_cleanup(Path(args.root), ttl_seconds=args.ttl_seconds, dry_run=args.dry_run)
    except OSError as exc:
        print(f"cleanup failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"cleanup dry-run, staging_stale={summary.removed}", file=sys.stdout)
    else:
        print(f"cleanup done, staging_removed={summary.removed}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
