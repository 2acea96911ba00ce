"""Counter Reconciliation CLI — recompute round counters from their sources.

Usage:
    fundfeed-reconcile --dry-run
    fundfeed-reconcile
    fundfeed-reconcile --database-url postgresql+asyncpg://... --json

Exit codes:
    0  no drift found, or drift repaired
    1  drift found in --dry-run mode
    2  store unavailable
"""

import argparse
import asyncio
import json
import logging
import sys

from fundfeed.config import get_settings
from fundfeed.core.errors import StoreUnavailableError
from fundfeed.core.records import ReconciliationReport
from fundfeed.infrastructure.database import DatabaseSessionManager
from fundfeed.infrastructure.intro_request_repository import SqlIntroRequestRepository
from fundfeed.infrastructure.observability import setup_logging
from fundfeed.infrastructure.round_repository import SqlRoundRepository
from fundfeed.infrastructure.user_repository import SqlUserRepository
from fundfeed.services.reconciliation import CounterReconciler

logger = logging.getLogger(__name__)


def report_to_dict(report: ReconciliationReport) -> dict:
    return {
        "rounds_checked": report.rounds_checked,
        "applied": report.applied,
        "unsettled": [str(round_id) for round_id in report.unsettled],
        "orphaned_follows_found": report.orphaned_follows_found,
        "orphaned_follows_pruned": report.orphaned_follows_pruned,
        "drifts": [
            {
                "round_id": str(d.round_id),
                "stored_followers": d.stored_followers,
                "actual_followers": d.actual_followers,
                "stored_intro_requests": d.stored_intro_requests,
                "actual_intro_requests": d.actual_intro_requests,
            }
            for d in report.drifts
        ],
    }


def print_report(report: ReconciliationReport) -> None:
    print(f"\n{'='*60}")
    print("RECONCILIATION RESULTS")
    print(f"{'='*60}")
    print(f"Rounds checked: {report.rounds_checked}")
    print(f"Rounds with drift: {len(report.drifts)}")
    for d in report.drifts:
        print(
            f"  {d.round_id}: followers {d.stored_followers} -> {d.actual_followers}, "
            f"intro requests {d.stored_intro_requests} -> {d.actual_intro_requests}"
        )
    print(f"Rounds left for next run: {len(report.unsettled)}")
    print(f"Orphaned follows found: {report.orphaned_follows_found}")
    print(f"Orphaned follows pruned: {report.orphaned_follows_pruned}")
    print(f"Applied: {report.applied}")


async def run_reconciliation(
    database_url: str, dry_run: bool, settle_seconds: float,
) -> ReconciliationReport:
    manager = DatabaseSessionManager(database_url)
    try:
        async with manager.session() as db:
            reconciler = CounterReconciler(
                SqlRoundRepository(db),
                SqlUserRepository(db),
                SqlIntroRequestRepository(db),
                settle_seconds=settle_seconds,
            )
            return await reconciler.run(dry_run=dry_run)
    finally:
        await manager.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fundfeed-reconcile",
        description="Recompute follower and intro request counters",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Report drift without writing corrections",
    )
    parser.add_argument(
        "--database-url", type=str, default=None,
        help="Override DATABASE_URL from the environment",
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        help="Override LOG_LEVEL (default: from settings)",
    )
    parser.add_argument(
        "--settle-seconds", type=float, default=None,
        help="Wait between the two scans (default: RECONCILE_SETTLE_SECONDS)",
    )
    parser.add_argument("--json", action="store_true", help="Output the report as JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level, settings.log_format)

    settle_seconds = args.settle_seconds
    if settle_seconds is None:
        settle_seconds = settings.reconcile_settle_seconds

    try:
        report = asyncio.run(run_reconciliation(
            args.database_url or settings.database_url, args.dry_run, settle_seconds,
        ))
    except StoreUnavailableError as e:
        logger.error(f"Reconciliation aborted: {e.message}")
        return 2

    if args.json:
        print(json.dumps(report_to_dict(report), indent=2))
    else:
        print_report(report)

    has_drift = bool(report.drifts) or report.orphaned_follows_found > 0
    return 1 if args.dry_run and has_drift else 0


if __name__ == "__main__":
    sys.exit(main())
