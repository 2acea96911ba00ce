"""Counter Reconciliation — batch repair of follower and intro request counters.

Invariants:
    - Never runs in a request path; invoked by the fundfeed-reconcile CLI
    - Each scan reads users and intro requests before rounds, so a round
      created mid-scan is never reported as an orphan target
    - A counter is corrected only when a second scan, settle_seconds later,
      reports the same drift; drift that moved is listed as unsettled and
      left for the next run
    - Corrections are applied as atomic deltas (actual - stored), so follows
      that land while the job runs are not overwritten
    - dry_run reports drift and orphaned follows from one scan without writing
    - Orphaned follows (ids of deleted rounds) are removed from users' sets
"""

import asyncio
import logging

from fundfeed.core.domain_types import RoundField
from fundfeed.core.reconcile import (
    count_followers, compute_drift, find_orphaned_follows, split_settled,
)
from fundfeed.core.records import (
    CounterDrift, FundraisingRound, ReconciliationReport, UserProfile,
)
from fundfeed.core.repository_protocols import (
    RoundRepository, UserRepository, IntroRequestRepository,
)

logger = logging.getLogger(__name__)


class CounterReconciler:
    """Recomputes derived counters from the relation and request tables."""

    def __init__(
        self,
        rounds: RoundRepository,
        users: UserRepository,
        intro_requests: IntroRequestRepository,
        settle_seconds: float = 1.0,
    ):
        self.rounds = rounds
        self.users = users
        self.intro_requests = intro_requests
        self.settle_seconds = settle_seconds

    async def _scan(
        self,
    ) -> tuple[list[FundraisingRound], list[UserProfile], list[CounterDrift]]:
        users = await self.users.list_all()
        intro_counts = await self.intro_requests.count_by_round()
        rounds = await self.rounds.list_all()
        drifts = compute_drift(rounds, count_followers(users), intro_counts)
        return rounds, users, drifts

    async def run(self, dry_run: bool = False) -> ReconciliationReport:
        rounds, users, drifts = await self._scan()
        orphans = find_orphaned_follows(users, {r.id for r in rounds})
        report = ReconciliationReport(
            rounds_checked=len(rounds),
            drifts=drifts,
            orphaned_follows_found=sum(len(ids) for ids in orphans.values()),
        )

        for drift in drifts:
            logger.warning(
                "Counter drift detected",
                extra={
                    "round_id": str(drift.round_id),
                    "drift": {
                        "followers": [drift.stored_followers, drift.actual_followers],
                        "intro_requests": [
                            drift.stored_intro_requests, drift.actual_intro_requests,
                        ],
                    },
                },
            )

        if dry_run:
            return report

        if drifts:
            await asyncio.sleep(self.settle_seconds)
            _, _, rescanned = await self._scan()
            drifts, report.unsettled = split_settled(drifts, rescanned)
            for round_id in report.unsettled:
                logger.info(
                    "Counter drift changed between scans, left for next run",
                    extra={"round_id": str(round_id)},
                )

        for drift in drifts:
            follower_delta = drift.actual_followers - drift.stored_followers
            if follower_delta:
                await self.rounds.increment_field(
                    drift.round_id, RoundField.FOLLOWER_COUNT, follower_delta,
                )
            intro_delta = drift.actual_intro_requests - drift.stored_intro_requests
            if intro_delta:
                await self.rounds.increment_field(
                    drift.round_id, RoundField.INTRO_REQUEST_COUNT, intro_delta,
                )

        for user_id, dead_ids in orphans.items():
            for round_id in dead_ids:
                if await self.users.remove_followed_round(user_id, round_id):
                    report.orphaned_follows_pruned += 1

        report.applied = True
        logger.info(
            f"Reconciliation applied: {len(drifts)} round(s) corrected, "
            f"{len(report.unsettled)} unsettled, "
            f"{report.orphaned_follows_pruned} orphaned follow(s) pruned",
        )
        return report
