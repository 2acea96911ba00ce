"""Counter Reconciliation Rules — recompute derived counters from their sources of truth.

Invariants:
    - follower_count(r) == number of distinct users whose followed set contains r
    - intro_request_count(r) == number of intro request rows for r
    - Pure: takes snapshots, returns drift descriptors; the shell applies fixes
    - Followed ids with no matching round are reported as orphans
    - A drift is confirmed only when two scans report it with identical values

Design Decisions:
    - Batch recomputation, not inline repair: a failed counter delta in the
      request path is logged and left for this job
"""

from collections import Counter
from collections.abc import Iterable, Mapping

from fundfeed.core.domain_types import RoundId, UserId
from fundfeed.core.follow_set import normalize_followed
from fundfeed.core.records import FundraisingRound, UserProfile, CounterDrift


def count_followers(users: Iterable[UserProfile]) -> Counter[RoundId]:
    """Followers per round id, counting each user at most once per round."""
    counts: Counter[RoundId] = Counter()
    for user in users:
        counts.update(normalize_followed(user.followed_rounds))
    return counts


def compute_drift(
    rounds: Iterable[FundraisingRound],
    follower_counts: Mapping[RoundId, int],
    intro_request_counts: Mapping[RoundId, int],
) -> list[CounterDrift]:
    """Drift descriptor for every round whose stored counters disagree."""
    drifts = []
    for r in rounds:
        drift = CounterDrift(
            round_id=r.id,
            stored_followers=r.follower_count,
            actual_followers=follower_counts.get(r.id, 0),
            stored_intro_requests=r.intro_request_count,
            actual_intro_requests=intro_request_counts.get(r.id, 0),
        )
        if drift.has_drift:
            drifts.append(drift)
    return drifts


def find_orphaned_follows(
    users: Iterable[UserProfile], live_round_ids: set[RoundId],
) -> dict[UserId, tuple[RoundId, ...]]:
    """Per user, the followed ids that no longer reference a round."""
    orphans = {}
    for user in users:
        dead = tuple(r for r in normalize_followed(user.followed_rounds)
                     if r not in live_round_ids)
        if dead:
            orphans[user.id] = dead
    return orphans


def split_settled(
    first: Iterable[CounterDrift], second: Iterable[CounterDrift],
) -> tuple[list[CounterDrift], list[RoundId]]:
    """Drifts seen identically in both scans, and the round ids that moved.

    A follow or intro request that lands between the relation read and the
    counter read shows up as drift in one scan only.
    """
    latest = {d.round_id: d for d in second}
    settled, unsettled = [], []
    for drift in first:
        if latest.get(drift.round_id) == drift:
            settled.append(drift)
        else:
            unsettled.append(drift.round_id)
    return settled, unsettled
