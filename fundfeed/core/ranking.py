"""Trending Rule — the two-key total order used by the discovery feed.

Invariants:
    - Primary key created_at DESC, tie-break follower_count DESC
    - Rounds equal on both keys keep the store's stable final order
      (row id ascending) — never reshuffled between calls
    - A limit is a positive integer; the result never exceeds it

Design Decisions:
    - No decay function or weights: the rule stays auditable and testable
    - TRENDING_ORDER is data, not SQL: the shell maps OrderKey fields onto
      columns through a whitelist, the in-memory path uses sort_trending()
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fundfeed.core.domain_types import RoundField
from fundfeed.core.errors import FieldValidationError
from fundfeed.core.records import FundraisingRound


@dataclass(frozen=True)
class OrderKey:
    """One sort key: a round field and its direction."""
    field: RoundField
    descending: bool = True


TRENDING_ORDER: tuple[OrderKey, ...] = (
    OrderKey(RoundField.CREATED_AT, descending=True),
    OrderKey(RoundField.FOLLOWER_COUNT, descending=True),
)


def validate_limit(limit: int) -> int:
    """Reject anything but a positive integer."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise FieldValidationError(
            f"limit must be a positive integer, got {limit!r}", "limit",
        )
    return limit


def sort_trending(
    rounds: Iterable[FundraisingRound],
    keys: Sequence[OrderKey] = TRENDING_ORDER,
) -> list[FundraisingRound]:
    """Sort by keys, last key first, relying on sort stability for ties."""
    ordered = list(rounds)
    for key in reversed(keys):
        ordered.sort(
            key=lambda r, f=key.field.value: getattr(r, f),
            reverse=key.descending,
        )
    return ordered


def is_trending_ordered(rounds: Sequence[FundraisingRound]) -> bool:
    """True if every adjacent pair respects the trending rule."""
    for a, b in zip(rounds, rounds[1:]):
        if a.created_at < b.created_at:
            return False
        if a.created_at == b.created_at and a.follower_count < b.follower_count:
            return False
    return True
