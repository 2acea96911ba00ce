"""Follow Set Arithmetic — pure membership operations on a user's followed rounds.

Invariants:
    - followed_rounds is logically a set: results never contain duplicates
    - Insertion order of existing members is preserved
    - Functions return None when membership would not change, so the shell
      knows to skip the write and the counter delta
"""

from collections.abc import Sequence

from fundfeed.core.domain_types import RoundId


def normalize_followed(followed: Sequence[RoundId]) -> tuple[RoundId, ...]:
    """Drop duplicate ids, keeping first occurrence."""
    return tuple(dict.fromkeys(followed))


def with_round_added(
    followed: Sequence[RoundId], round_id: RoundId,
) -> tuple[RoundId, ...] | None:
    """New followed tuple including round_id, or None if already present."""
    current = normalize_followed(followed)
    if round_id in current:
        return None
    return current + (round_id,)


def with_round_removed(
    followed: Sequence[RoundId], round_id: RoundId,
) -> tuple[RoundId, ...] | None:
    """New followed tuple without round_id, or None if it was not present."""
    current = normalize_followed(followed)
    if round_id not in current:
        return None
    return tuple(r for r in current if r != round_id)
