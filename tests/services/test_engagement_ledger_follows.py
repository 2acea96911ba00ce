"""Engagement Ledger, follows — tests for exactly-once follow/unfollow.

Tests cover:
    - follow adds the round to the set and bumps follower_count by 1
    - Repeated and concurrent follows by one user count once
    - unfollow is symmetric, idempotent, and floored at 0
    - is_following reads the set, never the counter
    - A failed counter delta after the relation write surfaces as
      StoreUnavailableError and leaves the relation in place
"""

import asyncio
from uuid import uuid4

import pytest

from fundfeed.core.domain_types import RoundId, UserId
from fundfeed.core.errors import (
    AuthRequiredError, ResourceNotFoundError, StoreUnavailableError,
)


async def test_follow_adds_relation_and_increments(ledger, rounds, users):
    r = rounds.add()
    users.add("inv-1")

    assert await ledger.follow(UserId("inv-1"), r.id) is True
    assert r.id in users.rows["inv-1"].followed_rounds
    assert rounds.rows[r.id].follower_count == 1


async def test_repeated_follow_is_noop(ledger, rounds, users):
    r = rounds.add()
    users.add("inv-1")
    await ledger.follow(UserId("inv-1"), r.id)

    assert await ledger.follow(UserId("inv-1"), r.id) is False
    assert rounds.rows[r.id].follower_count == 1
    assert users.rows["inv-1"].followed_rounds == (r.id,)


async def test_concurrent_follows_by_same_user_count_once(ledger, rounds, users):
    r = rounds.add()
    users.add("inv-1")

    results = await asyncio.gather(
        *(ledger.follow(UserId("inv-1"), r.id) for _ in range(5)),
    )

    assert results.count(True) == 1
    assert rounds.rows[r.id].follower_count == 1


async def test_follows_by_different_users_each_count(ledger, rounds, users):
    r = rounds.add()
    for uid in ("a", "b", "c"):
        users.add(uid)

    await asyncio.gather(*(ledger.follow(UserId(u), r.id) for u in ("a", "b", "c")))

    assert rounds.rows[r.id].follower_count == 3


async def test_follow_unknown_round_raises_not_found(ledger, users, rounds):
    users.add("inv-1")
    with pytest.raises(ResourceNotFoundError):
        await ledger.follow(UserId("inv-1"), RoundId(uuid4()))
    assert rounds.increment_calls == 0


async def test_follow_without_identity_raises(ledger, rounds):
    r = rounds.add()
    with pytest.raises(AuthRequiredError):
        await ledger.follow(UserId(""), r.id)


async def test_unfollow_removes_and_decrements(ledger, rounds, users):
    r = rounds.add()
    users.add("inv-1")
    await ledger.follow(UserId("inv-1"), r.id)

    assert await ledger.unfollow(UserId("inv-1"), r.id) is True
    assert users.rows["inv-1"].followed_rounds == ()
    assert rounds.rows[r.id].follower_count == 0


async def test_unfollow_when_not_following_is_noop(ledger, rounds, users):
    r = rounds.add(follower_count=4)
    users.add("inv-1")

    assert await ledger.unfollow(UserId("inv-1"), r.id) is False
    assert rounds.rows[r.id].follower_count == 4


async def test_unfollow_never_goes_negative(ledger, rounds, users):
    r = rounds.add(follower_count=0)
    users.add("inv-1", followed=[r.id])

    assert await ledger.unfollow(UserId("inv-1"), r.id) is True
    assert rounds.rows[r.id].follower_count == 0


async def test_unfollow_of_deleted_round_still_clears_relation(ledger, rounds, users):
    gone = RoundId(uuid4())
    users.add("inv-1", followed=[gone])

    assert await ledger.unfollow(UserId("inv-1"), gone) is True
    assert users.rows["inv-1"].followed_rounds == ()


async def test_is_following_reads_set_not_counter(ledger, rounds, users):
    r = rounds.add(follower_count=10)
    users.add("inv-1")
    assert await ledger.is_following(UserId("inv-1"), r.id) is False

    stale = rounds.add(follower_count=0)
    users.add("inv-2", followed=[stale.id])
    assert await ledger.is_following(UserId("inv-2"), stale.id) is True


async def test_is_following_unknown_user_is_false(ledger, rounds):
    r = rounds.add()
    assert await ledger.is_following(UserId("nobody"), r.id) is False


async def test_failed_counter_delta_keeps_relation(ledger, rounds, users, caplog):
    r = rounds.add()
    users.add("inv-1")
    rounds.fail_increments = True

    with pytest.raises(StoreUnavailableError):
        await ledger.follow(UserId("inv-1"), r.id)

    assert r.id in users.rows["inv-1"].followed_rounds
    assert rounds.rows[r.id].follower_count == 0
    assert "Counter drift" in caplog.text


async def test_list_followed_rounds_skips_deleted(ledger, rounds, users):
    kept = rounds.add("Kept")
    users.add("inv-1", followed=[kept.id, RoundId(uuid4())])

    followed = await ledger.list_followed_rounds(UserId("inv-1"))

    assert [r.company_name for r in followed] == ["Kept"]


async def test_list_followed_rounds_unknown_user(ledger):
    with pytest.raises(ResourceNotFoundError):
        await ledger.list_followed_rounds(UserId("nobody"))
