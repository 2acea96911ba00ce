"""Engagement Ledger, intro requests — tests for at-most-one per (investor, round).

Tests cover:
    - First request creates a pending record and bumps intro_request_count
    - Repeat requests return the same id with created=False
    - Concurrent requests by one investor create exactly one record
    - A lost uniqueness race resolves to the winner's id, no extra increment
    - Different investors / rounds are independent
    - Status updates accept only pending | accepted | declined
"""

import asyncio
from uuid import uuid4

import pytest

from fundfeed.core.domain_types import IntroRequestId, IntroStatus, RoundId, UserId
from fundfeed.core.errors import (
    AuthRequiredError, FieldValidationError, ResourceNotFoundError,
)


async def test_first_request_creates_pending_record(ledger, rounds, intro_requests):
    r = rounds.add("Acme")

    outcome = await ledger.request_intro(UserId("inv-1"), r.id, "Acme", "Hi!")

    assert outcome.created is True
    stored = intro_requests.rows[outcome.request_id]
    assert stored.investor_id == "inv-1"
    assert stored.round_id == r.id
    assert stored.startup_name == "Acme"
    assert stored.status == IntroStatus.PENDING
    assert stored.message == "Hi!"
    assert stored.created_at is not None
    assert rounds.rows[r.id].intro_request_count == 1


async def test_repeat_request_returns_existing_id(ledger, rounds):
    r = rounds.add()
    first = await ledger.request_intro(UserId("inv-1"), r.id, "Acme")
    second = await ledger.request_intro(UserId("inv-1"), r.id, "Acme")

    assert second.already_existed
    assert second.request_id == first.request_id
    assert rounds.rows[r.id].intro_request_count == 1


async def test_concurrent_requests_create_one_record(ledger, rounds, intro_requests):
    r = rounds.add()

    outcomes = await asyncio.gather(
        *(ledger.request_intro(UserId("inv-1"), r.id, "Acme") for _ in range(4)),
    )

    assert sum(o.created for o in outcomes) == 1
    assert len({o.request_id for o in outcomes}) == 1
    assert len(intro_requests.rows) == 1
    assert rounds.rows[r.id].intro_request_count == 1


async def test_lost_race_resolves_to_existing(ledger, rounds, intro_requests):
    r = rounds.add()
    winner = intro_requests.add("inv-1", r.id)
    intro_requests.stale_lookups = 1

    outcome = await ledger.request_intro(UserId("inv-1"), r.id, "Acme")

    assert outcome.created is False
    assert outcome.request_id == winner.id
    assert intro_requests.insert_attempts == 1
    assert rounds.rows[r.id].intro_request_count == 0


async def test_pairs_are_independent(ledger, rounds):
    r1, r2 = rounds.add("One"), rounds.add("Two")

    a = await ledger.request_intro(UserId("inv-1"), r1.id, "One")
    b = await ledger.request_intro(UserId("inv-2"), r1.id, "One")
    c = await ledger.request_intro(UserId("inv-1"), r2.id, "Two")

    assert a.created and b.created and c.created
    assert len({a.request_id, b.request_id, c.request_id}) == 3
    assert rounds.rows[r1.id].intro_request_count == 2
    assert rounds.rows[r2.id].intro_request_count == 1


async def test_request_requires_identity(ledger, rounds):
    r = rounds.add()
    with pytest.raises(AuthRequiredError):
        await ledger.request_intro(UserId(""), r.id, "Acme")


async def test_request_requires_startup_name(ledger, rounds):
    r = rounds.add()
    with pytest.raises(FieldValidationError):
        await ledger.request_intro(UserId("inv-1"), r.id, "  ")


async def test_request_for_unknown_round(ledger, intro_requests):
    with pytest.raises(ResourceNotFoundError):
        await ledger.request_intro(UserId("inv-1"), RoundId(uuid4()), "Phantom")
    assert intro_requests.rows == {}


async def test_has_intro_request(ledger, rounds):
    r = rounds.add()
    assert await ledger.has_intro_request(UserId("inv-1"), r.id) is False
    await ledger.request_intro(UserId("inv-1"), r.id, "Acme")
    assert await ledger.has_intro_request(UserId("inv-1"), r.id) is True


@pytest.mark.parametrize("status", ["accepted", "declined", IntroStatus.PENDING])
async def test_update_status(ledger, rounds, status):
    r = rounds.add()
    outcome = await ledger.request_intro(UserId("inv-1"), r.id, "Acme")

    updated = await ledger.update_intro_request_status(outcome.request_id, status)

    assert updated.status == IntroStatus(status)


async def test_update_status_rejects_unknown_value(ledger, rounds):
    r = rounds.add()
    outcome = await ledger.request_intro(UserId("inv-1"), r.id, "Acme")
    with pytest.raises(FieldValidationError):
        await ledger.update_intro_request_status(outcome.request_id, "archived")


async def test_update_status_unknown_request(ledger):
    with pytest.raises(ResourceNotFoundError):
        await ledger.update_intro_request_status(
            IntroRequestId(uuid4()), IntroStatus.ACCEPTED,
        )


async def test_list_for_investor_and_round(ledger, rounds):
    r1, r2 = rounds.add(), rounds.add()
    await ledger.request_intro(UserId("inv-1"), r1.id, "A")
    await ledger.request_intro(UserId("inv-1"), r2.id, "B")
    await ledger.request_intro(UserId("inv-2"), r1.id, "A")

    mine = await ledger.list_intro_requests_for_investor(UserId("inv-1"))
    for_r1 = await ledger.list_intro_requests_for_round(r1.id)

    assert {r.round_id for r in mine} == {r1.id, r2.id}
    assert {r.investor_id for r in for_r1} == {"inv-1", "inv-2"}
