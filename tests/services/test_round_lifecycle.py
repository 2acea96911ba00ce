"""Round Lifecycle — tests for founder create/edit/delete.

Tests cover:
    - create_round validates and stores with zeroed counters
    - Only the founder may update or delete
    - Updates never touch counters
    - Unknown rounds raise ResourceNotFoundError
"""

from uuid import uuid4

import pytest

from fundfeed.core.domain_types import RoundId, UserId
from fundfeed.core.errors import (
    AuthRequiredError, FieldValidationError, ForbiddenError, ResourceNotFoundError,
)

FOUNDER = UserId("founder-1")


async def _create(lifecycle, **overrides):
    data = {
        "company_name": "Acme", "description": "Robots",
        "raising_amount": 500_000, "logo_url": "logos/a.png",
        "deck_url": "decks/a.pdf", "currency": "usd",
    }
    data.update(overrides)
    return await lifecycle.create_round(FOUNDER, **data)


async def test_create_round_stores_with_zero_counters(lifecycle, rounds):
    created = await _create(lifecycle)

    assert created.id in rounds.rows
    assert created.founder_id == FOUNDER
    assert created.currency == "USD"
    assert created.follower_count == 0
    assert created.intro_request_count == 0


async def test_create_round_rejects_invalid_amount(lifecycle, rounds):
    with pytest.raises(FieldValidationError):
        await _create(lifecycle, raising_amount=0)
    assert rounds.rows == {}


async def test_create_round_requires_founder(lifecycle):
    with pytest.raises(AuthRequiredError):
        await lifecycle.create_round(
            UserId(""), company_name="A", description="B", raising_amount=1,
            logo_url="l", deck_url="d",
        )


async def test_update_by_founder(lifecycle):
    created = await _create(lifecycle)

    updated = await lifecycle.update_round(
        FOUNDER, created.id, {"description": "  Better robots "},
    )

    assert updated.description == "Better robots"
    assert updated.company_name == "Acme"


async def test_update_by_other_user_forbidden(lifecycle):
    created = await _create(lifecycle)
    with pytest.raises(ForbiddenError):
        await lifecycle.update_round(UserId("intruder"), created.id, {"description": "x"})


async def test_update_rejects_counter_fields(lifecycle):
    created = await _create(lifecycle)
    with pytest.raises(FieldValidationError):
        await lifecycle.update_round(FOUNDER, created.id, {"follower_count": 100})


async def test_update_with_no_fields_returns_current(lifecycle):
    created = await _create(lifecycle)
    assert await lifecycle.update_round(FOUNDER, created.id, {}) == created


async def test_delete_by_founder(lifecycle, rounds):
    created = await _create(lifecycle)
    await lifecycle.delete_round(FOUNDER, created.id)
    assert created.id not in rounds.rows


async def test_delete_by_other_user_forbidden(lifecycle, rounds):
    created = await _create(lifecycle)
    with pytest.raises(ForbiddenError):
        await lifecycle.delete_round(UserId("intruder"), created.id)
    assert created.id in rounds.rows


async def test_get_unknown_round(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.get_round(RoundId(uuid4()))


async def test_list_founder_rounds(lifecycle, rounds):
    await _create(lifecycle, company_name="One")
    await _create(lifecycle, company_name="Two")
    rounds.add("Other", founder_id="someone-else")

    mine = await lifecycle.list_founder_rounds(FOUNDER)

    assert {r.company_name for r in mine} == {"One", "Two"}
