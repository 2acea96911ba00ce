"""Rounds — trending feed and founder CRUD for fundraising rounds.

Invariants:
    - GET /trending never returns more than the requested limit
    - Only the round's founder may PATCH/DELETE it or list its intro requests
    - Counters are never accepted in request bodies (RoundUpdate forbids them)

Design Decisions:
    - /trending and /mine registered before /{round_id} so they are not
      captured as ids
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from fundfeed.api.dependencies import (
    get_current_user_id, get_ledger, get_ranking_engine, get_round_lifecycle,
)
from fundfeed.config import get_settings
from fundfeed.core.domain_types import RoundId, UserId
from fundfeed.core.errors import FieldValidationError, ForbiddenError
from fundfeed.schemas.engagement import IntroRequestListResponse, IntroRequestResponse
from fundfeed.schemas.round import (
    RoundCreate, RoundUpdate, RoundResponse, RoundListResponse,
)
from fundfeed.services.engagement_ledger import EngagementLedger
from fundfeed.services.ranking_engine import RankingEngine
from fundfeed.services.round_lifecycle import RoundLifecycle

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rounds", tags=["rounds"])


@router.get("/trending", response_model=RoundListResponse)
async def list_trending(
    limit: int | None = Query(None, ge=1),
    engine: RankingEngine = Depends(get_ranking_engine),
):
    """Discovery feed — newest first, most-followed first among equals."""
    settings = get_settings()
    if limit is None:
        limit = settings.trending_default_limit
    if limit > settings.trending_max_limit:
        raise FieldValidationError(
            f"limit must be at most {settings.trending_max_limit}", "limit",
        )
    rounds = await engine.list_trending(limit)
    return RoundListResponse(
        rounds=[RoundResponse.from_record(r) for r in rounds], limit=limit,
    )


@router.post(
    "", response_model=RoundResponse, status_code=status.HTTP_201_CREATED,
)
async def create_round(
    body: RoundCreate,
    user_id: UserId = Depends(get_current_user_id),
    lifecycle: RoundLifecycle = Depends(get_round_lifecycle),
):
    """Publish a new fundraising round for the calling founder."""
    created = await lifecycle.create_round(
        user_id,
        company_name=body.company_name,
        description=body.description,
        raising_amount=body.raising_amount,
        currency=body.currency,
        logo_url=body.logo_url,
        deck_url=body.deck_url,
    )
    return RoundResponse.from_record(created)


@router.get("/mine", response_model=RoundListResponse)
async def list_my_rounds(
    user_id: UserId = Depends(get_current_user_id),
    lifecycle: RoundLifecycle = Depends(get_round_lifecycle),
):
    rounds = await lifecycle.list_founder_rounds(user_id)
    return RoundListResponse(rounds=[RoundResponse.from_record(r) for r in rounds])


@router.get("/{round_id}", response_model=RoundResponse)
async def get_round(
    round_id: UUID, lifecycle: RoundLifecycle = Depends(get_round_lifecycle),
):
    return RoundResponse.from_record(await lifecycle.get_round(RoundId(round_id)))


@router.patch("/{round_id}", response_model=RoundResponse)
async def update_round(
    round_id: UUID,
    body: RoundUpdate,
    user_id: UserId = Depends(get_current_user_id),
    lifecycle: RoundLifecycle = Depends(get_round_lifecycle),
):
    updated = await lifecycle.update_round(
        user_id, RoundId(round_id), body.model_dump(exclude_none=True),
    )
    return RoundResponse.from_record(updated)


@router.delete("/{round_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_round(
    round_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    lifecycle: RoundLifecycle = Depends(get_round_lifecycle),
):
    """Delete a round and its intro requests."""
    await lifecycle.delete_round(user_id, RoundId(round_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{round_id}/intro-requests", response_model=IntroRequestListResponse)
async def list_round_intro_requests(
    round_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    lifecycle: RoundLifecycle = Depends(get_round_lifecycle),
    ledger: EngagementLedger = Depends(get_ledger),
):
    """Founder view of the investors asking for an intro."""
    current = await lifecycle.get_round(RoundId(round_id))
    if current.founder_id != user_id:
        raise ForbiddenError("Only the founder can view a round's intro requests")
    requests = await ledger.list_intro_requests_for_round(RoundId(round_id))
    return IntroRequestListResponse(
        requests=[IntroRequestResponse.from_record(r) for r in requests],
    )
