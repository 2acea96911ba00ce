"""Users — the caller's own profile and followed rounds.

Invariants:
    - PUT /me creates the profile on first call and merges afterwards; fields
      the client leaves out keep their stored values
    - PATCH /me changes an existing profile only (404 before the first PUT)
    - followedRounds is never written here
"""

import logging

from fastapi import APIRouter, Depends

from fundfeed.api.dependencies import (
    get_current_user_id, get_ledger, get_user_repository,
)
from fundfeed.core.domain_types import UserId
from fundfeed.core.errors import ResourceNotFoundError
from fundfeed.infrastructure.user_repository import SqlUserRepository
from fundfeed.schemas.round import RoundListResponse, RoundResponse
from fundfeed.schemas.user import ProfileResponse, ProfileUpdate, ProfileUpsert
from fundfeed.services.engagement_ledger import EngagementLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.put("/me", response_model=ProfileResponse)
async def upsert_my_profile(
    body: ProfileUpsert,
    user_id: UserId = Depends(get_current_user_id),
    users: SqlUserRepository = Depends(get_user_repository),
):
    profile = await users.upsert(user_id, body.model_dump(exclude_unset=True))
    logger.info("Profile saved", extra={"user_id": user_id})
    return ProfileResponse.from_record(profile)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdate,
    user_id: UserId = Depends(get_current_user_id),
    users: SqlUserRepository = Depends(get_user_repository),
):
    await users.update(user_id, body.model_dump(exclude_none=True))
    profile = await users.get_by_id(user_id)
    if profile is None:
        raise ResourceNotFoundError("UserProfile", str(user_id))
    logger.info("Profile updated", extra={"user_id": user_id})
    return ProfileResponse.from_record(profile)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_id: UserId = Depends(get_current_user_id),
    users: SqlUserRepository = Depends(get_user_repository),
):
    profile = await users.get_by_id(user_id)
    if profile is None:
        raise ResourceNotFoundError("UserProfile", str(user_id))
    return ProfileResponse.from_record(profile)


@router.get("/me/following", response_model=RoundListResponse)
async def list_my_followed_rounds(
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    rounds = await ledger.list_followed_rounds(user_id)
    return RoundListResponse(rounds=[RoundResponse.from_record(r) for r in rounds])
