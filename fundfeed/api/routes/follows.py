"""Follows — follow/unfollow a round and read the button state.

Invariants:
    - POST and DELETE are idempotent: repeating them returns 200 with changed=false
    - `following` comes from the user's followed set, never from the counter
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from fundfeed.api.dependencies import get_current_user_id, get_ledger
from fundfeed.core.domain_types import RoundId, UserId
from fundfeed.schemas.engagement import FollowStateResponse
from fundfeed.services.engagement_ledger import EngagementLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rounds", tags=["follows"])


async def _follower_count(ledger: EngagementLedger, round_id: RoundId) -> int | None:
    found = await ledger.rounds.get_by_id(round_id)
    return found.follower_count if found else None


@router.post("/{round_id}/follow", response_model=FollowStateResponse)
async def follow_round(
    round_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    changed = await ledger.follow(user_id, RoundId(round_id))
    return FollowStateResponse(
        round_id=round_id, following=True, changed=changed,
        follower_count=await _follower_count(ledger, RoundId(round_id)),
    )


@router.delete("/{round_id}/follow", response_model=FollowStateResponse)
async def unfollow_round(
    round_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    changed = await ledger.unfollow(user_id, RoundId(round_id))
    return FollowStateResponse(
        round_id=round_id, following=False, changed=changed,
        follower_count=await _follower_count(ledger, RoundId(round_id)),
    )


@router.get("/{round_id}/follow", response_model=FollowStateResponse)
async def get_follow_state(
    round_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    following = await ledger.is_following(user_id, RoundId(round_id))
    return FollowStateResponse(
        round_id=round_id, following=following,
        follower_count=await _follower_count(ledger, RoundId(round_id)),
    )
