"""Intro Requests — investor submissions and their status.

Invariants:
    - POST checks roundId/startupName (400) before identity (401)
    - Identity is the header value; the body userId is accepted when the header
      is absent, and a body userId that disagrees with the header is rejected
    - A repeated submission is a 200 with alreadyRequested=true, never an error
    - Status may be changed by the requesting investor or the round's founder
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from fundfeed.api.dependencies import (
    get_current_user_id, get_ledger, get_optional_user_id, parse_round_id,
)
from fundfeed.core.domain_types import IntroRequestId, UserId
from fundfeed.core.errors import (
    AuthRequiredError, FieldValidationError, ForbiddenError,
)
from fundfeed.schemas.engagement import (
    IntroRequestExistsResponse, IntroRequestListResponse, IntroRequestResponse,
    IntroRequestSubmit, IntroRequestSubmitResponse, IntroStatusUpdate,
)
from fundfeed.services.engagement_ledger import EngagementLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/intro-requests", tags=["intro-requests"])


def _resolve_submitter(request: Request, body_user_id: str | None) -> UserId:
    header_id = get_optional_user_id(request)
    body_id = body_user_id.strip() if body_user_id else ""
    if header_id is None:
        if not body_id:
            raise AuthRequiredError()
        return UserId(body_id)
    if body_id and body_id != header_id:
        raise ForbiddenError("userId does not match the authenticated user")
    return header_id


@router.post("", response_model=IntroRequestSubmitResponse)
async def submit_intro_request(
    body: IntroRequestSubmit,
    request: Request,
    ledger: EngagementLedger = Depends(get_ledger),
):
    """Request an intro to a round's founder. Idempotent per (investor, round)."""
    if not body.round_id or not body.round_id.strip():
        raise FieldValidationError("Missing required fields", "roundId")
    if not body.startup_name or not body.startup_name.strip():
        raise FieldValidationError("Missing required fields", "startupName")
    investor_id = _resolve_submitter(request, body.user_id)
    round_id = parse_round_id(body.round_id)

    outcome = await ledger.request_intro(
        investor_id, round_id, body.startup_name, body.message,
    )
    if outcome.already_existed:
        payload = IntroRequestSubmitResponse(
            message="Intro already requested",
            request_id=outcome.request_id,
            already_requested=True,
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=payload.model_dump(mode="json", by_alias=True),
        )
    payload = IntroRequestSubmitResponse(
        message="Intro request sent successfully", request_id=outcome.request_id,
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=payload.model_dump(mode="json", by_alias=True),
    )


@router.get("/exists", response_model=IntroRequestExistsResponse)
async def intro_request_exists(
    round_id: str = Query(..., alias="roundId"),
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    parsed = parse_round_id(round_id)
    return IntroRequestExistsResponse(
        round_id=parsed, requested=await ledger.has_intro_request(user_id, parsed),
    )


@router.get("/mine", response_model=IntroRequestListResponse)
async def list_my_intro_requests(
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    requests = await ledger.list_intro_requests_for_investor(user_id)
    return IntroRequestListResponse(
        requests=[IntroRequestResponse.from_record(r) for r in requests],
    )


async def _require_party(
    ledger: EngagementLedger, request_id: IntroRequestId, user_id: UserId,
):
    found = await ledger.get_intro_request(request_id)
    if found.investor_id == user_id:
        return found
    owner = await ledger.rounds.get_by_id(found.round_id)
    if owner is None or owner.founder_id != user_id:
        raise ForbiddenError("Not a party to this intro request")
    return found


@router.get("/{request_id}", response_model=IntroRequestResponse)
async def get_intro_request(
    request_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    found = await _require_party(ledger, IntroRequestId(request_id), user_id)
    return IntroRequestResponse.from_record(found)


@router.patch("/{request_id}", response_model=IntroRequestResponse)
async def update_intro_request_status(
    request_id: UUID,
    body: IntroStatusUpdate,
    user_id: UserId = Depends(get_current_user_id),
    ledger: EngagementLedger = Depends(get_ledger),
):
    await _require_party(ledger, IntroRequestId(request_id), user_id)
    updated = await ledger.update_intro_request_status(
        IntroRequestId(request_id), body.status,
    )
    return IntroRequestResponse.from_record(updated)
