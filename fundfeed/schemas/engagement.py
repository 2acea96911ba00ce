"""Engagement Schemas — follow state and intro request payloads.

Invariants:
    - IntroRequestSubmit fields are all optional at the schema level: the
      route checks roundId/startupName (400) before identity (401)
    - IntroStatusUpdate accepts only pending | accepted | declined
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from fundfeed.core.domain_types import IntroStatus
from fundfeed.core.records import IntroRequest
from fundfeed.schemas.base import CamelModel


class FollowStateResponse(CamelModel):
    """Follow/Following button state for one round."""
    round_id: UUID
    following: bool
    changed: bool = False
    follower_count: int | None = None


class IntroRequestSubmit(CamelModel):
    """Intro request submission — {roundId, startupName, userId}."""
    round_id: str | None = None
    startup_name: str | None = None
    user_id: str | None = None
    message: str | None = Field(None, max_length=2000)


class IntroRequestSubmitResponse(CamelModel):
    message: str
    request_id: UUID
    already_requested: bool = False


class IntroRequestExistsResponse(CamelModel):
    round_id: UUID
    requested: bool


class IntroStatusUpdate(CamelModel):
    status: IntroStatus


class IntroRequestResponse(CamelModel):
    id: UUID
    investor_id: str
    round_id: UUID
    startup_name: str
    status: IntroStatus
    message: str | None = None
    created_at: datetime

    @classmethod
    def from_record(cls, r: IntroRequest) -> "IntroRequestResponse":
        return cls(
            id=r.id,
            investor_id=r.investor_id,
            round_id=r.round_id,
            startup_name=r.startup_name,
            status=r.status,
            message=r.message,
            created_at=r.created_at,
        )


class IntroRequestListResponse(CamelModel):
    requests: list[IntroRequestResponse]
