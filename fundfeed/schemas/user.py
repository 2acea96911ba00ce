"""User Schemas — profile create/merge on first authentication.

Invariants:
    - followedRounds is read-only over HTTP (changed only via follow/unfollow)
    - role in {founder, investor, both}
    - PUT sends only the fields the client set; defaults apply on creation
"""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from fundfeed.core.domain_types import UserRole
from fundfeed.core.records import UserProfile
from fundfeed.schemas.base import CamelModel


class ProfileUpsert(CamelModel):
    email: str = Field("", max_length=320)
    display_name: str = Field("", max_length=200)
    photo_url: str | None = Field(None, max_length=2048)
    role: UserRole = UserRole.FOUNDER


class ProfileUpdate(CamelModel):
    """Partial profile update for an existing profile."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid",
    )

    email: str | None = Field(None, max_length=320)
    display_name: str | None = Field(None, max_length=200)
    photo_url: str | None = Field(None, max_length=2048)
    role: UserRole | None = None


class ProfileResponse(CamelModel):
    id: str
    email: str
    display_name: str
    photo_url: str | None = None
    role: UserRole
    followed_rounds: list[UUID]
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, p: UserProfile) -> "ProfileResponse":
        return cls(
            id=p.id,
            email=p.email,
            display_name=p.display_name,
            photo_url=p.photo_url,
            role=p.role,
            followed_rounds=list(p.followed_rounds),
            created_at=p.created_at,
        )
