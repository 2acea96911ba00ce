"""Round Schemas — Pydantic models for fundraising round endpoints.

Invariants:
    - RoundCreate: text fields stripped and non-empty, raising_amount > 0,
      currency a 3-letter code (upper-cased)
    - RoundUpdate forbids unknown keys, so counters can never be set by a client
    - RoundResponse carries every card-display field

Design Decisions:
    - field_validator for side-effect-free transforms (strip / upper)
"""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from fundfeed.core.records import FundraisingRound
from fundfeed.schemas.base import CamelModel


class RoundCreate(CamelModel):
    """Round creation — the launch form payload after asset upload."""
    company_name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    raising_amount: float = Field(gt=0)
    currency: str = Field("USD", pattern=r"^[A-Za-z]{3}$")
    logo_url: str = Field(min_length=1, max_length=2048)
    deck_url: str = Field(min_length=1, max_length=2048)

    @field_validator("company_name", "description", "logo_url", "deck_url")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class RoundUpdate(CamelModel):
    """Partial content update — only founder-editable fields."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid",
    )

    company_name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=5000)
    raising_amount: float | None = Field(None, gt=0)
    currency: str | None = Field(None, pattern=r"^[A-Za-z]{3}$")
    logo_url: str | None = Field(None, min_length=1, max_length=2048)
    deck_url: str | None = Field(None, min_length=1, max_length=2048)


class RoundResponse(CamelModel):
    """Round response — full persisted fields."""
    id: UUID
    company_name: str
    description: str
    raising_amount: float
    currency: str
    logo_url: str
    deck_url: str
    founder_id: str
    follower_count: int
    intro_request_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, r: FundraisingRound) -> "RoundResponse":
        return cls(
            id=r.id,
            company_name=r.company_name,
            description=r.description,
            raising_amount=r.raising_amount,
            currency=r.currency,
            logo_url=r.logo_url,
            deck_url=r.deck_url,
            founder_id=r.founder_id,
            follower_count=r.follower_count,
            intro_request_count=r.intro_request_count,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )


class RoundListResponse(CamelModel):
    rounds: list[RoundResponse]
    limit: int | None = None
