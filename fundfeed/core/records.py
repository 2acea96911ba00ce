"""Domain Records — typed, immutable snapshots of persisted entities.

Invariants:
    - Records are the only shape that crosses the repository boundary
      (ORM rows and raw dicts never reach core or services)
    - follower_count / intro_request_count are read-only here — only the
      Engagement Ledger changes them, and only through atomic store deltas
    - followed_rounds is a tuple with unique entries (a set with stable order)

Design Decisions:
    - frozen dataclasses over pydantic: core stays dependency-free; pydantic
      lives at the HTTP boundary (schemas/)
    - Single mapping layer in infrastructure/*_repository.py
"""

from dataclasses import dataclass, field
from datetime import datetime

from fundfeed.core.domain_types import (
    RoundId, UserId, IntroRequestId, UserRole, IntroStatus,
)


@dataclass(frozen=True)
class FundraisingRound:
    """A fundraising campaign listing published by a founder."""
    id: RoundId
    company_name: str
    description: str
    raising_amount: float
    currency: str
    logo_url: str
    deck_url: str
    founder_id: UserId
    follower_count: int
    intro_request_count: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NewRound:
    """Validated content for a round that has not been stored yet."""
    company_name: str
    description: str
    raising_amount: float
    currency: str
    logo_url: str
    deck_url: str
    founder_id: UserId


@dataclass(frozen=True)
class UserProfile:
    """A user as known to the ledger; id matches the authentication identity."""
    id: UserId
    email: str
    display_name: str
    role: UserRole
    photo_url: str | None = None
    followed_rounds: tuple[RoundId, ...] = ()
    created_at: datetime | None = None


@dataclass(frozen=True)
class IntroRequest:
    """An investor's one-time request to meet a round's founder."""
    id: IntroRequestId
    investor_id: UserId
    round_id: RoundId
    startup_name: str
    status: IntroStatus
    created_at: datetime
    message: str | None = None


@dataclass(frozen=True)
class NewIntroRequest:
    """Intro request content before insertion (status is always pending)."""
    investor_id: UserId
    round_id: RoundId
    startup_name: str
    message: str | None = None


@dataclass(frozen=True)
class IntroRequestOutcome:
    """Unified result of request_intro — created now, or already existed."""
    request_id: IntroRequestId
    created: bool

    @property
    def already_existed(self) -> bool:
        return not self.created


@dataclass(frozen=True)
class CounterDrift:
    """Stored vs. recomputed counter values for one round."""
    round_id: RoundId
    stored_followers: int
    actual_followers: int
    stored_intro_requests: int
    actual_intro_requests: int

    @property
    def has_drift(self) -> bool:
        return (
            self.stored_followers != self.actual_followers
            or self.stored_intro_requests != self.actual_intro_requests
        )


@dataclass
class ReconciliationReport:
    """Summary of one reconciliation pass."""
    rounds_checked: int = 0
    drifts: list[CounterDrift] = field(default_factory=list)
    orphaned_follows_found: int = 0
    orphaned_follows_pruned: int = 0
    applied: bool = False
    unsettled: list[RoundId] = field(default_factory=list)
