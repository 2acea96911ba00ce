"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - RoundId wraps UUID; UserId is the identity provider's opaque string
    - IntroRequestId wraps UUID — never use bare UUID in domain logic
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

RoundId = NewType("RoundId", UUID)
UserId = NewType("UserId", str)
IntroRequestId = NewType("IntroRequestId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    """Advisory role — stored and displayed, never enforced by the ledger."""
    FOUNDER = "founder"
    INVESTOR = "investor"
    BOTH = "both"


class IntroStatus(str, Enum):
    """Intro request states — maps to DB `status` column."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class RoundField(str, Enum):
    """Round columns the store may sort on or apply atomic deltas to."""
    CREATED_AT = "created_at"
    FOLLOWER_COUNT = "follower_count"
    INTRO_REQUEST_COUNT = "intro_request_count"


class AssetKind(str, Enum):
    """Files a founder attaches to a round."""
    LOGO = "logo"
    DECK = "deck"


# Currencies offered by the launch form; any 3-letter code is accepted.
OFFERED_CURRENCIES: tuple[str, ...] = ("USD", "EUR", "GBP", "JPY", "INR")
DEFAULT_CURRENCY: str = "USD"
