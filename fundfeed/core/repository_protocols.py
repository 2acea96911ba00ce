"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - increment_field is an atomic delta in the store, never read-then-write
    - insert_unique raises UniquenessConflictError (carrying the existing id)
      when the (investor_id, round_id) pair is already present

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - add_followed_round / remove_followed_round are conditional writes that
      report whether membership changed; the ledger only touches the counter
      when they return True, so concurrent duplicate follows count once
"""

from collections.abc import Sequence
from typing import Protocol

from fundfeed.core.domain_types import (
    RoundId, UserId, IntroRequestId, IntroStatus, RoundField,
)
from fundfeed.core.ranking import OrderKey
from fundfeed.core.records import (
    FundraisingRound, NewRound, UserProfile, IntroRequest, NewIntroRequest,
)


class RoundRepository(Protocol):
    """Contract for fundraising round persistence — implemented by shell."""
    async def insert(self, new_round: NewRound) -> RoundId: ...
    async def get_by_id(self, round_id: RoundId) -> FundraisingRound | None: ...
    async def list_ordered_by(
        self, keys: Sequence[OrderKey], limit: int,
    ) -> list[FundraisingRound]: ...
    async def list_by_founder(self, founder_id: UserId) -> list[FundraisingRound]: ...
    async def list_all(self) -> list[FundraisingRound]: ...
    async def update(self, round_id: RoundId, fields: dict[str, object]) -> None: ...
    async def delete(self, round_id: RoundId) -> None: ...
    async def increment_field(
        self, round_id: RoundId, field: RoundField, delta: int,
    ) -> bool: ...


class UserRepository(Protocol):
    """Contract for user profile persistence — implemented by shell."""
    async def get_by_id(self, user_id: UserId) -> UserProfile | None: ...
    async def upsert(self, user_id: UserId, fields: dict[str, object]) -> UserProfile: ...
    async def update(self, user_id: UserId, fields: dict[str, object]) -> None: ...
    async def add_followed_round(self, user_id: UserId, round_id: RoundId) -> bool: ...
    async def remove_followed_round(self, user_id: UserId, round_id: RoundId) -> bool: ...
    async def list_all(self) -> list[UserProfile]: ...


class IntroRequestRepository(Protocol):
    """Contract for intro request persistence — implemented by shell."""
    async def find_by_key(
        self, investor_id: UserId, round_id: RoundId,
    ) -> IntroRequest | None: ...
    async def get_by_id(self, request_id: IntroRequestId) -> IntroRequest | None: ...
    async def insert_unique(self, new_request: NewIntroRequest) -> IntroRequestId: ...
    async def update_status(
        self, request_id: IntroRequestId, status: IntroStatus,
    ) -> bool: ...
    async def list_by_investor(self, investor_id: UserId) -> list[IntroRequest]: ...
    async def list_by_round(self, round_id: RoundId) -> list[IntroRequest]: ...
    async def count_by_round(self) -> dict[RoundId, int]: ...
