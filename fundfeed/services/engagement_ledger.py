"""Engagement Ledger — follow relations, intro requests, and their derived counters.

Invariants:
    - follow/unfollow touch the counter only when set membership actually changed,
      so repeated or concurrent calls move follower_count by at most 1
    - The user relation is written before the counter delta; a failed delta is
      logged as counter drift and re-raised (the reconciler repairs it)
    - unfollow never drives follower_count below 0
    - At most one intro request per (investor, round): an existing request, or
      a UniquenessConflictError from the store, resolves to the same id with
      created=False and no second counter increment
    - is_following reads the followed set, never the counter

Design Decisions:
    - find_by_key before insert is only a fast path; the store's uniqueness
      constraint decides races
    - Status transitions are unconstrained within the IntroStatus enum
"""

import logging
from uuid import UUID

from fundfeed.core.domain_types import (
    RoundId, UserId, IntroRequestId, IntroStatus, RoundField,
)
from fundfeed.core.errors import (
    AuthRequiredError, FieldValidationError, ResourceNotFoundError,
    StoreUnavailableError, UniquenessConflictError,
)
from fundfeed.core.records import (
    FundraisingRound, IntroRequest, IntroRequestOutcome, NewIntroRequest,
)
from fundfeed.core.repository_protocols import (
    RoundRepository, UserRepository, IntroRequestRepository,
)

logger = logging.getLogger(__name__)


class EngagementLedger:
    """Applies engagement mutations exactly once and keeps counters in step."""

    def __init__(
        self,
        rounds: RoundRepository,
        users: UserRepository,
        intro_requests: IntroRequestRepository,
    ):
        self.rounds = rounds
        self.users = users
        self.intro_requests = intro_requests

    # ─── Follow / Unfollow ──────────────────────────────────────

    async def follow(self, user_id: UserId, round_id: RoundId) -> bool:
        """Follow a round. Returns True if this call created the relation."""
        _require_identity(user_id)
        if await self.rounds.get_by_id(round_id) is None:
            raise ResourceNotFoundError("FundraisingRound", str(round_id))

        if not await self.users.add_followed_round(user_id, round_id):
            logger.debug(
                "Already following, no-op",
                extra={"user_id": user_id, "round_id": str(round_id)},
            )
            return False

        await self._apply_counter_delta(
            round_id, RoundField.FOLLOWER_COUNT, 1, user_id,
        )
        logger.info(
            "Round followed", extra={"user_id": user_id, "round_id": str(round_id)},
        )
        return True

    async def unfollow(self, user_id: UserId, round_id: RoundId) -> bool:
        """Unfollow a round. Returns True if this call removed the relation."""
        _require_identity(user_id)
        if not await self.users.remove_followed_round(user_id, round_id):
            logger.debug(
                "Not following, no-op",
                extra={"user_id": user_id, "round_id": str(round_id)},
            )
            return False

        await self._apply_counter_delta(
            round_id, RoundField.FOLLOWER_COUNT, -1, user_id,
        )
        logger.info(
            "Round unfollowed", extra={"user_id": user_id, "round_id": str(round_id)},
        )
        return True

    async def is_following(self, user_id: UserId, round_id: RoundId) -> bool:
        profile = await self.users.get_by_id(user_id)
        if profile is None:
            return False
        return round_id in profile.followed_rounds

    async def list_followed_rounds(self, user_id: UserId) -> list[FundraisingRound]:
        """Rounds the user follows, in follow order; deleted rounds are skipped."""
        profile = await self.users.get_by_id(user_id)
        if profile is None:
            raise ResourceNotFoundError("UserProfile", str(user_id))
        followed = []
        for round_id in profile.followed_rounds:
            found = await self.rounds.get_by_id(round_id)
            if found is not None:
                followed.append(found)
        return followed

    # ─── Intro Requests ─────────────────────────────────────────

    async def request_intro(
        self,
        investor_id: UserId,
        round_id: RoundId,
        startup_name: str,
        message: str | None = None,
    ) -> IntroRequestOutcome:
        """Create the (investor, round) intro request once; later calls return its id."""
        _require_identity(investor_id)
        if not isinstance(startup_name, str) or not startup_name.strip():
            raise FieldValidationError("startup_name is required", "startup_name")

        existing = await self.intro_requests.find_by_key(investor_id, round_id)
        if existing is not None:
            logger.debug(
                "Intro already requested",
                extra={"user_id": investor_id, "request_id": str(existing.id)},
            )
            return IntroRequestOutcome(request_id=existing.id, created=False)

        if await self.rounds.get_by_id(round_id) is None:
            raise ResourceNotFoundError("FundraisingRound", str(round_id))

        try:
            request_id = await self.intro_requests.insert_unique(NewIntroRequest(
                investor_id=investor_id,
                round_id=round_id,
                startup_name=startup_name.strip(),
                message=message.strip() if message and message.strip() else None,
            ))
        except UniquenessConflictError as e:
            return IntroRequestOutcome(
                request_id=IntroRequestId(UUID(e.existing_id)), created=False,
            )

        await self._apply_counter_delta(
            round_id, RoundField.INTRO_REQUEST_COUNT, 1, investor_id,
        )
        logger.info(
            "Intro requested",
            extra={
                "user_id": investor_id,
                "round_id": str(round_id),
                "request_id": str(request_id),
            },
        )
        return IntroRequestOutcome(request_id=request_id, created=True)

    async def has_intro_request(self, investor_id: UserId, round_id: RoundId) -> bool:
        return await self.intro_requests.find_by_key(investor_id, round_id) is not None

    async def get_intro_request(self, request_id: IntroRequestId) -> IntroRequest:
        found = await self.intro_requests.get_by_id(request_id)
        if found is None:
            raise ResourceNotFoundError("IntroRequest", str(request_id))
        return found

    async def update_intro_request_status(
        self, request_id: IntroRequestId, status: IntroStatus | str,
    ) -> IntroRequest:
        try:
            new_status = IntroStatus(status)
        except ValueError:
            raise FieldValidationError(
                f"status must be one of {[s.value for s in IntroStatus]}", "status",
            )
        if not await self.intro_requests.update_status(request_id, new_status):
            raise ResourceNotFoundError("IntroRequest", str(request_id))
        logger.info(
            f"Intro request status set to {new_status.value}",
            extra={"request_id": str(request_id)},
        )
        return await self.get_intro_request(request_id)

    async def list_intro_requests_for_investor(
        self, investor_id: UserId,
    ) -> list[IntroRequest]:
        return await self.intro_requests.list_by_investor(investor_id)

    async def list_intro_requests_for_round(
        self, round_id: RoundId,
    ) -> list[IntroRequest]:
        return await self.intro_requests.list_by_round(round_id)

    # ─── Internals ──────────────────────────────────────────────

    async def _apply_counter_delta(
        self, round_id: RoundId, field: RoundField, delta: int, user_id: UserId,
    ) -> None:
        """Second half of a two-step mutation: relation already written."""
        extra = {
            "round_id": str(round_id), "user_id": user_id,
            "field": field.value, "delta": delta,
        }
        try:
            applied = await self.rounds.increment_field(round_id, field, delta)
        except StoreUnavailableError:
            logger.error(
                "Counter drift: relation written but counter delta failed",
                extra=extra,
            )
            raise
        if not applied:
            logger.warning(
                "Counter drift: round disappeared before counter delta",
                extra=extra,
            )


def _require_identity(user_id: UserId) -> None:
    if not user_id or not str(user_id).strip():
        raise AuthRequiredError()
