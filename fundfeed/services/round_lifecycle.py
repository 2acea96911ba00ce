"""Round Lifecycle — founder-side create, edit and delete of fundraising rounds.

Invariants:
    - Content is validated by core/enforce_round_fields before any write
    - Only the round's founder may edit or delete it
    - Counters, founder_id and created_at are never changed here
    - Deleting a round deletes its intro requests; stale followed ids are
      left for the reconciler to prune
"""

import logging

from fundfeed.core.domain_types import RoundId, UserId, DEFAULT_CURRENCY
from fundfeed.core.enforce_round_fields import build_new_round, clean_round_update
from fundfeed.core.errors import AuthRequiredError, ForbiddenError, ResourceNotFoundError
from fundfeed.core.records import FundraisingRound
from fundfeed.core.repository_protocols import RoundRepository

logger = logging.getLogger(__name__)


class RoundLifecycle:
    """Founder operations on fundraising rounds."""

    def __init__(self, rounds: RoundRepository):
        self.rounds = rounds

    async def create_round(
        self,
        founder_id: UserId,
        *,
        company_name: str,
        description: str,
        raising_amount: float,
        logo_url: str,
        deck_url: str,
        currency: str = DEFAULT_CURRENCY,
    ) -> FundraisingRound:
        if not founder_id:
            raise AuthRequiredError()
        new_round = build_new_round(
            founder_id,
            company_name=company_name,
            description=description,
            raising_amount=raising_amount,
            logo_url=logo_url,
            deck_url=deck_url,
            currency=currency,
        )
        round_id = await self.rounds.insert(new_round)
        logger.info(
            "Round created", extra={"round_id": str(round_id), "user_id": founder_id},
        )
        return await self.get_round(round_id)

    async def get_round(self, round_id: RoundId) -> FundraisingRound:
        found = await self.rounds.get_by_id(round_id)
        if found is None:
            raise ResourceNotFoundError("FundraisingRound", str(round_id))
        return found

    async def list_founder_rounds(self, founder_id: UserId) -> list[FundraisingRound]:
        return await self.rounds.list_by_founder(founder_id)

    async def update_round(
        self, actor_id: UserId, round_id: RoundId, fields: dict[str, object],
    ) -> FundraisingRound:
        current = await self._get_owned(actor_id, round_id)
        cleaned = clean_round_update(fields)
        if not cleaned:
            return current
        await self.rounds.update(round_id, cleaned)
        logger.info(
            f"Round updated: {', '.join(sorted(cleaned))}",
            extra={"round_id": str(round_id), "user_id": actor_id},
        )
        return await self.get_round(round_id)

    async def delete_round(self, actor_id: UserId, round_id: RoundId) -> None:
        await self._get_owned(actor_id, round_id)
        await self.rounds.delete(round_id)
        logger.info(
            "Round deleted", extra={"round_id": str(round_id), "user_id": actor_id},
        )

    async def _get_owned(self, actor_id: UserId, round_id: RoundId) -> FundraisingRound:
        if not actor_id:
            raise AuthRequiredError()
        current = await self.get_round(round_id)
        if current.founder_id != actor_id:
            raise ForbiddenError(f"Only the founder can modify round '{round_id}'")
        return current
