"""Ranking Engine — produces the discovery feed in trending order.

Invariants:
    - Returns at most `limit` rounds, fewer only if fewer exist
    - Order follows core/ranking.TRENDING_ORDER; ties keep the store's stable order
    - Full records are returned (no partial projections)
    - StoreUnavailableError propagates unchanged; no internal retry
"""

import logging

from fundfeed.core.ranking import TRENDING_ORDER, validate_limit
from fundfeed.core.records import FundraisingRound
from fundfeed.core.repository_protocols import RoundRepository

logger = logging.getLogger(__name__)


class RankingEngine:
    """Reads the trending feed from the round store."""

    def __init__(self, rounds: RoundRepository):
        self.rounds = rounds

    async def list_trending(self, limit: int) -> list[FundraisingRound]:
        limit = validate_limit(limit)
        rounds = await self.rounds.list_ordered_by(TRENDING_ORDER, limit)
        logger.debug(
            "Trending feed loaded", extra={"limit": limit, "count": len(rounds)},
        )
        return rounds[:limit]
