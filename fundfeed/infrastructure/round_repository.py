"""Round Repository — SQLAlchemy implementation of RoundRepository.

Invariants:
    - ORM rows never escape: every read returns core FundraisingRound records
    - Counter deltas are single UPDATE ... SET col = col + :delta statements
      (no read-modify-write); decrements are floored at 0 in SQL
    - Every write advances updated_at; created_at is never written after insert
    - Sort keys are mapped through a column whitelist; row id ascending is the
      final tie-break so equal rounds keep a stable order between calls
    - Deleting a round deletes its intro requests in the same commit

Design Decisions:
    - populate_existing on reads: atomic UPDATEs bypass the identity map, so
      reads must overwrite any cached row state
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import select, update, delete, case
from sqlalchemy.ext.asyncio import AsyncSession

from fundfeed.core.domain_types import RoundId, UserId, RoundField
from fundfeed.core.errors import ResourceNotFoundError
from fundfeed.core.ranking import OrderKey
from fundfeed.core.records import FundraisingRound, NewRound
from fundfeed.infrastructure.database import map_store_errors
from fundfeed.models.fundraising_round import FundraisingRound as RoundRow
from fundfeed.models.intro_request import IntroRequest as IntroRequestRow

logger = logging.getLogger(__name__)

_COLUMNS = {
    RoundField.CREATED_AT: RoundRow.created_at,
    RoundField.FOLLOWER_COUNT: RoundRow.follower_count,
    RoundField.INTRO_REQUEST_COUNT: RoundRow.intro_request_count,
}

_COUNTER_FIELDS = (RoundField.FOLLOWER_COUNT, RoundField.INTRO_REQUEST_COUNT)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_round_record(row: RoundRow) -> FundraisingRound:
    return FundraisingRound(
        id=RoundId(row.id),
        company_name=row.company_name,
        description=row.description,
        raising_amount=float(row.raising_amount),
        currency=row.currency,
        logo_url=row.logo_url,
        deck_url=row.deck_url,
        founder_id=UserId(row.founder_id),
        follower_count=row.follower_count,
        intro_request_count=row.intro_request_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _select_rounds():
    return select(RoundRow).execution_options(populate_existing=True)


class SqlRoundRepository:
    """Round persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, new_round: NewRound) -> RoundId:
        now = _utcnow()
        row = RoundRow(
            company_name=new_round.company_name,
            description=new_round.description,
            raising_amount=new_round.raising_amount,
            currency=new_round.currency,
            logo_url=new_round.logo_url,
            deck_url=new_round.deck_url,
            founder_id=new_round.founder_id,
            follower_count=0,
            intro_request_count=0,
            created_at=now,
            updated_at=now,
        )
        async with map_store_errors("insert_round", self.db):
            self.db.add(row)
            await self.db.commit()
        return RoundId(row.id)

    async def get_by_id(self, round_id: RoundId) -> FundraisingRound | None:
        async with map_store_errors("get_round", self.db):
            result = await self.db.execute(
                _select_rounds().where(RoundRow.id == round_id),
            )
            row = result.scalar_one_or_none()
        return to_round_record(row) if row else None

    async def list_ordered_by(
        self, keys: Sequence[OrderKey], limit: int,
    ) -> list[FundraisingRound]:
        order = []
        for key in keys:
            column = _COLUMNS[key.field]
            order.append(column.desc() if key.descending else column.asc())
        order.append(RoundRow.id.asc())
        async with map_store_errors("list_rounds", self.db):
            result = await self.db.execute(
                _select_rounds().order_by(*order).limit(limit),
            )
            rows = result.scalars().all()
        return [to_round_record(r) for r in rows]

    async def list_by_founder(self, founder_id: UserId) -> list[FundraisingRound]:
        async with map_store_errors("list_rounds_by_founder", self.db):
            result = await self.db.execute(
                _select_rounds()
                .where(RoundRow.founder_id == founder_id)
                .order_by(RoundRow.created_at.desc(), RoundRow.id.asc()),
            )
            rows = result.scalars().all()
        return [to_round_record(r) for r in rows]

    async def list_all(self) -> list[FundraisingRound]:
        async with map_store_errors("list_all_rounds", self.db):
            result = await self.db.execute(
                _select_rounds().order_by(RoundRow.id.asc()),
            )
            rows = result.scalars().all()
        return [to_round_record(r) for r in rows]

    async def update(self, round_id: RoundId, fields: dict[str, object]) -> None:
        async with map_store_errors("update_round", self.db):
            result = await self.db.execute(
                update(RoundRow)
                .where(RoundRow.id == round_id)
                .values(**fields, updated_at=_utcnow())
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
        if result.rowcount == 0:
            raise ResourceNotFoundError("FundraisingRound", str(round_id))

    async def delete(self, round_id: RoundId) -> None:
        async with map_store_errors("delete_round", self.db):
            await self.db.execute(
                delete(IntroRequestRow)
                .where(IntroRequestRow.round_id == round_id)
                .execution_options(synchronize_session=False),
            )
            result = await self.db.execute(
                delete(RoundRow)
                .where(RoundRow.id == round_id)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
        if result.rowcount == 0:
            raise ResourceNotFoundError("FundraisingRound", str(round_id))

    async def increment_field(
        self, round_id: RoundId, field: RoundField, delta: int,
    ) -> bool:
        """Atomically add delta to a counter. Returns False if the round is gone."""
        if field not in _COUNTER_FIELDS:
            raise ValueError(f"{field.value} is not a counter")
        column = _COLUMNS[field]
        new_value = column + delta
        if delta < 0:
            new_value = case((column + delta < 0, 0), else_=column + delta)
        async with map_store_errors("increment_counter", self.db):
            result = await self.db.execute(
                update(RoundRow)
                .where(RoundRow.id == round_id)
                .values({column.key: new_value, "updated_at": _utcnow()})
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
        return result.rowcount > 0

