"""Intro Request Repository — SQLAlchemy implementation of IntroRequestRepository.

Invariants:
    - insert_unique relies on UNIQUE(investor_id, round_id); a violation is
      rolled back and surfaced as UniquenessConflictError carrying the id of
      the row that won, never as StoreUnavailableError
    - New rows always start as pending with created_at = now

Design Decisions:
    - IntegrityError is caught here, before map_store_errors sees it: this is
      the one place where an integrity failure is an expected outcome
"""

import logging

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fundfeed.core.domain_types import (
    RoundId, UserId, IntroRequestId, IntroStatus,
)
from fundfeed.core.errors import UniquenessConflictError, StoreUnavailableError
from fundfeed.core.records import IntroRequest, NewIntroRequest
from fundfeed.infrastructure.database import map_store_errors
from fundfeed.models.intro_request import IntroRequest as IntroRequestRow

logger = logging.getLogger(__name__)


def to_intro_request_record(row: IntroRequestRow) -> IntroRequest:
    return IntroRequest(
        id=IntroRequestId(row.id),
        investor_id=UserId(row.investor_id),
        round_id=RoundId(row.round_id),
        startup_name=row.startup_name,
        status=IntroStatus(row.status),
        created_at=row.created_at,
        message=row.message,
    )


def _select_requests():
    return select(IntroRequestRow).execution_options(populate_existing=True)


class SqlIntroRequestRepository:
    """Intro request persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_key(
        self, investor_id: UserId, round_id: RoundId,
    ) -> IntroRequest | None:
        async with map_store_errors("find_intro_request", self.db):
            result = await self.db.execute(
                _select_requests()
                .where(IntroRequestRow.investor_id == investor_id)
                .where(IntroRequestRow.round_id == round_id),
            )
            row = result.scalar_one_or_none()
        return to_intro_request_record(row) if row else None

    async def get_by_id(self, request_id: IntroRequestId) -> IntroRequest | None:
        async with map_store_errors("get_intro_request", self.db):
            result = await self.db.execute(
                _select_requests().where(IntroRequestRow.id == request_id),
            )
            row = result.scalar_one_or_none()
        return to_intro_request_record(row) if row else None

    async def insert_unique(self, new_request: NewIntroRequest) -> IntroRequestId:
        row = IntroRequestRow(
            investor_id=new_request.investor_id,
            round_id=new_request.round_id,
            startup_name=new_request.startup_name,
            message=new_request.message,
            status=IntroStatus.PENDING.value,
        )
        async with map_store_errors("insert_intro_request", self.db):
            try:
                self.db.add(row)
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                existing = await self.find_by_key(
                    new_request.investor_id, new_request.round_id,
                )
                if existing is None:
                    raise StoreUnavailableError(
                        "Integrity constraint violated", "insert_intro_request",
                    )
                logger.info(
                    "Intro request insert lost a uniqueness race",
                    extra={
                        "user_id": new_request.investor_id,
                        "round_id": str(new_request.round_id),
                        "request_id": str(existing.id),
                    },
                )
                raise UniquenessConflictError(str(existing.id))
        return IntroRequestId(row.id)

    async def update_status(
        self, request_id: IntroRequestId, status: IntroStatus,
    ) -> bool:
        async with map_store_errors("update_intro_request_status", self.db):
            result = await self.db.execute(
                update(IntroRequestRow)
                .where(IntroRequestRow.id == request_id)
                .values(status=status.value)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
        return result.rowcount > 0

    async def list_by_investor(self, investor_id: UserId) -> list[IntroRequest]:
        async with map_store_errors("list_intro_requests", self.db):
            result = await self.db.execute(
                _select_requests()
                .where(IntroRequestRow.investor_id == investor_id)
                .order_by(IntroRequestRow.created_at.desc()),
            )
            rows = result.scalars().all()
        return [to_intro_request_record(r) for r in rows]

    async def list_by_round(self, round_id: RoundId) -> list[IntroRequest]:
        async with map_store_errors("list_intro_requests", self.db):
            result = await self.db.execute(
                _select_requests()
                .where(IntroRequestRow.round_id == round_id)
                .order_by(IntroRequestRow.created_at.desc()),
            )
            rows = result.scalars().all()
        return [to_intro_request_record(r) for r in rows]

    async def count_by_round(self) -> dict[RoundId, int]:
        async with map_store_errors("count_intro_requests", self.db):
            result = await self.db.execute(
                select(IntroRequestRow.round_id, func.count(IntroRequestRow.id))
                .group_by(IntroRequestRow.round_id),
            )
            pairs = result.all()
        return {RoundId(round_id): count for round_id, count in pairs}
