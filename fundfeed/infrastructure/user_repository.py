"""User Repository — SQLAlchemy implementation of UserRepository.

Invariants:
    - followed_rounds is written only as a de-duplicated list of round id strings
    - add/remove_followed_round lock the user row (SELECT ... FOR UPDATE) for
      the read-modify-write of the set, so concurrent follows by the same user
      change membership once
    - upsert never touches followed_rounds of an existing profile
    - upsert writes only the fields it is given; defaults fill a new row only

Design Decisions:
    - PostgreSQL is the only supported store for the single-change guarantee
      on concurrent follows by one user. SQLite ignores FOR UPDATE, so
      concurrent follows through separate sessions can each count; the SQLite
      engine is used for tests only
    - A primary-key collision on first upsert (two sign-ins racing) is resolved
      by applying the fields to the row that won
"""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fundfeed.core.domain_types import RoundId, UserId, UserRole
from fundfeed.core.errors import ResourceNotFoundError
from fundfeed.core.follow_set import with_round_added, with_round_removed
from fundfeed.core.records import UserProfile
from fundfeed.infrastructure.database import map_store_errors
from fundfeed.models.user import User as UserRow

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = frozenset({"email", "display_name", "photo_url", "role"})
_NEW_PROFILE_DEFAULTS = {"email": "", "display_name": "", "role": UserRole.FOUNDER.value}


def _parse_round_ids(raw: list | None) -> tuple[RoundId, ...]:
    ids: list[RoundId] = []
    for value in raw or []:
        try:
            ids.append(RoundId(UUID(str(value))))
        except ValueError:
            logger.warning(
                f"Ignoring malformed followed round id {value!r}",
            )
    return tuple(dict.fromkeys(ids))


def to_user_record(row: UserRow) -> UserProfile:
    return UserProfile(
        id=UserId(row.id),
        email=row.email,
        display_name=row.display_name,
        role=UserRole(row.role),
        photo_url=row.photo_url,
        followed_rounds=_parse_round_ids(row.followed_rounds),
        created_at=row.created_at,
    )


def _profile_values(fields: dict[str, object]) -> dict[str, object]:
    values = {k: v for k, v in fields.items() if k in _PROFILE_FIELDS}
    role = values.get("role")
    if isinstance(role, UserRole):
        values["role"] = role.value
    return values


class SqlUserRepository:
    """User profile persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load_row(self, user_id: UserId, *, lock: bool = False) -> UserRow | None:
        query = (
            select(UserRow)
            .where(UserRow.id == user_id)
            .execution_options(populate_existing=True)
        )
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UserId) -> UserProfile | None:
        async with map_store_errors("get_user", self.db):
            row = await self._load_row(user_id)
        return to_user_record(row) if row else None

    async def upsert(self, user_id: UserId, fields: dict[str, object]) -> UserProfile:
        values = _profile_values(fields)
        async with map_store_errors("upsert_user", self.db):
            row = await self._load_row(user_id, lock=True)
            if row is None:
                row = UserRow(
                    id=user_id, followed_rounds=[],
                    **{**_NEW_PROFILE_DEFAULTS, **values},
                )
                self.db.add(row)
            else:
                for key, value in values.items():
                    setattr(row, key, value)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.info(
                    "Concurrent profile creation, merging into existing row",
                    extra={"user_id": user_id},
                )
                row = await self._load_row(user_id, lock=True)
                if row is None:
                    raise
                for key, value in values.items():
                    setattr(row, key, value)
                await self.db.commit()
        return to_user_record(row)

    async def update(self, user_id: UserId, fields: dict[str, object]) -> None:
        """Partial update of an existing profile; never creates one."""
        values = _profile_values(fields)
        if not values:
            if await self.get_by_id(user_id) is None:
                raise ResourceNotFoundError("UserProfile", str(user_id))
            return
        async with map_store_errors("update_user", self.db):
            result = await self.db.execute(
                update(UserRow)
                .where(UserRow.id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
        if result.rowcount == 0:
            raise ResourceNotFoundError("UserProfile", str(user_id))

    async def add_followed_round(self, user_id: UserId, round_id: RoundId) -> bool:
        """Add round_id to the user's set. True if membership changed."""
        async with map_store_errors("follow_round", self.db):
            row = await self._load_row(user_id, lock=True)
            if row is None:
                await self.db.rollback()
                raise ResourceNotFoundError("UserProfile", str(user_id))
            updated = with_round_added(_parse_round_ids(row.followed_rounds), round_id)
            if updated is None:
                await self.db.rollback()
                return False
            row.followed_rounds = [str(r) for r in updated]
            await self.db.commit()
        return True

    async def remove_followed_round(self, user_id: UserId, round_id: RoundId) -> bool:
        """Remove round_id from the user's set. True if membership changed."""
        async with map_store_errors("unfollow_round", self.db):
            row = await self._load_row(user_id, lock=True)
            if row is None:
                await self.db.rollback()
                raise ResourceNotFoundError("UserProfile", str(user_id))
            updated = with_round_removed(_parse_round_ids(row.followed_rounds), round_id)
            if updated is None:
                await self.db.rollback()
                return False
            row.followed_rounds = [str(r) for r in updated]
            await self.db.commit()
        return True

    async def list_all(self) -> list[UserProfile]:
        async with map_store_errors("list_users", self.db):
            result = await self.db.execute(
                select(UserRow)
                .order_by(UserRow.id.asc())
                .execution_options(populate_existing=True),
            )
            rows = result.scalars().all()
        return [to_user_record(r) for r in rows]
