"""Request Dependencies — caller identity and per-request service wiring.

Invariants:
    - Identity comes from the header named by settings.identity_header, set by
      the upstream identity provider; it is trusted as given
    - A missing or blank identity on a protected route raises AuthRequiredError
    - All services in one request share the request's AsyncSession

Design Decisions:
    - Services built per request from the injected session instead of module
      globals, so tests swap the store by overriding get_db alone
"""

from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fundfeed.config import get_settings
from fundfeed.core.domain_types import RoundId, UserId
from fundfeed.core.errors import AuthRequiredError, FieldValidationError
from fundfeed.infrastructure.database import get_db
from fundfeed.infrastructure.intro_request_repository import SqlIntroRequestRepository
from fundfeed.infrastructure.round_repository import SqlRoundRepository
from fundfeed.infrastructure.user_repository import SqlUserRepository
from fundfeed.services.engagement_ledger import EngagementLedger
from fundfeed.services.ranking_engine import RankingEngine
from fundfeed.services.round_lifecycle import RoundLifecycle


def get_optional_user_id(request: Request) -> UserId | None:
    value = request.headers.get(get_settings().identity_header, "")
    value = value.strip()
    return UserId(value) if value else None


def get_current_user_id(request: Request) -> UserId:
    user_id = get_optional_user_id(request)
    if user_id is None:
        raise AuthRequiredError()
    return user_id


def parse_round_id(raw: str, field: str = "roundId") -> RoundId:
    try:
        return RoundId(UUID(str(raw).strip()))
    except ValueError:
        raise FieldValidationError(f"{field} is not a valid round id", field)


def get_ledger(db: AsyncSession = Depends(get_db)) -> EngagementLedger:
    return EngagementLedger(
        SqlRoundRepository(db), SqlUserRepository(db), SqlIntroRequestRepository(db),
    )


def get_ranking_engine(db: AsyncSession = Depends(get_db)) -> RankingEngine:
    return RankingEngine(SqlRoundRepository(db))


def get_round_lifecycle(db: AsyncSession = Depends(get_db)) -> RoundLifecycle:
    return RoundLifecycle(SqlRoundRepository(db))


def get_user_repository(db: AsyncSession = Depends(get_db)) -> SqlUserRepository:
    return SqlUserRepository(db)
