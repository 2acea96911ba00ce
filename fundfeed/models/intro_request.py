"""IntroRequest ORM — persists one investor's request to meet a round's founder.

Invariants:
    - UNIQUE(investor_id, round_id): at most one live request per pair; this
      constraint, not the ledger's pre-check, is the source of truth
    - status in {pending, accepted, declined}, starts pending
    - startup_name is a copy taken at request time (not re-synced on rename)
    - created_at set once

Design Decisions:
    - ON DELETE CASCADE to fundraising_rounds: requests never outlive their round
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from fundfeed.db.base import Base


class IntroRequest(Base):
    """Intro request — keyed naturally by (investor_id, round_id)."""
    __tablename__ = "intro_requests"
    __table_args__ = (
        UniqueConstraint(
            "investor_id", "round_id", name="uq_intro_requests_investor_round",
        ),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')",
            name="ck_intro_requests_status",
        ),
        Index("ix_intro_requests_round_id", "round_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    investor_id: Mapped[str] = mapped_column(String(128), nullable=False)
    round_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("fundraising_rounds.id", ondelete="CASCADE"),
        nullable=False,
    )
    startup_name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    round: Mapped["FundraisingRound"] = relationship(
        "FundraisingRound", back_populates="intro_requests",
    )
