"""FundraisingRound ORM — persists a round listing and its engagement counters.

Invariants:
    - id is UUID primary key, generated at creation, immutable
    - founder_id is a non-owning back-reference to users.id
    - follower_count / intro_request_count >= 0, written only through atomic
      UPDATE ... SET col = col + delta statements
    - created_at immutable; updated_at advances on every mutation

Design Decisions:
    - Indexes on (created_at DESC, follower_count DESC) back the trending query
    - cascade delete for intro_requests: a deleted round takes its requests along
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Integer, Numeric, DateTime, CheckConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from fundfeed.db.base import Base


class FundraisingRound(Base):
    """Fundraising round — a founder's public listing."""
    __tablename__ = "fundraising_rounds"
    __table_args__ = (
        CheckConstraint("follower_count >= 0", name="ck_rounds_followers_nonneg"),
        CheckConstraint(
            "intro_request_count >= 0", name="ck_rounds_intro_requests_nonneg",
        ),
        Index("ix_rounds_trending", "created_at", "follower_count"),
        Index("ix_rounds_founder_id", "founder_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    company_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    raising_amount: Mapped[float] = mapped_column(
        Numeric(20, 2, asdecimal=False), nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD",
    )
    logo_url: Mapped[str] = mapped_column(Text, nullable=False)
    deck_url: Mapped[str] = mapped_column(Text, nullable=False)
    founder_id: Mapped[str] = mapped_column(String(128), nullable=False)
    follower_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    intro_request_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    intro_requests: Mapped[list["IntroRequest"]] = relationship(
        "IntroRequest", back_populates="round",
        cascade="all, delete-orphan", passive_deletes=True,
    )
