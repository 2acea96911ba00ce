"""User ORM — persists the profile created/merged on first authentication.

Invariants:
    - id is the identity provider's user id (opaque string, not generated here)
    - followed_rounds holds unique round id strings; it is the sole source of
      truth for "is following"
    - role in {founder, investor, both}

Design Decisions:
    - JSON list for followed_rounds: keeps follow order and
      works on both PostgreSQL and SQLite
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fundfeed.db.base import Base


class User(Base):
    """User profile — founder, investor, or both."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('founder', 'investor', 'both')", name="ck_users_role",
        ),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, default="")
    display_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="founder",
    )
    followed_rounds: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
