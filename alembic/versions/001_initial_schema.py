"""Initial schema — users, fundraising_rounds, intro_requests.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("email", sa.Text, nullable=False, server_default=""),
        sa.Column("display_name", sa.Text, nullable=False, server_default=""),
        sa.Column("photo_url", sa.Text, nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="founder"),
        sa.Column("followed_rounds", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("role IN ('founder', 'investor', 'both')", name="ck_users_role"),
    )

    op.create_table(
        "fundraising_rounds",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("company_name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("raising_amount", sa.Numeric(20, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("logo_url", sa.Text, nullable=False),
        sa.Column("deck_url", sa.Text, nullable=False),
        sa.Column("founder_id", sa.String(128), nullable=False),
        sa.Column("follower_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("intro_request_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("follower_count >= 0", name="ck_rounds_followers_nonneg"),
        sa.CheckConstraint("intro_request_count >= 0", name="ck_rounds_intro_requests_nonneg"),
    )
    op.create_index("ix_rounds_trending", "fundraising_rounds", ["created_at", "follower_count"])
    op.create_index("ix_rounds_founder_id", "fundraising_rounds", ["founder_id"])

    op.create_table(
        "intro_requests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("investor_id", sa.String(128), nullable=False),
        sa.Column(
            "round_id", UUID(as_uuid=True),
            sa.ForeignKey("fundraising_rounds.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("startup_name", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("investor_id", "round_id", name="uq_intro_requests_investor_round"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')", name="ck_intro_requests_status",
        ),
    )
    op.create_index("ix_intro_requests_round_id", "intro_requests", ["round_id"])


def downgrade() -> None:
    op.drop_index("ix_intro_requests_round_id", table_name="intro_requests")
    op.drop_table("intro_requests")
    op.drop_index("ix_rounds_founder_id", table_name="fundraising_rounds")
    op.drop_index("ix_rounds_trending", table_name="fundraising_rounds")
    op.drop_table("fundraising_rounds")
    op.drop_table("users")
