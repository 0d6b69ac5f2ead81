"""Users and skills schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates users (one row per Clerk identity, unique external_id), skills,
and the two user/skill association tables.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # ==========================================================================
    # users table
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("external_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), server_default="", nullable=False),
        sa.Column("coin_balance", sa.Integer(), nullable=False),
        sa.Column("profile_picture", sa.Text(), server_default="", nullable=False),
        sa.Column("last_active_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_id", name="uq_users_external_id"),
        sa.CheckConstraint("coin_balance >= 0", name="ck_users_coin_balance_non_negative"),
    )

    # ==========================================================================
    # skills table
    # ==========================================================================
    op.create_table(
        "skills",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # ==========================================================================
    # association tables
    # ==========================================================================
    for table_name in ("user_skills_offered", "user_skills_wanted"):
        op.create_table(
            table_name,
            sa.Column("user_id", sa.Uuid(), nullable=False),
            sa.Column("skill_id", sa.Uuid(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["skill_id"], ["skills.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("user_id", "skill_id"),
        )
        op.create_index(f"ix_{table_name}_skill_id", table_name, ["skill_id"])


def downgrade() -> None:
    for table_name in ("user_skills_wanted", "user_skills_offered"):
        op.drop_index(f"ix_{table_name}_skill_id", table_name=table_name)
        op.drop_table(table_name)
    op.drop_table("skills")
    op.drop_table("users")
