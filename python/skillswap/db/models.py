"""SQLAlchemy ORM models for SkillSwap.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are dialect-neutral so the same metadata runs on PostgreSQL
in deployment and SQLite in unit tests.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utcnow() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Association tables
# =============================================================================

user_skills_offered = Table(
    "user_skills_offered",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Uuid, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_user_skills_offered_skill_id", "skill_id"),
)

user_skills_wanted = Table(
    "user_skills_wanted",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Uuid, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_user_skills_wanted_skill_id", "skill_id"),
)


# =============================================================================
# Models
# =============================================================================


class Skill(Base):
    """A skill a user can offer or want to learn."""

    __tablename__ = "skills"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )


class User(Base):
    """Local user record mirroring one Clerk identity.

    external_id holds the Clerk user ID and is unique: there is exactly one
    local user per Clerk identity. Only the user sync service writes here.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    external_id: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    coin_balance: Mapped[int] = mapped_column(Integer, nullable=False)
    profile_picture: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=""
    )
    last_active_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("external_id", name="uq_users_external_id"),
        CheckConstraint("coin_balance >= 0", name="ck_users_coin_balance_non_negative"),
    )

    # Relationships
    skills_offered: Mapped[list["Skill"]] = relationship(
        "Skill", secondary=user_skills_offered, order_by="Skill.name"
    )
    skills_wanted: Mapped[list["Skill"]] = relationship(
        "Skill", secondary=user_skills_wanted, order_by="Skill.name"
    )
