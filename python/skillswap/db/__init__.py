"""Database module for SkillSwap.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from skillswap.db.engine import create_db_engine, get_engine
from skillswap.db.models import Base, Skill, User, user_skills_offered, user_skills_wanted
from skillswap.db.session import create_session_factory, get_db, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "create_session_factory",
    "get_engine",
    "get_db",
    "transaction",
    # Models
    "Base",
    "Skill",
    "User",
    "user_skills_offered",
    "user_skills_wanted",
]
