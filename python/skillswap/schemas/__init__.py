"""Pydantic schemas for API responses."""

from skillswap.schemas.user import SessionOut, SkillOut, SyncedUserOut, UserOut

__all__ = [
    "SessionOut",
    "SkillOut",
    "SyncedUserOut",
    "UserOut",
]
