"""User-related Pydantic schemas.

Response models for the /api/clerk-auth endpoints. Field names follow
Python conventions; the JSON keys the browser client reads are set through
serialization aliases, so always dump with by_alias=True.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "SkillOut",
    "SyncedUserOut",
    "UserOut",
    "SessionOut",
]


class SkillOut(BaseModel):
    """A skill expanded inside a user record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    category: str | None = None
    description: str = ""


class SyncedUserOut(BaseModel):
    """Public subset of a user returned by sync-user."""

    user_id: UUID = Field(serialization_alias="userId")
    external_id: str = Field(serialization_alias="clerkId")
    name: str
    email: str | None = None
    coin_balance: int = Field(serialization_alias="coins")
    profile_picture: str = Field(default="", serialization_alias="profilePicture")


class UserOut(BaseModel):
    """Full user record with related skills expanded, returned by me."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str = Field(serialization_alias="clerkId")
    name: str
    email: str | None = None
    bio: str = ""
    coin_balance: int = Field(serialization_alias="coins")
    profile_picture: str = Field(default="", serialization_alias="profilePicture")
    skills_offered: list[SkillOut] = Field(default_factory=list, serialization_alias="skillsOffered")
    skills_wanted: list[SkillOut] = Field(default_factory=list, serialization_alias="skillsWanted")
    last_active_at: datetime | None = Field(default=None, serialization_alias="lastActiveAt")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class SessionOut(BaseModel):
    """Verified session identity returned by the session liveness check."""

    clerk_user_id: str = Field(serialization_alias="clerkUserId")
    session_id: str = Field(serialization_alias="sessionId")
