"""User lookup and serialization."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from skillswap.db.models import User
from skillswap.errors import NotFoundError, StorageError
from skillswap.schemas.user import SkillOut, SyncedUserOut, UserOut

USER_NOT_SYNCED_MESSAGE = "User not found. Please sync your account first."


def find_user_by_external_id(
    db: Session, external_id: str, *, with_skills: bool = False
) -> User | None:
    """Return the local user for a Clerk user ID, or None."""
    stmt = select(User).where(User.external_id == external_id)
    if with_skills:
        stmt = stmt.options(selectinload(User.skills_offered), selectinload(User.skills_wanted))
    return db.execute(stmt).scalar_one_or_none()


def get_user_profile(db: Session, external_id: str) -> UserOut:
    """Load the full record for an authenticated identity.

    Raises:
        NotFoundError: The identity was never synced.
        StorageError: The lookup failed.
    """
    try:
        user = find_user_by_external_id(db, external_id, with_skills=True)
    except SQLAlchemyError as e:
        raise StorageError("Failed to load user", detail=str(e)) from e

    if user is None:
        raise NotFoundError(message=USER_NOT_SYNCED_MESSAGE)

    return to_user_out(user)


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        external_id=user.external_id,
        name=user.name,
        email=user.email,
        bio=user.bio,
        coin_balance=user.coin_balance,
        profile_picture=user.profile_picture,
        skills_offered=[SkillOut.model_validate(s) for s in user.skills_offered],
        skills_wanted=[SkillOut.model_validate(s) for s in user.skills_wanted],
        last_active_at=user.last_active_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def to_synced_user_out(user: User) -> SyncedUserOut:
    return SyncedUserOut(
        user_id=user.id,
        external_id=user.external_id,
        name=user.name,
        email=user.email,
        coin_balance=user.coin_balance,
        profile_picture=user.profile_picture,
    )
