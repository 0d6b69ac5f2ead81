"""User sync service.

Reconciles the Clerk profile of an authenticated identity into the local
users table. Sync is idempotent: the first call creates the record with
the starting coin grant, later calls refresh profile fields and
last_active_at without touching coin_balance, bio or skills.

Absent provider values never clear local data: email and profile_picture
are only overwritten when Clerk returns a non-empty value. The display
name always has a value (see derive_display_name).

Concurrent first syncs for one identity race on the insert. The unique
constraint on users.external_id lets exactly one win; the loser gets
ConflictError (409) and may retry, at which point it takes the update path.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from skillswap.db.models import User
from skillswap.db.session import transaction
from skillswap.errors import ConflictError, StorageError, UpstreamError
from skillswap.identity.client import ClerkProfile, IdentityClientBase, IdentityProviderError
from skillswap.logging import get_logger
from skillswap.services.users import find_user_by_external_id

logger = get_logger(__name__)

DEFAULT_STARTING_COIN_BALANCE = 10
FALLBACK_DISPLAY_NAME = "User"


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a sync.

    Attributes:
        user: The persisted user record.
        created: True if this sync inserted the record.
    """

    user: User
    created: bool


def derive_display_name(profile: ClerkProfile) -> str:
    """Pick a display name for a Clerk profile.

    Order: "first last" (trimmed) -> username -> email local part -> "User".
    """
    full_name = f"{profile.first_name or ''} {profile.last_name or ''}".strip()
    if full_name:
        return full_name

    if profile.username and profile.username.strip():
        return profile.username.strip()

    if profile.email:
        local_part = profile.email.split("@")[0].strip()
        if local_part:
            return local_part

    return FALLBACK_DISPLAY_NAME


def sync_user(
    db: Session,
    identity_client: IdentityClientBase,
    external_user_id: str,
    starting_coin_balance: int = DEFAULT_STARTING_COIN_BALANCE,
) -> SyncResult:
    """Create or refresh the local user for a Clerk identity.

    Args:
        db: Database session.
        identity_client: Client for the identity provider's profile API.
        external_user_id: Verified Clerk user ID.
        starting_coin_balance: Coins granted on creation.

    Returns:
        SyncResult with the persisted user and whether it was created.

    Raises:
        UpstreamError: Clerk profile lookup failed.
        ConflictError: A concurrent sync created the same user first.
        StorageError: The database read or write failed.
    """
    try:
        profile = identity_client.get_user(external_user_id)
    except IdentityProviderError as e:
        raise UpstreamError("Failed to sync user", detail=e.message) from e

    name = derive_display_name(profile)
    now = datetime.now(UTC)

    try:
        with transaction(db):
            user = find_user_by_external_id(db, external_user_id)

            if user is None:
                user = User(
                    external_id=external_user_id,
                    name=name,
                    email=profile.email,
                    bio="",
                    coin_balance=starting_coin_balance,
                    profile_picture=profile.image_url or "",
                    last_active_at=now,
                )
                db.add(user)
                db.flush()
                created = True
            else:
                user.name = name
                if profile.email:
                    user.email = profile.email
                if profile.image_url:
                    user.profile_picture = profile.image_url
                user.last_active_at = now
                created = False
    except IntegrityError as e:
        logger.warning("user_sync_conflict", external_user_id=external_user_id)
        raise ConflictError(
            "User sync conflicted with a concurrent request. Please retry.",
            detail=str(e.orig),
        ) from e
    except SQLAlchemyError as e:
        raise StorageError("Failed to sync user", detail=str(e)) from e

    logger.info(
        "user_synced",
        external_user_id=external_user_id,
        user_id=str(user.id),
        created=created,
    )
    return SyncResult(user=user, created=created)
