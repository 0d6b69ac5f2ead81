"""Clerk authentication routes.

Route handlers for syncing the authenticated Clerk identity with the local
user record. Routes are transport-only: each calls exactly one service
function.

- POST /api/clerk-auth/sync-user: Create (201) or refresh (200) the local user
- GET /api/clerk-auth/me: Full local record, 404 until the first sync
- GET /api/clerk-auth/session: Verified identity, no lookup

All routes require a valid Clerk session token (enforced by AuthMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from skillswap.api.deps import get_db, get_identity_client, get_starting_coin_balance
from skillswap.auth.middleware import AuthIdentity, get_identity
from skillswap.identity.client import IdentityClientBase
from skillswap.responses import success_response
from skillswap.schemas.user import SessionOut
from skillswap.services import user_sync as user_sync_service
from skillswap.services import users as users_service

router = APIRouter(prefix="/api/clerk-auth")


@router.post("/sync-user")
def sync_user(
    identity: Annotated[AuthIdentity, Depends(get_identity)],
    identity_client: Annotated[IdentityClientBase, Depends(get_identity_client)],
    db: Annotated[Session, Depends(get_db)],
    starting_coin_balance: Annotated[int, Depends(get_starting_coin_balance)],
    response: Response,
) -> dict:
    """Sync the Clerk user into the local database.

    Returns:
        201 with "User created and synced successfully" on first sync,
        200 with "User synced successfully" afterwards.
    """
    result = user_sync_service.sync_user(
        db,
        identity_client,
        identity.external_user_id,
        starting_coin_balance=starting_coin_balance,
    )

    if result.created:
        response.status_code = 201
        message = "User created and synced successfully"
    else:
        message = "User synced successfully"

    data = users_service.to_synced_user_out(result.user)
    return success_response(data.model_dump(mode="json", by_alias=True), message=message)


@router.get("/me")
def get_me(
    identity: Annotated[AuthIdentity, Depends(get_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get the current user's full profile with skills expanded."""
    user = users_service.get_user_profile(db, identity.external_user_id)
    return success_response(user.model_dump(mode="json", by_alias=True))


@router.get("/session")
def get_session(identity: Annotated[AuthIdentity, Depends(get_identity)]) -> dict:
    """Confirm the session is valid and echo its identifiers."""
    data = SessionOut(
        clerk_user_id=identity.external_user_id,
        session_id=identity.session_id,
    )
    return success_response(data.model_dump(by_alias=True), message="Session is valid")
