"""Anonymous sign-in API routes."""

import logging

from fastapi import APIRouter, Response

from proflow.auth.schemas import AnonymousSession, Identity
from proflow.auth.utils import create_access_token, new_anonymous_id
from proflow.config import get_settings
from proflow.dependencies import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/anonymous", response_model=AnonymousSession)
async def sign_in_anonymously(response: Response) -> AnonymousSession:
    """Start an anonymous session.

    The token is returned in the body and also set as an HTTP-only cookie
    so the browser client can rely on either.

    Args:
        response: Response used to set the session cookie.

    Returns:
        AnonymousSession: Token and assigned user id.
    """
    settings = get_settings()
    user_id = new_anonymous_id()
    token = create_access_token(user_id)
    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )
    logger.info(f"Anonymous session started for {user_id}")
    return AnonymousSession(access_token=token, user_id=user_id)


@router.get("/me", response_model=Identity)
async def me(current_user: CurrentUser) -> Identity:
    """Return the identity of the current session."""
    return current_user
