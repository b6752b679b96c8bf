"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Cookie, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from proflow.auth.schemas import Identity
from proflow.auth.utils import decode_access_token
from proflow.db.database import get_db
from proflow.errors import AuthError
from proflow.store.base import ItemStore
from proflow.store.cache import ItemCache

security = HTTPBearer(auto_error=False)

__all__ = [
    "get_db",
    "get_store",
    "get_cache",
    "get_current_user_optional",
    "require_user",
]


def get_store(request: Request) -> ItemStore:
    """Get the application item store."""
    return request.app.state.store


def get_cache(request: Request) -> ItemCache:
    """Get the application item cache."""
    return request.app.state.cache


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    access_token: str | None = Cookie(None),
) -> Identity | None:
    """Get the current identity if signed in, None otherwise.

    Supports both Bearer token (for API clients) and cookie-based auth (for web UI).

    Args:
        credentials: HTTP Bearer token credentials.
        access_token: Access token from cookie.

    Returns:
        Identity | None: The signed-in identity or None.
    """
    token = None
    if credentials is not None:
        token = credentials.credentials
    elif access_token is not None:
        token = access_token

    if token is None:
        return None

    token_data = decode_access_token(token)
    if token_data is None:
        return None
    return Identity(user_id=token_data.user_id)


async def require_user(
    identity: Annotated[Identity | None, Depends(get_current_user_optional)],
) -> Identity:
    """Get the current identity, rejecting anonymous-less requests.

    Raises:
        AuthError: If no session is present; writes are blocked.
    """
    if identity is None:
        raise AuthError("Authentication required. Sign in before making changes.")
    return identity


# Type aliases for cleaner dependency injection
Store = Annotated[ItemStore, Depends(get_store)]
Cache = Annotated[ItemCache, Depends(get_cache)]
CurrentUser = Annotated[Identity, Depends(require_user)]
