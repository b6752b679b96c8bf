"""Pydantic schemas for anonymous sessions."""

from pydantic import BaseModel


class TokenData(BaseModel):
    """Token payload data.

    Attributes:
        user_id: Anonymous user identifier.
    """

    user_id: str


class Identity(BaseModel):
    """The signed-in identity behind a request."""

    user_id: str
    is_anonymous: bool = True


class AnonymousSession(BaseModel):
    """Response for a new anonymous sign-in."""

    access_token: str
    token_type: str = "bearer"
    user_id: str
