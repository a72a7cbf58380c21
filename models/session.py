"""
Client-side session value.

A session is either anonymous or authenticated with a loaded profile.
There is no "maybe logged in" object: code that needs a user matches on the type.
"""
from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel

from enums.session_event import SessionEvent
from models.profile import ProfileDTO


class AnonymousSession(BaseModel):
    kind: Literal["anonymous"] = "anonymous"


class AuthenticatedSession(BaseModel):
    kind: Literal["authenticated"] = "authenticated"
    user_id: str
    access_token: str
    expires_at: datetime
    profile: ProfileDTO | None = None


Session = Union[AnonymousSession, AuthenticatedSession]


class SessionChange(BaseModel):
    """Event published by the identity provider when a session transitions."""
    event: SessionEvent
    user_id: str | None = None
    access_token: str | None = None
    expires_at: datetime | None = None
