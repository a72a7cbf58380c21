"""
Identity provider.

Plays the hosted auth service: accounts, access tokens with expiry, and the
session-change event stream that open clients subscribe to.
"""

import asyncio
import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import config
from db import SessionFactory, get_db_session, session_commit
from enums.session_event import SessionEvent
from exceptions import (
    InvalidEmailException,
    WeakPasswordException,
    EmailAlreadyRegisteredException,
    InvalidCredentialsException,
    SessionExpiredException,
    FetchException,
    WriteConflictException,
)
from models.auth_user import AuthUserDTO, AuthSessionDTO
from models.profile import ProfileDTO
from models.session import SessionChange
from repositories.auth import AuthRepository
from repositories.profile import ProfileRepository
from services.session_events import SessionEventBus, SessionChangeListener
from utils.password_hasher import hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def utcnow() -> datetime:
    # Naive UTC, matches what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


class IdentityProvider:

    def __init__(self,
                 session_factory: SessionFactory = get_db_session,
                 event_bus: SessionEventBus | None = None,
                 session_ttl_minutes: int | None = None,
                 password_min_length: int | None = None,
                 hash_iterations: int | None = None):
        self.session_factory = session_factory
        self.event_bus = event_bus or SessionEventBus()
        self.session_ttl = timedelta(minutes=session_ttl_minutes or config.SESSION_TTL_MINUTES)
        self.password_min_length = password_min_length or config.PASSWORD_MIN_LENGTH
        self.hash_iterations = hash_iterations or config.PASSWORD_HASH_ITERATIONS

    def subscribe(self, listener: SessionChangeListener) -> Callable[[], None]:
        return self.event_bus.subscribe(listener)

    def is_expired(self, expires_at: datetime) -> bool:
        return expires_at <= utcnow()

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthSessionDTO:
        """
        Create an account with its profile and open a session for it.

        Raises:
            InvalidEmailException: Malformed email
            WeakPasswordException: Password shorter than the configured minimum
            EmailAlreadyRegisteredException: Account exists
            WriteConflictException: Backend rejected the write
        """
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise InvalidEmailException(email)
        if len(password or "") < self.password_min_length:
            raise WeakPasswordException(self.password_min_length)

        password_hash = await asyncio.to_thread(hash_password, password, self.hash_iterations)
        try:
            async with self.session_factory() as session:
                if await AuthRepository.get_user_by_email(email, session) is not None:
                    raise EmailAlreadyRegisteredException(email)
                user_id = await AuthRepository.create_user(
                    AuthUserDTO(email=email, password_hash=password_hash), session
                )
                await ProfileRepository.create(
                    ProfileDTO(id=user_id, full_name=(full_name or "").strip(), email=email), session
                )
                auth_session = await self._open_session(user_id, session)
                await session_commit(session)
        except IntegrityError:
            # Lost a race against a concurrent sign-up with the same email
            raise EmailAlreadyRegisteredException(email)
        except SQLAlchemyError as e:
            raise WriteConflictException("profile", str(e))

        logger.info(f"[Identity] Account created for user {auth_session.user_id}")
        await self._publish(SessionEvent.SIGNED_IN, auth_session)
        return auth_session

    async def sign_in(self, email: str, password: str) -> AuthSessionDTO:
        """
        Raises:
            InvalidCredentialsException: Unknown email or wrong password
        """
        email = (email or "").strip().lower()
        try:
            async with self.session_factory() as session:
                user = await AuthRepository.get_user_by_email(email, session)
        except SQLAlchemyError as e:
            raise FetchException("account", str(e))

        if user is None or not await asyncio.to_thread(verify_password, password or "", user.password_hash):
            logger.info("[Identity] Rejected sign-in attempt")
            raise InvalidCredentialsException(email)

        try:
            async with self.session_factory() as session:
                auth_session = await self._open_session(user.id, session)
                await session_commit(session)
        except SQLAlchemyError as e:
            raise WriteConflictException("session", str(e))

        logger.info(f"[Identity] User {user.id} signed in")
        await self._publish(SessionEvent.SIGNED_IN, auth_session)
        return auth_session

    async def sign_out(self, access_token: str) -> None:
        try:
            async with self.session_factory() as session:
                auth_session = await AuthRepository.get_session(access_token, session)
                await AuthRepository.delete_session(access_token, session)
                await session_commit(session)
        except SQLAlchemyError as e:
            raise WriteConflictException("session", str(e))

        if auth_session is not None:
            logger.info(f"[Identity] User {auth_session.user_id} signed out")
            await self._publish(SessionEvent.SIGNED_OUT, auth_session)

    async def get_session(self, access_token: str) -> AuthSessionDTO | None:
        """
        Resolve an access token.

        Expired sessions are deleted and announced with SESSION_EXPIRED.

        Returns:
            The live session, or None for unknown/expired tokens
        """
        try:
            async with self.session_factory() as session:
                auth_session = await AuthRepository.get_session(access_token, session)
                if auth_session is None:
                    return None
                if auth_session.expires_at > utcnow():
                    return auth_session
                await AuthRepository.delete_session(access_token, session)
                await session_commit(session)
        except SQLAlchemyError as e:
            raise FetchException("session", str(e))

        logger.info(f"[Identity] Session of user {auth_session.user_id} expired")
        await self._publish(SessionEvent.SESSION_EXPIRED, auth_session)
        return None

    async def refresh_session(self, access_token: str) -> AuthSessionDTO:
        """
        Extend a live session by the configured TTL.

        Raises:
            SessionExpiredException: Token unknown or already expired
        """
        auth_session = await self.get_session(access_token)
        if auth_session is None:
            raise SessionExpiredException()

        expires_at = utcnow() + self.session_ttl
        try:
            async with self.session_factory() as session:
                await AuthRepository.extend_session(access_token, expires_at, session)
                await session_commit(session)
        except SQLAlchemyError as e:
            raise WriteConflictException("session", str(e))

        auth_session = auth_session.model_copy(update={"expires_at": expires_at})
        await self._publish(SessionEvent.TOKEN_REFRESHED, auth_session)
        return auth_session

    async def update_profile(self, user_id: str, full_name: str | None = None, avatar_url: str | None = None) -> None:
        try:
            async with self.session_factory() as session:
                await ProfileRepository.update(
                    ProfileDTO(id=user_id, full_name=full_name, avatar_url=avatar_url), session
                )
                await session_commit(session)
        except SQLAlchemyError as e:
            raise WriteConflictException("profile", str(e))

        await self.event_bus.publish(SessionChange(event=SessionEvent.USER_UPDATED, user_id=user_id))

    async def _open_session(self, user_id: str, session) -> AuthSessionDTO:
        auth_session = AuthSessionDTO(
            access_token=secrets.token_urlsafe(32),
            user_id=user_id,
            expires_at=utcnow() + self.session_ttl,
        )
        await AuthRepository.create_session(auth_session, session)
        return auth_session

    async def _publish(self, event: SessionEvent, auth_session: AuthSessionDTO) -> None:
        await self.event_bus.publish(SessionChange(
            event=event,
            user_id=auth_session.user_id,
            access_token=auth_session.access_token,
            expires_at=auth_session.expires_at,
        ))


_identity_provider: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    """
    Get the shared IdentityProvider instance.

    All shells of the process must share one provider, otherwise they would not
    see each other's session events.
    """
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = IdentityProvider()
    return _identity_provider
