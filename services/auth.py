import logging
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError

from db import SessionFactory, get_db_session
from enums.auth_state import AuthState
from enums.session_event import SessionEvent
from exceptions import (
    MonetizeProException,
    FetchException,
    WriteConflictException,
    SessionExpiredException,
    InvalidAuthStateException,
    AuthenticationRequiredException,
)
from models.auth_user import AuthSessionDTO
from models.profile import ProfileDTO
from models.session import Session, AnonymousSession, AuthenticatedSession, SessionChange
from repositories.profile import ProfileRepository
from services.identity import IdentityProvider
from utils.auth_state_machine import AuthStateMachine
from utils.error_handler import handle_service_error

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], Awaitable[None]]


class AuthSessionBridge:
    """
    Mirrors the identity provider's session for one client.

    Holds the current Session (anonymous or authenticated with profile), follows
    session events published by the provider and tells its own listeners (cart,
    dashboard, view shell) whenever the effective session changes.
    """

    def __init__(self, identity: IdentityProvider, session_factory: SessionFactory = get_db_session):
        self.identity = identity
        self.session_factory = session_factory
        self.session: Session = AnonymousSession()
        self.state = AuthState.ANONYMOUS
        self.last_error: str | None = None
        self._listeners: list[SessionListener] = []
        self._unsubscribe = identity.subscribe(self._on_session_change)

    @property
    def loading(self) -> bool:
        return self.state == AuthState.AUTHENTICATING

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.session, AuthenticatedSession)

    @property
    def user_id(self) -> str | None:
        return self.session.user_id if isinstance(self.session, AuthenticatedSession) else None

    @property
    def access_token(self) -> str | None:
        return self.session.access_token if isinstance(self.session, AuthenticatedSession) else None

    @property
    def profile(self) -> ProfileDTO | None:
        return self.session.profile if isinstance(self.session, AuthenticatedSession) else None

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    async def restore(self, access_token: str | None) -> Session:
        """
        Resume a stored session on startup.

        An unknown or expired token leaves the client anonymous without an error.
        """
        if not access_token:
            return self.session
        try:
            return await self._authenticate(lambda: self._require_session(access_token))
        except SessionExpiredException:
            self.last_error = None
            logger.info("[Auth] Stored session is no longer valid, continuing anonymous")
            return self.session

    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        return await self._authenticate(lambda: self.identity.sign_up(email, password, full_name))

    async def sign_in(self, email: str, password: str) -> Session:
        return await self._authenticate(lambda: self.identity.sign_in(email, password))

    async def sign_out(self) -> None:
        """Local state is cleared even when the provider call fails."""
        access_token = self.access_token
        if access_token is None:
            return
        try:
            await self.identity.sign_out(access_token)
        finally:
            await self._become_anonymous()

    async def ensure_active(self) -> Session:
        """
        Drop a session whose access token has run out.

        Called before every operation that acts as the user. The provider deletes
        the expired token and announces SESSION_EXPIRED, so every client holding
        it becomes anonymous, this one included.
        """
        if not isinstance(self.session, AuthenticatedSession):
            return self.session
        if not self.identity.is_expired(self.session.expires_at):
            return self.session

        auth_session = await self.identity.get_session(self.session.access_token)
        if auth_session is not None:
            # Another client refreshed the token before its old expiry
            self.session = self.session.model_copy(update={"expires_at": auth_session.expires_at})
            return self.session

        await self._become_anonymous()
        self.last_error = handle_service_error(SessionExpiredException()).message
        return self.session

    async def update_profile(self, full_name: str | None = None, avatar_url: str | None = None) -> None:
        await self.ensure_active()
        if self.user_id is None:
            raise AuthenticationRequiredException("update your profile")
        # Provider publishes USER_UPDATED, the profile reload happens in the handler
        await self.identity.update_profile(self.user_id, full_name=full_name, avatar_url=avatar_url)

    async def refresh_profile(self) -> ProfileDTO | None:
        if not isinstance(self.session, AuthenticatedSession):
            return None
        profile = await self._load_profile(self.session.user_id)
        self.session = self.session.model_copy(update={"profile": profile})
        return profile

    def close(self) -> None:
        self._unsubscribe()

    async def _authenticate(self, action: Callable[[], Awaitable[AuthSessionDTO]]) -> Session:
        if self.loading:
            raise InvalidAuthStateException(self.state.value, AuthState.AUTHENTICATING.value)

        previous_token = self.access_token
        self.last_error = None
        self._set_state(AuthState.AUTHENTICATING)
        try:
            auth_session = await action()
            profile = await self._load_profile(auth_session.user_id)
        except MonetizeProException as e:
            self.last_error = handle_service_error(e).message
            self._set_state(AuthState.AUTHENTICATED if self.is_authenticated else AuthState.ANONYMOUS)
            raise

        self.session = AuthenticatedSession(
            user_id=auth_session.user_id,
            access_token=auth_session.access_token,
            expires_at=auth_session.expires_at,
            profile=profile,
        )
        self._set_state(AuthState.AUTHENTICATED)
        logger.info(f"[Auth] Session established for user {auth_session.user_id}")
        if previous_token is not None and previous_token != auth_session.access_token:
            await self._revoke(previous_token)
        await self._notify()
        return self.session

    async def _revoke(self, access_token: str) -> None:
        # Account switch: the replaced token must not outlive this client's use of it
        try:
            await self.identity.sign_out(access_token)
        except WriteConflictException as e:
            logger.warning(f"[Auth] Previous session could not be revoked, it lapses at its expiry: {e}")

    async def _require_session(self, access_token: str) -> AuthSessionDTO:
        auth_session = await self.identity.get_session(access_token)
        if auth_session is None:
            raise SessionExpiredException()
        return auth_session

    async def _load_profile(self, user_id: str) -> ProfileDTO | None:
        try:
            async with self.session_factory() as session:
                return await ProfileRepository.get_by_id(user_id, session)
        except SQLAlchemyError as e:
            raise FetchException("profile", str(e))

    async def _on_session_change(self, change: SessionChange) -> None:
        if not isinstance(self.session, AuthenticatedSession):
            return

        match change.event:
            case SessionEvent.SIGNED_OUT | SessionEvent.SESSION_EXPIRED:
                if change.access_token == self.session.access_token:
                    await self._become_anonymous()
            case SessionEvent.TOKEN_REFRESHED:
                if change.access_token == self.session.access_token:
                    self.session = self.session.model_copy(update={"expires_at": change.expires_at})
                    await self._resync()
            case SessionEvent.SIGNED_IN | SessionEvent.USER_UPDATED:
                if change.user_id == self.session.user_id:
                    await self._resync()

    async def _resync(self) -> None:
        await self.refresh_profile()
        await self._notify()

    async def _become_anonymous(self) -> None:
        if not self.is_authenticated:
            return
        logger.info(f"[Auth] User {self.user_id} is now anonymous")
        self.session = AnonymousSession()
        self._set_state(AuthState.ANONYMOUS)
        await self._notify()

    def _set_state(self, to_state: AuthState) -> None:
        self.state = AuthStateMachine.transition(self.state, to_state)

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self.session)
