import asyncio
import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from db import SessionFactory, get_db_session, session_commit
from enums.subscription_status import SubscriptionStatus
from exceptions import (
    MonetizeProException,
    AuthenticationRequiredException,
    FetchException,
    WriteConflictException,
    ReferralCodeCollisionException,
)
from models.affiliate import AffiliateDTO
from models.order import OrderDTO
from models.profile import ProfileDTO
from models.session import Session, AuthenticatedSession
from models.user_subscription import UserSubscriptionDTO
from repositories.affiliate import AffiliateRepository
from repositories.order import OrderRepository
from repositories.profile import ProfileRepository
from repositories.user_subscription import UserSubscriptionRepository
from services.auth import AuthSessionBridge
from utils.error_handler import ErrorState, handle_service_error
from utils.referral_code import generate_referral_code

logger = logging.getLogger(__name__)

MAX_REFERRAL_CODE_ATTEMPTS = 5


class PanelState(BaseModel):
    # Owner of the data shown, None while signed out
    user_id: str | None = None
    loading: bool = False
    error: ErrorState | None = None


class OrdersPanelState(PanelState):
    records: list[OrderDTO] = []


class SubscriptionsPanelState(PanelState):
    records: list[UserSubscriptionDTO] = []


class AffiliatePanelState(PanelState):
    record: AffiliateDTO | None = None


class DashboardOverview(BaseModel):
    total_orders: int
    active_subscriptions: int
    affiliate_earnings: Decimal
    is_affiliate: bool


class DashboardPanels:
    """
    Per-user panels of the dashboard view: orders, subscriptions and affiliate.

    Panels load concurrently. Every load bumps a generation counter and cancels
    the previous load's tasks, so a result fetched for a previous user can never
    land in a panel.
    """

    def __init__(self, auth: AuthSessionBridge, session_factory: SessionFactory = get_db_session):
        self.auth = auth
        self.session_factory = session_factory
        self.orders = OrdersPanelState()
        self.subscriptions = SubscriptionsPanelState()
        self.affiliate = AffiliatePanelState()
        self.mounted = False
        self._generation = 0
        self._tasks: list[asyncio.Task] = []
        self._affiliate_lock = asyncio.Lock()

    async def mount(self) -> None:
        self.mounted = True
        await self.load(self.auth.user_id)

    async def unmount(self) -> None:
        self.mounted = False
        self._generation += 1
        self._cancel_pending()

    async def on_session_change(self, session: Session) -> None:
        if not self.mounted:
            return
        await self.load(session.user_id if isinstance(session, AuthenticatedSession) else None)

    async def load(self, user_id: str | None) -> None:
        self._cancel_pending()
        self._generation += 1
        generation = self._generation

        if user_id is None:
            self.orders = OrdersPanelState()
            self.subscriptions = SubscriptionsPanelState()
            self.affiliate = AffiliatePanelState()
            return

        self.orders = OrdersPanelState(user_id=user_id, loading=True)
        self.subscriptions = SubscriptionsPanelState(user_id=user_id, loading=True)
        self.affiliate = AffiliatePanelState(user_id=user_id, loading=True)

        tasks = [
            asyncio.create_task(self._load_panel("orders", OrderRepository.get_by_user_id, user_id, generation)),
            asyncio.create_task(self._load_panel("subscriptions", UserSubscriptionRepository.get_by_user_id,
                                                 user_id, generation)),
            asyncio.create_task(self._load_panel("affiliate", AffiliateRepository.get_by_user_id,
                                                 user_id, generation)),
        ]
        self._tasks = tasks
        results = await asyncio.gather(*tasks, return_exceptions=True)
        # Backend and data errors are already panel errors, cancellation means a newer load took over.
        # Whatever is left is a programming error and must reach the caller.
        for result in results:
            if isinstance(result, Exception):
                raise result

    async def create_affiliate(self) -> AffiliateDTO:
        """
        Enroll the signed-in user in the affiliate program.

        Idempotent: a user who already has an affiliate record gets that record
        back, concurrent calls create at most one.

        Raises:
            AuthenticationRequiredException: Anonymous session
            WriteConflictException: Backend rejected the write
            ReferralCodeCollisionException: No free referral code found
        """
        session = await self.auth.ensure_active()
        if not isinstance(session, AuthenticatedSession):
            raise AuthenticationRequiredException("join the affiliate program")
        user_id = session.user_id
        full_name = session.profile.full_name if session.profile else None

        async with self._affiliate_lock:
            if self.affiliate.user_id == user_id and self.affiliate.record is not None:
                return self.affiliate.record
            try:
                record = await self._create_affiliate_record(user_id, full_name)
            except MonetizeProException as e:
                self.affiliate = AffiliatePanelState(user_id=user_id, error=handle_service_error(e))
                raise
            self.affiliate = AffiliatePanelState(user_id=user_id, record=record)

        await self.auth.refresh_profile()
        return record

    def overview(self) -> DashboardOverview:
        record = self.affiliate.record
        return DashboardOverview(
            total_orders=len(self.orders.records),
            active_subscriptions=sum(1 for subscription in self.subscriptions.records
                                     if subscription.status == SubscriptionStatus.ACTIVE),
            affiliate_earnings=record.total_earnings if record and record.total_earnings else Decimal("0.00"),
            is_affiliate=record is not None,
        )

    async def _load_panel(self,
                          name: str,
                          fetcher: Callable[[str, Any], Awaitable[Any]],
                          user_id: str,
                          generation: int) -> None:
        try:
            async with self.session_factory() as session:
                data = await fetcher(user_id, session)
        except (SQLAlchemyError, ValidationError) as e:
            # A row the DTO rejects degrades the panel the same way an unreachable backend does
            if generation == self._generation:
                self._set_panel(name, user_id, error=handle_service_error(FetchException(name, str(e))))
            return

        if generation != self._generation:
            logger.debug(f"[Dashboard] Dropping stale {name} result for user {user_id}")
            return
        self._set_panel(name, user_id, data=data)

    def _set_panel(self, name: str, user_id: str, data: Any = None, error: ErrorState | None = None) -> None:
        match name:
            case "orders":
                self.orders = OrdersPanelState(user_id=user_id, records=data or [], error=error)
            case "subscriptions":
                self.subscriptions = SubscriptionsPanelState(user_id=user_id, records=data or [], error=error)
            case "affiliate":
                self.affiliate = AffiliatePanelState(user_id=user_id, record=data, error=error)

    def _cancel_pending(self) -> None:
        for task in self._tasks:
            if not task.done():
                task.cancel()
        self._tasks = []

    async def _create_affiliate_record(self, user_id: str, full_name: str | None) -> AffiliateDTO:
        try:
            async with self.session_factory() as session:
                existing = await AffiliateRepository.get_by_user_id(user_id, session)
                if existing is not None:
                    logger.info(f"[Affiliate] User {user_id} is already enrolled")
                    return existing
                referral_code = await self._unique_referral_code(user_id, full_name, session)
                record = await AffiliateRepository.create(
                    AffiliateDTO(user_id=user_id, referral_code=referral_code), session
                )
                await ProfileRepository.update(ProfileDTO(id=user_id, is_affiliate=True), session)
                await session_commit(session)
        except IntegrityError:
            # A concurrent enrollment won the unique index on user_id
            return await self._existing_affiliate(user_id)
        except SQLAlchemyError as e:
            raise WriteConflictException("affiliate", str(e))

        logger.info(f"[Affiliate] User {user_id} enrolled with code {record.referral_code}")
        return record

    async def _existing_affiliate(self, user_id: str) -> AffiliateDTO:
        try:
            async with self.session_factory() as session:
                existing = await AffiliateRepository.get_by_user_id(user_id, session)
        except SQLAlchemyError as e:
            raise FetchException("affiliate", str(e))
        if existing is None:
            raise WriteConflictException("affiliate", "referral code taken concurrently")
        return existing

    @staticmethod
    async def _unique_referral_code(user_id: str, full_name: str | None, session) -> str:
        for _ in range(MAX_REFERRAL_CODE_ATTEMPTS):
            referral_code = generate_referral_code(full_name)
            if not await AffiliateRepository.referral_code_exists(referral_code, session):
                return referral_code
        raise ReferralCodeCollisionException(user_id, MAX_REFERRAL_CODE_ATTEMPTS)
