"""
Unit Tests: DashboardPanels

Tests for services/dashboard.py covering:
- panel loading for the signed-in user
- re-fetch on session change, clearing on sign-out
- stale results never reach a panel
- affiliate enrollment (idempotent, concurrent)
- overview counters
"""

import asyncio
import pytest
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from db import session_commit
from enums.order_status import OrderStatus
from enums.subscription_status import SubscriptionStatus
from exceptions import AuthenticationRequiredException
from models.order import OrderDTO
from models.user_subscription import UserSubscriptionDTO
from repositories.order import OrderRepository
from repositories.user_subscription import UserSubscriptionRepository


async def add_orders(session_factory, user_id, amounts):
    async with session_factory() as session:
        for amount in amounts:
            await OrderRepository.create(
                OrderDTO(user_id=user_id, total_amount=Decimal(amount), status=OrderStatus.COMPLETED), session
            )
        await session_commit(session)


async def add_subscription(session_factory, user_id, plan_id, status=SubscriptionStatus.ACTIVE):
    async with session_factory() as session:
        await UserSubscriptionRepository.create(
            UserSubscriptionDTO(user_id=user_id, plan_id=plan_id, status=status), session
        )
        await session_commit(session)


class TestPanelLoading:

    @pytest.mark.asyncio
    async def test_mount_loads_panels_for_user(self, signed_in_shell, session_factory, catalog_ids):
        user_id = signed_in_shell.auth.user_id
        await add_orders(session_factory, user_id, ["99.00", "149.00"])
        await add_subscription(session_factory, user_id, catalog_ids["plans"][1])

        await signed_in_shell.go_to_dashboard()
        dashboard = signed_in_shell.dashboard

        assert dashboard.orders.user_id == user_id
        assert len(dashboard.orders.records) == 2
        assert dashboard.subscriptions.records[0].plan.name == "Professional"
        assert dashboard.affiliate.record is None
        assert not dashboard.orders.loading

    @pytest.mark.asyncio
    async def test_session_change_refetches_for_new_user(self, signed_in_shell, identity, session_factory):
        """After a user switch every panel shows the new user's data"""
        first_user = signed_in_shell.auth.user_id
        await add_orders(session_factory, first_user, ["10.00"])
        await signed_in_shell.go_to_dashboard()
        assert len(signed_in_shell.dashboard.orders.records) == 1

        await identity.sign_up("john@example.com", "secret456", "John Roe")
        await signed_in_shell.sign_in("john@example.com", "secret456")

        dashboard = signed_in_shell.dashboard
        assert dashboard.orders.user_id == signed_in_shell.auth.user_id != first_user
        assert dashboard.orders.records == []
        assert dashboard.subscriptions.user_id == signed_in_shell.auth.user_id

    @pytest.mark.asyncio
    async def test_sign_out_clears_panels(self, signed_in_shell, session_factory):
        await add_orders(session_factory, signed_in_shell.auth.user_id, ["10.00"])
        await signed_in_shell.go_to_dashboard()

        await signed_in_shell.sign_out()

        dashboard = signed_in_shell.dashboard
        assert dashboard.orders.records == []
        assert dashboard.orders.user_id is None
        assert dashboard.mounted is False

    @pytest.mark.asyncio
    async def test_unmounted_dashboard_ignores_session_changes(self, signed_in_shell, session_factory):
        """Panels are only fetched while the dashboard is shown"""
        with patch("services.dashboard.OrderRepository.get_by_user_id") as get_orders:
            await signed_in_shell.dashboard.on_session_change(signed_in_shell.auth.session)

        get_orders.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_result_is_dropped(self, signed_in_shell, session_factory):
        """A slow fetch for a previous load never overwrites the newer one"""
        dashboard = signed_in_shell.dashboard
        dashboard.mounted = True
        user_id = signed_in_shell.auth.user_id
        await add_orders(session_factory, user_id, ["10.00"])

        entered = asyncio.Event()
        release = asyncio.Event()
        real_get = OrderRepository.get_by_user_id

        async def slow_orders(uid, session):
            entered.set()
            await release.wait()
            return await real_get(uid, session)

        with patch("services.dashboard.OrderRepository.get_by_user_id", side_effect=slow_orders):
            first_load = asyncio.create_task(dashboard.load(user_id))
            await entered.wait()
            # Second load supersedes the first before its orders arrive
            await dashboard.load(None)
            release.set()
            await first_load

        assert dashboard.orders.user_id is None
        assert dashboard.orders.records == []

    @pytest.mark.asyncio
    async def test_panel_failure_is_isolated(self, signed_in_shell, session_factory):
        """A failing orders fetch degrades only the orders panel"""
        failure = OperationalError("SELECT", {}, Exception("database is locked"))

        with patch("services.dashboard.OrderRepository.get_by_user_id", side_effect=failure):
            await signed_in_shell.go_to_dashboard()

        dashboard = signed_in_shell.dashboard
        assert dashboard.orders.error.code == "error_fetch_failed"
        assert dashboard.orders.error.retryable is True
        assert dashboard.subscriptions.error is None

    @pytest.mark.asyncio
    async def test_rejected_row_degrades_only_its_panel(self, signed_in_shell):
        """Data the DTO cannot validate shows as a panel error, not a failed page"""
        async def malformed_orders(user_id, session):
            return [OrderDTO.model_validate({"user_id": user_id, "total_amount": "not-a-number"})]

        with patch("services.dashboard.OrderRepository.get_by_user_id", side_effect=malformed_orders):
            shown = await signed_in_shell.go_to_dashboard()

        dashboard = signed_in_shell.dashboard
        assert shown is True
        assert dashboard.orders.error.code == "error_fetch_failed"
        assert dashboard.orders.records == []
        assert dashboard.subscriptions.error is None
        assert dashboard.affiliate.error is None


class TestAffiliateEnrollment:

    @pytest.mark.asyncio
    async def test_create_affiliate(self, signed_in_shell):
        await signed_in_shell.go_to_dashboard()

        record = await signed_in_shell.dashboard.create_affiliate()

        assert record.referral_code.startswith("janedoe-")
        assert record.total_earnings == Decimal("0.00")
        assert signed_in_shell.dashboard.affiliate.record == record
        assert signed_in_shell.auth.profile.is_affiliate is True

    @pytest.mark.asyncio
    async def test_create_affiliate_is_idempotent(self, signed_in_shell, session_factory):
        """Creating twice returns the same record"""
        await signed_in_shell.go_to_dashboard()

        first = await signed_in_shell.dashboard.create_affiliate()
        # Fresh panel state forces a backend round trip
        await signed_in_shell.dashboard.load(signed_in_shell.auth.user_id)
        signed_in_shell.dashboard.affiliate = signed_in_shell.dashboard.affiliate.model_copy(update={"record": None})
        second = await signed_in_shell.dashboard.create_affiliate()

        assert first.id == second.id
        assert first.referral_code == second.referral_code

    @pytest.mark.asyncio
    async def test_concurrent_create_yields_one_record(self, signed_in_shell):
        await signed_in_shell.go_to_dashboard()

        first, second = await asyncio.gather(
            signed_in_shell.dashboard.create_affiliate(),
            signed_in_shell.dashboard.create_affiliate(),
        )

        assert first.id == second.id

    @pytest.mark.asyncio
    async def test_anonymous_cannot_enroll(self, shell):
        with pytest.raises(AuthenticationRequiredException):
            await shell.dashboard.create_affiliate()


class TestOverview:

    @pytest.mark.asyncio
    async def test_overview_counts(self, signed_in_shell, session_factory, catalog_ids):
        user_id = signed_in_shell.auth.user_id
        await add_orders(session_factory, user_id, ["10.00", "20.00", "30.00"])
        await add_subscription(session_factory, user_id, catalog_ids["plans"][0])
        await add_subscription(session_factory, user_id, catalog_ids["plans"][1], SubscriptionStatus.CANCELLED)

        await signed_in_shell.go_to_dashboard()
        overview = signed_in_shell.dashboard.overview()

        assert overview.total_orders == 3
        assert overview.active_subscriptions == 1
        assert overview.affiliate_earnings == Decimal("0.00")
        assert overview.is_affiliate is False
