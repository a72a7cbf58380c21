import logging
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

import config
from db import SessionFactory, get_db_session
from enums.text_entity import TextEntity
from enums.view import View, Modal, AuthMode, DashboardTab
from exceptions import EmptyCartException, FetchException
from models.session import Session, AuthenticatedSession
from services.auth import AuthSessionBridge
from services.cart import CartStore
from services.catalog import CatalogCache
from services.dashboard import DashboardPanels
from services.identity import IdentityProvider
from services.tutor_landing import TutorLanding
from utils.localizator import Localizator

logger = logging.getLogger(__name__)

HERO = {
    "title": "Turn Your Passion Into Profit",
    "subtitle": "The all-in-one platform for creators and entrepreneurs to monetize their expertise "
                "through products, content, and subscriptions.",
    "actions": ["Get Started Free", "View Demo"],
}

SECTIONS = [
    {"anchor": "products", "title": "Premium Products & Services",
     "subtitle": "Curated offerings designed to accelerate your journey to success"},
    {"anchor": "content", "title": "Expert Content & Insights",
     "subtitle": "Learn from industry leaders and stay ahead of the curve"},
    {"anchor": "subscriptions", "title": "Flexible Subscription Plans",
     "subtitle": "Choose the plan that fits your needs and unlock exclusive benefits"},
    {"anchor": "affiliates", "title": "Join Our Affiliate Program",
     "subtitle": "Earn generous commissions by promoting products you believe in"},
]

AFFILIATE_TERMS = [
    {"label": "Commission Rate", "value": "30%"},
    {"label": "Cookie Duration", "value": "90 Days"},
    {"label": "Minimum Payout", "value": "$50"},
]

FAQS = [
    {
        "question": "How do subscriptions work?",
        "answer": "Subscriptions give you access to premium content and exclusive features. "
                  "You can choose from monthly or yearly billing and cancel anytime.",
    },
    {
        "question": "Can I become an affiliate?",
        "answer": "Yes! Once you create an account, you can apply to become an affiliate through "
                  "your dashboard. You'll earn commission on every sale you refer.",
    },
    {
        "question": "What payment methods do you accept?",
        "answer": "We accept all major credit cards, debit cards, and digital wallets through our "
                  "secure payment processor.",
    },
    {
        "question": "Is there a refund policy?",
        "answer": "Yes, we offer a 30-day money-back guarantee on all products and a pro-rated refund "
                  "on subscriptions if you cancel within the first week.",
    },
]


class ShellState(BaseModel):
    """Everything the page chrome shows. Replaced on every change, never mutated."""
    model_config = ConfigDict(frozen=True)

    view: View = View.HOME
    modal: Modal = Modal.NONE
    auth_mode: AuthMode = AuthMode.LOGIN
    mobile_menu_open: bool = False
    expanded_faq: int | None = None
    dashboard_tab: DashboardTab = DashboardTab.OVERVIEW


class CheckoutSummary(BaseModel):
    total: Decimal
    item_count: int
    currency: str


class ViewShell:
    """
    One client's page: owns the session bridge, catalog, cart and dashboard and
    routes UI events between them.
    """

    def __init__(self, identity: IdentityProvider, session_factory: SessionFactory = get_db_session):
        self.auth = AuthSessionBridge(identity, session_factory)
        self.catalog = CatalogCache(session_factory)
        self.cart = CartStore(self.auth, session_factory)
        self.dashboard = DashboardPanels(self.auth, session_factory)
        self.tutor_landing = TutorLanding()
        self.state = ShellState()
        self.mounted = False
        self.auth.add_listener(self._on_session_change)

    async def mount(self, access_token: str | None = None) -> None:
        """Restore the session, load the catalog, then sync the cart."""
        await self.auth.restore(access_token)
        await self.catalog.load()
        await self.cart.on_session_change(self.auth.session)
        self.mounted = True
        logger.info(f"[Shell] Mounted, authenticated={self.auth.is_authenticated}")

    async def unmount(self) -> None:
        self.mounted = False
        await self.dashboard.unmount()
        self.auth.close()

    # Cart

    async def add_to_cart(self, product_id: str) -> bool:
        """
        Returns:
            False when the user was sent to the sign-up form instead
        """
        await self.auth.ensure_active()
        if not self.auth.is_authenticated:
            self.open_auth(AuthMode.SIGNUP)
            return False
        await self.cart.add(product_id)
        return True

    async def update_cart_quantity(self, cart_item_id: str, quantity: int) -> None:
        await self.cart.update_quantity(cart_item_id, quantity)

    async def remove_from_cart(self, cart_item_id: str) -> None:
        await self.cart.remove(cart_item_id)

    def checkout(self) -> CheckoutSummary:
        # Payment is out of scope, checkout only validates and reports the total
        if self.cart.is_empty():
            raise EmptyCartException(self.auth.user_id)
        return CheckoutSummary(total=self.cart.total(),
                               item_count=self.cart.item_count(),
                               currency=config.CURRENCY.value)

    # Modals and page chrome

    def open_cart(self) -> None:
        self._update(modal=Modal.CART)

    def open_auth(self, mode: AuthMode = AuthMode.LOGIN) -> None:
        self._update(modal=Modal.AUTH, auth_mode=mode)

    def set_auth_mode(self, mode: AuthMode) -> None:
        self._update(auth_mode=mode)

    def close_modal(self) -> None:
        self._update(modal=Modal.NONE)

    def toggle_faq(self, index: int) -> None:
        if not 0 <= index < len(FAQS):
            raise IndexError(f"FAQ index {index} out of range")
        self._update(expanded_faq=None if self.state.expanded_faq == index else index)

    def toggle_mobile_menu(self) -> None:
        self._update(mobile_menu_open=not self.state.mobile_menu_open)

    # Navigation

    async def go_to_dashboard(self) -> bool:
        """
        Returns:
            False when the user was sent to the login form instead
        """
        await self.auth.ensure_active()
        if not self.auth.is_authenticated:
            self.open_auth(AuthMode.LOGIN)
            return False
        self._update(view=View.DASHBOARD, modal=Modal.NONE, mobile_menu_open=False)
        await self.dashboard.mount()
        return True

    async def go_home(self) -> None:
        self._update(view=View.HOME, dashboard_tab=DashboardTab.OVERVIEW)
        await self.dashboard.unmount()

    def select_tab(self, tab: DashboardTab) -> None:
        self._update(dashboard_tab=tab)

    # Auth form

    async def sign_in(self, email: str, password: str) -> None:
        await self.auth.sign_in(email, password)
        self.close_modal()

    async def sign_up(self, email: str, password: str, full_name: str) -> None:
        await self.auth.sign_up(email, password, full_name)
        self.close_modal()

    async def sign_out(self) -> None:
        await self.auth.sign_out()

    async def _on_session_change(self, session: Session) -> None:
        if not self.mounted:
            return
        await self.cart.on_session_change(session)
        await self.dashboard.on_session_change(session)
        if not isinstance(session, AuthenticatedSession):
            self._update(view=View.HOME, modal=Modal.NONE, dashboard_tab=DashboardTab.OVERVIEW)
            await self.dashboard.unmount()

    async def retry_catalog(self) -> None:
        await self.catalog.retry_failed()

    async def retry_cart(self) -> None:
        try:
            await self.cart.refresh()
        except FetchException as e:
            logger.warning(f"[Shell] Cart retry failed: {e}")

    def _update(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)

    def snapshot(self) -> dict:
        """JSON-ready view of the whole page."""
        profile = self.auth.profile
        snapshot = {
            "state": self.state.model_dump(mode="json"),
            "session": {
                "authenticated": self.auth.is_authenticated,
                "loading": self.auth.loading,
                "error": self.auth.last_error,
                "profile": profile.model_dump(mode="json") if profile else None,
            },
            "catalog": {
                "products": [product.model_dump(mode="json") for product in self.catalog.products],
                "plans": [plan.model_dump(mode="json") for plan in self.catalog.plans],
                "articles": [article.model_dump(mode="json") for article in self.catalog.articles],
                "errors": {name: error.model_dump() for name, error in self.catalog.errors.items()},
            },
            "cart": {
                "items": [item.model_dump(mode="json") for item in self.cart.items],
                "total": str(self.cart.total()),
                "item_count": self.cart.item_count(),
                "currency_symbol": Localizator.get_currency_symbol(),
                "error": self.cart.error.model_dump() if self.cart.error else None,
            },
            "content": {
                "brand": Localizator.get_text(TextEntity.COMMON, "brand_name"),
                "hero": HERO,
                "sections": SECTIONS,
                "affiliate_terms": AFFILIATE_TERMS,
                "faqs": [dict(faq, expanded=self.state.expanded_faq == index) for index, faq in enumerate(FAQS)],
            },
            "dashboard": None,
        }
        if self.state.view == View.DASHBOARD:
            snapshot["dashboard"] = {
                "tab": self.state.dashboard_tab.value,
                "overview": self.dashboard.overview().model_dump(mode="json"),
                "orders": self.dashboard.orders.model_dump(mode="json"),
                "subscriptions": self.dashboard.subscriptions.model_dump(mode="json"),
                "affiliate": self.dashboard.affiliate.model_dump(mode="json"),
            }
        return snapshot
