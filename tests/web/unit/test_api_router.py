"""
Tests for the HTTP API (web/api_router.py, app.py)

The shell registry is replaced with a mock so routes are tested without a
database: each test checks request parsing, shell calls and the mapping of
service exceptions to status codes.
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from app import app
from enums.view import AuthMode, DashboardTab
from exceptions import (
    InvalidCredentialsException,
    EmptyCartException,
    AuthenticationRequiredException,
    FetchException,
    SessionMismatchException,
)
from services.shell import CheckoutSummary
from web.api_router import bearer_token
from web.shell_registry import get_registry

SHELL_ID = "client-0001"
HEADERS = {"X-Shell-Id": SHELL_ID}


@pytest.fixture
def mock_shell():
    shell = MagicMock()
    shell.snapshot.return_value = {"state": {"view": "home"}, "cart": {"items": [], "total": "0.00"}}
    shell.auth.access_token = "token-abc"
    for name in ("sign_in", "sign_up", "sign_out", "add_to_cart", "update_cart_quantity",
                 "remove_from_cart", "go_home", "go_to_dashboard", "retry_catalog", "retry_cart"):
        setattr(shell, name, AsyncMock())
    shell.dashboard.create_affiliate = AsyncMock()
    shell.auth.update_profile = AsyncMock()
    return shell


@pytest.fixture
def registry(mock_shell):
    registry = MagicMock()
    registry.get_or_mount = AsyncMock(return_value=mock_shell)
    registry.drop = AsyncMock()
    return registry


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestShellIdentification:

    def test_missing_shell_id_rejected(self, client):
        response = client.get("/api/shell")

        assert response.status_code == 422

    def test_bearer_token_passed_to_mount(self, client, registry):
        response = client.get("/api/shell", headers={**HEADERS, "Authorization": "Bearer stored-token"})

        assert response.status_code == 200
        registry.get_or_mount.assert_awaited_once_with(SHELL_ID, "stored-token")

    @pytest.mark.parametrize("header,expected", [
        (None, None),
        ("Bearer abc", "abc"),
        ("bearer abc ", "abc"),
        ("Basic abc", None),
        ("Bearer", None),
    ])
    def test_bearer_token_parsing(self, header, expected):
        assert bearer_token(header) == expected

    def test_close_shell(self, client, registry):
        response = client.delete("/api/shell", headers={**HEADERS, "Authorization": "Bearer token-abc"})

        assert response.status_code == 204
        registry.drop.assert_awaited_once_with(SHELL_ID, "token-abc")

    def test_session_mismatch_is_unauthorized(self, client, registry):
        """A signed-in shell rejects requests carrying another token."""
        registry.get_or_mount.side_effect = SessionMismatchException()

        response = client.get("/api/shell", headers={**HEADERS, "Authorization": "Bearer someone-else"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "error_session_mismatch"


class TestAuthRoutes:

    def test_sign_in_returns_token(self, client, mock_shell):
        response = client.post("/api/auth/signin", headers=HEADERS,
                               json={"email": "jane@example.com", "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["access_token"] == "token-abc"
        mock_shell.sign_in.assert_awaited_once_with("jane@example.com", "secret123")

    def test_invalid_credentials_map_to_401(self, client, mock_shell):
        mock_shell.sign_in.side_effect = InvalidCredentialsException("jane@example.com")

        response = client.post("/api/auth/signin", headers=HEADERS,
                               json={"email": "jane@example.com", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["error"] == {
            "code": "error_invalid_credentials",
            "message": "Invalid email or password.",
            "retryable": False,
        }

    def test_sign_up(self, client, mock_shell):
        response = client.post("/api/auth/signup", headers=HEADERS,
                               json={"email": "jane@example.com", "password": "secret123", "full_name": "Jane"})

        assert response.status_code == 200
        mock_shell.sign_up.assert_awaited_once_with("jane@example.com", "secret123", "Jane")

    def test_sign_out(self, client, mock_shell):
        response = client.post("/api/auth/signout", headers=HEADERS)

        assert response.status_code == 200
        mock_shell.sign_out.assert_awaited_once()


class TestCartRoutes:

    def test_add_item(self, client, mock_shell):
        mock_shell.add_to_cart.return_value = False

        response = client.post("/api/cart/items", headers=HEADERS, json={"product_id": "p1"})

        assert response.status_code == 200
        assert response.json()["added"] is False
        mock_shell.add_to_cart.assert_awaited_once_with("p1")

    def test_update_item(self, client, mock_shell):
        response = client.patch("/api/cart/items/line-1", headers=HEADERS, json={"quantity": 3})

        assert response.status_code == 200
        mock_shell.update_cart_quantity.assert_awaited_once_with("line-1", 3)

    def test_update_item_rejects_fractional_quantity(self, client, mock_shell):
        response = client.patch("/api/cart/items/line-1", headers=HEADERS, json={"quantity": 1.5})

        assert response.status_code == 422
        mock_shell.update_cart_quantity.assert_not_awaited()

    def test_remove_item(self, client, mock_shell):
        response = client.delete("/api/cart/items/line-1", headers=HEADERS)

        assert response.status_code == 200
        mock_shell.remove_from_cart.assert_awaited_once_with("line-1")

    def test_anonymous_write_maps_to_401(self, client, mock_shell):
        mock_shell.update_cart_quantity.side_effect = AuthenticationRequiredException("change your cart")

        response = client.patch("/api/cart/items/line-1", headers=HEADERS, json={"quantity": 2})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Please sign in to change your cart."

    def test_backend_failure_is_retryable_503(self, client, mock_shell):
        mock_shell.add_to_cart.side_effect = FetchException("cart", "database is locked")

        response = client.post("/api/cart/items", headers=HEADERS, json={"product_id": "p1"})

        assert response.status_code == 503
        assert response.json()["error"]["retryable"] is True


class TestCheckoutRoute:

    def test_checkout_total(self, client, mock_shell):
        mock_shell.checkout.return_value = CheckoutSummary(total=Decimal("248.00"), item_count=2, currency="USD")

        response = client.post("/api/checkout", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {"total": "248.00", "item_count": 2, "currency": "USD"}

    def test_empty_cart(self, client, mock_shell):
        mock_shell.checkout.side_effect = EmptyCartException("u1")

        response = client.post("/api/checkout", headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Your cart is empty"


class TestNavigationRoutes:

    def test_open_auth_modal(self, client, mock_shell):
        response = client.post("/api/modal", headers=HEADERS, json={"modal": "auth", "auth_mode": "signup"})

        assert response.status_code == 200
        mock_shell.open_auth.assert_called_once_with(AuthMode.SIGNUP)

    def test_close_modal(self, client, mock_shell):
        client.post("/api/modal", headers=HEADERS, json={"modal": "none"})

        mock_shell.close_modal.assert_called_once()

    def test_faq_out_of_range(self, client, mock_shell):
        mock_shell.toggle_faq.side_effect = IndexError("out of range")

        response = client.post("/api/faq/9", headers=HEADERS)

        assert response.status_code == 404

    def test_view_routes(self, client, mock_shell):
        assert client.post("/api/view/dashboard", headers=HEADERS).status_code == 200
        assert client.post("/api/view/home", headers=HEADERS).status_code == 200

        mock_shell.go_to_dashboard.assert_awaited_once()
        mock_shell.go_home.assert_awaited_once()

    def test_select_tab(self, client, mock_shell):
        response = client.post("/api/dashboard/tab/orders", headers=HEADERS)

        assert response.status_code == 200
        mock_shell.select_tab.assert_called_once_with(DashboardTab.ORDERS)

    def test_unknown_tab(self, client):
        assert client.post("/api/dashboard/tab/billing", headers=HEADERS).status_code == 422

    def test_join_affiliate_program(self, client, mock_shell):
        response = client.post("/api/dashboard/affiliate", headers=HEADERS)

        assert response.status_code == 200
        mock_shell.dashboard.create_affiliate.assert_awaited_once()

    def test_update_profile(self, client, mock_shell):
        response = client.patch("/api/profile", headers=HEADERS, json={"full_name": "Jane Smith"})

        assert response.status_code == 200
        mock_shell.auth.update_profile.assert_awaited_once_with(full_name="Jane Smith", avatar_url=None)


class TestTutorRoutes:

    def test_tutor_landing(self, client, mock_shell):
        mock_shell.tutor_landing.snapshot.return_value = {"tutors": [], "articles": []}

        response = client.get("/api/tutors", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {"tutors": [], "articles": []}

    def test_unknown_article(self, client, mock_shell):
        mock_shell.tutor_landing.toggle_article.side_effect = KeyError(99)

        response = client.post("/api/tutors/articles/99", headers=HEADERS)

        assert response.status_code == 404


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"
