"""
Tests for the error handler

Service exceptions become an ErrorState with a localized message and a
retryable flag, plus the HTTP status the API answers with.
"""

import pytest
from unittest.mock import patch

from enums.text_entity import TextEntity
from exceptions import (
    MonetizeProException,
    AuthException,
    InvalidCredentialsException,
    WeakPasswordException,
    AuthenticationRequiredException,
    FetchException,
    WriteConflictException,
    CartItemNotFoundException,
    ProductNotFoundException,
    ReferralCodeCollisionException,
    SessionMismatchException,
)
from utils.error_handler import handle_service_error, handle_unexpected_error, http_status_for


class TestHandleServiceError:

    def test_message_formatted_with_details(self):
        state = handle_service_error(WeakPasswordException(min_length=6))

        assert state.code == "error_weak_password"
        assert state.message == "Password should be at least 6 characters."
        assert state.retryable is False

    def test_fetch_failure_is_retryable(self):
        state = handle_service_error(FetchException("plans", "timeout"))

        assert state.code == "error_fetch_failed"
        assert state.message == "We couldn't load plans. Please try again."
        assert state.retryable is True

    def test_referral_collision_is_retryable(self):
        assert handle_service_error(ReferralCodeCollisionException("u1", 5)).retryable is True

    def test_session_mismatch_asks_to_sign_in_again(self):
        state = handle_service_error(SessionMismatchException())

        assert state.code == "error_session_mismatch"
        assert state.message == "This page belongs to another session. Please sign in again."
        assert http_status_for(SessionMismatchException()) == 401

    def test_subclass_uses_parent_mapping(self):
        class TokenRevokedException(AuthException):
            pass

        state = handle_service_error(TokenRevokedException("revoked"))

        assert state.code == "error_auth_generic"

    def test_unmapped_exception(self):
        state = handle_service_error(MonetizeProException("boom", retryable=True))

        assert state.code == "error_unexpected"
        assert state.retryable is True

    @patch('utils.error_handler.Localizator')
    def test_missing_format_parameter(self, mock_localizator):
        """A template naming an unknown detail is returned unformatted"""
        mock_localizator.get_text.return_value = "Item {missing} gone"

        state = handle_service_error(CartItemNotFoundException("line-1"))

        assert state.message == "Item {missing} gone"
        mock_localizator.get_text.assert_called_with(TextEntity.USER, "error_cart_item_not_found")


class TestHttpStatus:

    @pytest.mark.parametrize("exception,status", [
        (InvalidCredentialsException("a@b.co"), 401),
        (AuthenticationRequiredException("checkout"), 401),
        (WriteConflictException("cart"), 409),
        (ProductNotFoundException("p1"), 404),
        (FetchException("products"), 503),
        (MonetizeProException("boom"), 500),
    ])
    def test_status(self, exception, status):
        assert http_status_for(exception) == status


class TestHandleUnexpectedError:

    def test_generic_message(self):
        state = handle_unexpected_error(RuntimeError("secret internals"))

        assert state.code == "error_unexpected"
        assert "secret internals" not in state.message
        assert state.retryable is False
