"""
Error Handler Utility for the view layer

Provides centralized error handling with:
- Localized error messages
- A retryable flag the UI can offer a "try again" action on
- HTTP status mapping for the web API
- Logging for debugging

Usage in services and routes:
    from utils.error_handler import handle_service_error

    try:
        await cart.add(product_id)
    except MonetizeProException as e:
        error_state = handle_service_error(e)
"""

import logging

from pydantic import BaseModel

from enums.text_entity import TextEntity
from exceptions import (
    MonetizeProException,
    AuthException,
    InvalidCredentialsException,
    WeakPasswordException,
    InvalidEmailException,
    EmailAlreadyRegisteredException,
    AuthenticationRequiredException,
    SessionExpiredException,
    SessionMismatchException,
    InvalidAuthStateException,
    FetchException,
    WriteConflictException,
    EmptyCartException,
    CartItemNotFoundException,
    InvalidQuantityException,
    ProductNotFoundException,
    ReferralCodeCollisionException,
)
from utils.localizator import Localizator


class ErrorState(BaseModel):
    """What a panel, list or form shows instead of its data."""
    code: str
    message: str
    retryable: bool = False


# exception type -> (localization key, HTTP status)
ERROR_MAPPING: dict[type[MonetizeProException], tuple[str, int]] = {
    # Auth exceptions
    InvalidCredentialsException: ("error_invalid_credentials", 401),
    WeakPasswordException: ("error_weak_password", 422),
    InvalidEmailException: ("error_invalid_email", 422),
    EmailAlreadyRegisteredException: ("error_email_taken", 409),
    AuthenticationRequiredException: ("error_auth_required", 401),
    SessionExpiredException: ("error_session_expired", 401),
    SessionMismatchException: ("error_session_mismatch", 401),
    InvalidAuthStateException: ("error_auth_busy", 409),
    AuthException: ("error_auth_generic", 400),

    # Backend exceptions
    FetchException: ("error_fetch_failed", 503),
    WriteConflictException: ("error_write_failed", 409),

    # Cart exceptions
    EmptyCartException: ("error_empty_cart", 400),
    CartItemNotFoundException: ("error_cart_item_not_found", 404),
    InvalidQuantityException: ("error_invalid_quantity", 422),

    # Catalog exceptions
    ProductNotFoundException: ("error_product_not_found", 404),

    # Affiliate exceptions
    ReferralCodeCollisionException: ("error_referral_code", 409),
}


def _lookup(exception: MonetizeProException) -> tuple[str, int] | None:
    # Walk the MRO so subclasses inherit their parent's mapping
    for cls in type(exception).__mro__:
        if cls in ERROR_MAPPING:
            return ERROR_MAPPING[cls]
    return None


def http_status_for(exception: MonetizeProException) -> int:
    mapping = _lookup(exception)
    return mapping[1] if mapping else 500


def handle_service_error(exception: MonetizeProException, entity: TextEntity = TextEntity.USER) -> ErrorState:
    """
    Convert service exception to a localized error state.

    Args:
        exception: The custom exception raised by a service
        entity: Text entity for localization

    Returns:
        ErrorState with message, code and retryable flag
    """
    logging.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    mapping = _lookup(exception)
    if not mapping:
        logging.error(f"Unmapped exception type: {type(exception).__name__}")
        return ErrorState(code="error_unexpected",
                          message=Localizator.get_text(entity, "error_unexpected"),
                          retryable=exception.retryable)

    localization_key, _ = mapping
    try:
        message = Localizator.get_text(entity, localization_key).format(**exception.details)
    except KeyError as e:
        # Missing formatting parameter - log and return without formatting
        logging.error(f"Missing format parameter in error message: {e}")
        message = Localizator.get_text(entity, localization_key)

    return ErrorState(code=localization_key, message=message, retryable=exception.retryable)


def handle_unexpected_error(exception: Exception, entity: TextEntity = TextEntity.USER) -> ErrorState:
    """
    Handle unexpected exceptions (non-MonetizeProException).

    Note:
        Also logs the full exception for debugging
    """
    logging.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=True)
    return ErrorState(code="error_unexpected",
                      message=Localizator.get_text(entity, "error_unexpected"),
                      retryable=False)
