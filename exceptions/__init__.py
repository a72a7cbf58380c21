"""
Custom exceptions for MonetizePro.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
MonetizeProException (base)
├── AuthException
│   ├── InvalidCredentialsException
│   ├── WeakPasswordException
│   ├── InvalidEmailException
│   ├── EmailAlreadyRegisteredException
│   ├── AuthenticationRequiredException
│   ├── SessionExpiredException
│   ├── SessionMismatchException
│   └── InvalidAuthStateException
├── FetchException (retryable)
├── WriteConflictException (retryable)
├── CartException
│   ├── EmptyCartException
│   ├── CartItemNotFoundException
│   └── InvalidQuantityException
├── CatalogException
│   └── ProductNotFoundException
└── AffiliateException
    └── ReferralCodeCollisionException (retryable)

Usage:
------
Services raise specific exceptions:
    raise ProductNotFoundException(product_id="...")

The view layer turns them into an error state:
    try:
        await cart.add(product_id)
    except MonetizeProException as e:
        error = handle_service_error(e)
"""

from .base import MonetizeProException
from .auth import (
    AuthException,
    InvalidCredentialsException,
    WeakPasswordException,
    InvalidEmailException,
    EmailAlreadyRegisteredException,
    AuthenticationRequiredException,
    SessionExpiredException,
    SessionMismatchException,
    InvalidAuthStateException,
)
from .data import FetchException, WriteConflictException
from .cart import CartException, EmptyCartException, CartItemNotFoundException, InvalidQuantityException
from .catalog import CatalogException, ProductNotFoundException
from .affiliate import AffiliateException, ReferralCodeCollisionException

__all__ = [
    # Base
    'MonetizeProException',

    # Auth
    'AuthException',
    'InvalidCredentialsException',
    'WeakPasswordException',
    'InvalidEmailException',
    'EmailAlreadyRegisteredException',
    'AuthenticationRequiredException',
    'SessionExpiredException',
    'SessionMismatchException',
    'InvalidAuthStateException',

    # Backend data
    'FetchException',
    'WriteConflictException',

    # Cart
    'CartException',
    'EmptyCartException',
    'CartItemNotFoundException',
    'InvalidQuantityException',

    # Catalog
    'CatalogException',
    'ProductNotFoundException',

    # Affiliate
    'AffiliateException',
    'ReferralCodeCollisionException',
]
