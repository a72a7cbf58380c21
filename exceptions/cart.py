"""
Cart-related exceptions.
"""

from .base import MonetizeProException


class CartException(MonetizeProException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when trying to checkout with empty cart."""

    def __init__(self, user_id: str | None):
        super().__init__(
            f"Cart is empty for user {user_id}",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class CartItemNotFoundException(CartException):
    """Raised when cart item not found."""

    def __init__(self, cart_item_id: str):
        super().__init__(
            f"Cart item {cart_item_id} not found",
            details={'cart_item_id': cart_item_id}
        )
        self.cart_item_id = cart_item_id


class InvalidQuantityException(CartException):
    """Raised when a quantity is not an integer."""

    def __init__(self, quantity):
        super().__init__(
            f"Invalid quantity: {quantity!r}",
            details={'quantity': quantity}
        )
        self.quantity = quantity
