"""
Catalog-related exceptions.
"""

from .base import MonetizeProException


class CatalogException(MonetizeProException):
    """Base exception for catalog errors."""
    pass


class ProductNotFoundException(CatalogException):
    """Raised when a product does not exist or is not active."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id
