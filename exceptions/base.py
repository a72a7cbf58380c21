"""
Base exception classes for MonetizePro.
"""


class MonetizeProException(Exception):
    """
    Base exception for all storefront errors.

    All custom exceptions in the app should inherit from this class.
    This allows catching all app-specific exceptions with a single handler.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (entity IDs, states, etc.)
        retryable: Whether repeating the same operation may succeed
    """

    retryable: bool = False

    def __init__(self, message: str, details: dict | None = None, retryable: bool | None = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional context
            retryable: Overrides the class default when given
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if retryable is not None:
            self.retryable = retryable

    def __str__(self) -> str:
        """Return the error message."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation with context."""
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"
