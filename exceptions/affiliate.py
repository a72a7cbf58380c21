"""
Affiliate program exceptions.
"""

from .base import MonetizeProException


class AffiliateException(MonetizeProException):
    """Base exception for affiliate errors."""
    pass


class ReferralCodeCollisionException(AffiliateException):
    """Raised when no unique referral code could be generated."""

    retryable = True

    def __init__(self, user_id: str, attempts: int):
        super().__init__(
            f"Could not generate a unique referral code for user {user_id} after {attempts} attempts",
            details={'user_id': user_id, 'attempts': attempts}
        )
        self.user_id = user_id
        self.attempts = attempts
