from enum import Enum


class AffiliateStatus(str, Enum):
    """
    Lifecycle of an affiliate record.

    PENDING: Created by the user, not yet reviewed (default)
    ACTIVE: Earning commission on referred sales
    SUSPENDED: Commission attribution stopped
    """
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
