from enum import Enum


class ContentType(str, Enum):
    """
    Access classification of an article.

    FREE: Readable by everyone
    PREMIUM: Requires an active subscription
    SPONSORED: Paid placement, readable by everyone
    """
    FREE = "free"
    PREMIUM = "premium"
    SPONSORED = "sponsored"
