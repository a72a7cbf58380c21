from enum import Enum


class BillingInterval(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
