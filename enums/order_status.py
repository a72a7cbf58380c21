from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"        # Created, waiting for payment
    COMPLETED = "completed"    # Paid and delivered
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
