from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, String, Text, Numeric, Boolean, DateTime, JSON, func
from sqlalchemy import Enum as SQLEnum

from enums.billing_interval import BillingInterval
from models.base import Base, generate_uuid


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    billing_interval = Column(SQLEnum(BillingInterval), nullable=False, default=BillingInterval.MONTHLY)
    # Ordered list of feature strings, rendered top to bottom
    features = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())


class SubscriptionPlanDTO(BaseModel):
    id: str | None = None
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    billing_interval: BillingInterval | None = None
    features: list[str] = []
    is_active: bool | None = None
    created_at: datetime | None = None
