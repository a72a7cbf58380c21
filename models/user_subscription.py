from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, DateTime, ForeignKey, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.subscription_status import SubscriptionStatus
from models.base import Base, generate_uuid
from models.subscription_plan import SubscriptionPlanDTO


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    plan_id = Column(String(36), ForeignKey("subscription_plans.id"), nullable=False)
    status = Column(SQLEnum(SubscriptionStatus), nullable=False, default=SubscriptionStatus.ACTIVE)
    starts_at = Column(DateTime, default=func.now())
    ends_at = Column(DateTime, nullable=True)

    plan = relationship("SubscriptionPlan")


class UserSubscriptionDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    plan_id: str | None = None
    status: SubscriptionStatus | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    plan: SubscriptionPlanDTO | None = None
