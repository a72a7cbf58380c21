from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, ForeignKey, func, CheckConstraint

from models.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the identity provider's user
    id = Column(String(36), ForeignKey("auth_users.id", ondelete="CASCADE"), primary_key=True)
    full_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)
    is_affiliate = Column(Boolean, nullable=False, default=False)
    affiliate_commission_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("10.00"))
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('affiliate_commission_rate >= 0', name='check_commission_rate_positive'),
    )


class ProfileDTO(BaseModel):
    id: str | None = None
    full_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    is_affiliate: bool | None = None
    affiliate_commission_rate: Decimal | None = None
    created_at: datetime | None = None
