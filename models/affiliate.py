from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, func, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.affiliate_status import AffiliateStatus
from models.base import Base, generate_uuid


class Affiliate(Base):
    __tablename__ = "affiliates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    # One affiliate record per user, enforced by the unique index
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)
    referral_code = Column(String(64), nullable=False, unique=True)
    total_earnings = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total_referrals = Column(Integer, nullable=False, default=0)
    status = Column(SQLEnum(AffiliateStatus), nullable=False, default=AffiliateStatus.PENDING)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('total_earnings >= 0', name='check_earnings_positive'),
        CheckConstraint('total_referrals >= 0', name='check_referrals_positive'),
    )


class AffiliateDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    referral_code: str | None = None
    total_earnings: Decimal | None = None
    total_referrals: int | None = None
    status: AffiliateStatus | None = None
    created_at: datetime | None = None
