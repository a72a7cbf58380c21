from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, func
from sqlalchemy import Enum as SQLEnum

from enums.order_status import OrderStatus
from models.base import Base, generate_uuid


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    created_at = Column(DateTime, default=func.now())


class OrderDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    total_amount: Decimal | None = None
    status: OrderStatus | None = None
    created_at: datetime | None = None
