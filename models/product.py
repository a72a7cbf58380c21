from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import Column, String, Text, Numeric, Boolean, DateTime, func, CheckConstraint

from models.base import Base, generate_uuid


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False, default="")
    image_url = Column(String, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_positive'),
    )


class ProductDTO(BaseModel):
    id: str | None = None
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None
    image_url: str | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
