# A cart item is one line of the user's cart: a product and how many of it.
# The backend table is the only source of truth, the client keeps a mirror
# that is reloaded after every write.
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, CheckConstraint, UniqueConstraint, func
from sqlalchemy.orm import relationship

from models.base import Base, generate_uuid
from models.product import ProductDTO


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=func.now())

    product = relationship("Product")

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
        UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
    )


class CartItemDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    product_id: str | None = None
    quantity: int | None = None
    created_at: datetime | None = None
    product: ProductDTO | None = None
