from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from db import session_execute, session_flush
from models.cartItem import CartItem, CartItemDTO


class CartItemRepository:
    @staticmethod
    async def get_by_user_id(user_id: str, session: AsyncSession) -> list[CartItemDTO]:
        """Cart items of a user joined with their product, oldest line first."""
        stmt = (select(CartItem)
                .options(joinedload(CartItem.product))
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.created_at, CartItem.id))
        cart_items = await session_execute(stmt, session)
        return [CartItemDTO.model_validate(cart_item, from_attributes=True)
                for cart_item in cart_items.scalars().all()]

    @staticmethod
    async def get_by_user_and_product(user_id: str, product_id: str, session: AsyncSession) -> CartItemDTO | None:
        stmt = (select(CartItem)
                .options(joinedload(CartItem.product))
                .where(CartItem.user_id == user_id, CartItem.product_id == product_id))
        cart_item = await session_execute(stmt, session)
        cart_item = cart_item.scalar()
        if cart_item is not None:
            return CartItemDTO.model_validate(cart_item, from_attributes=True)
        else:
            return cart_item

    @staticmethod
    async def create(cart_item_dto: CartItemDTO, session: AsyncSession) -> str:
        cart_item = CartItem(**cart_item_dto.model_dump(exclude_none=True, exclude={'product'}))
        session.add(cart_item)
        await session_flush(session)
        return cart_item.id

    @staticmethod
    async def increment_quantity(cart_item_id: str, session: AsyncSession) -> None:
        # Single UPDATE so concurrent adds can't lose an increment
        stmt = (update(CartItem)
                .where(CartItem.id == cart_item_id)
                .values(quantity=CartItem.quantity + 1))
        await session_execute(stmt, session)

    @staticmethod
    async def update_quantity(cart_item_id: str, user_id: str, quantity: int, session: AsyncSession) -> bool:
        stmt = (update(CartItem)
                .where(CartItem.id == cart_item_id, CartItem.user_id == user_id)
                .values(quantity=quantity))
        result = await session_execute(stmt, session)
        return result.rowcount > 0

    @staticmethod
    async def delete(cart_item_id: str, user_id: str, session: AsyncSession) -> bool:
        stmt = delete(CartItem).where(CartItem.id == cart_item_id, CartItem.user_id == user_id)
        result = await session_execute(stmt, session)
        return result.rowcount > 0
