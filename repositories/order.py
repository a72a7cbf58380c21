from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.order import Order, OrderDTO


class OrderRepository:
    @staticmethod
    async def get_by_user_id(user_id: str, session: AsyncSession) -> list[OrderDTO]:
        stmt = (select(Order)
                .where(Order.user_id == user_id)
                .order_by(Order.created_at.desc()))
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.scalars().all()]

    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession) -> str:
        order = Order(**order_dto.model_dump(exclude_none=True))
        session.add(order)
        await session_flush(session)
        return order.id
