from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from db import session_execute, session_flush
from models.user_subscription import UserSubscription, UserSubscriptionDTO


class UserSubscriptionRepository:
    @staticmethod
    async def get_by_user_id(user_id: str, session: AsyncSession) -> list[UserSubscriptionDTO]:
        """Subscriptions of a user joined with their plan."""
        stmt = (select(UserSubscription)
                .options(joinedload(UserSubscription.plan))
                .where(UserSubscription.user_id == user_id)
                .order_by(UserSubscription.starts_at.desc()))
        subscriptions = await session_execute(stmt, session)
        return [UserSubscriptionDTO.model_validate(subscription, from_attributes=True)
                for subscription in subscriptions.scalars().all()]

    @staticmethod
    async def create(subscription_dto: UserSubscriptionDTO, session: AsyncSession) -> str:
        subscription = UserSubscription(**subscription_dto.model_dump(exclude_none=True, exclude={'plan'}))
        session.add(subscription)
        await session_flush(session)
        return subscription.id
