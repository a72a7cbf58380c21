from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.subscription_plan import SubscriptionPlan, SubscriptionPlanDTO


class SubscriptionPlanRepository:
    @staticmethod
    async def get_active(session: AsyncSession) -> list[SubscriptionPlanDTO]:
        stmt = (select(SubscriptionPlan)
                .where(SubscriptionPlan.is_active == True)
                .order_by(SubscriptionPlan.price))
        plans = await session_execute(stmt, session)
        return [SubscriptionPlanDTO.model_validate(plan, from_attributes=True) for plan in plans.scalars().all()]

    @staticmethod
    async def create(plan_dto: SubscriptionPlanDTO, session: AsyncSession) -> str:
        plan = SubscriptionPlan(**plan_dto.model_dump(exclude_none=True))
        session.add(plan)
        await session_flush(session)
        return plan.id
