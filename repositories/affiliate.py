from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.affiliate import Affiliate, AffiliateDTO


class AffiliateRepository:
    @staticmethod
    async def get_by_user_id(user_id: str, session: AsyncSession) -> AffiliateDTO | None:
        stmt = select(Affiliate).where(Affiliate.user_id == user_id)
        affiliate = await session_execute(stmt, session)
        affiliate = affiliate.scalar()
        if affiliate is not None:
            return AffiliateDTO.model_validate(affiliate, from_attributes=True)
        else:
            return affiliate

    @staticmethod
    async def referral_code_exists(referral_code: str, session: AsyncSession) -> bool:
        stmt = select(Affiliate.id).where(Affiliate.referral_code == referral_code)
        result = await session_execute(stmt, session)
        return result.scalar() is not None

    @staticmethod
    async def create(affiliate_dto: AffiliateDTO, session: AsyncSession) -> AffiliateDTO:
        affiliate = Affiliate(**affiliate_dto.model_dump(exclude_none=True))
        session.add(affiliate)
        await session_flush(session)
        await session.refresh(affiliate)
        return AffiliateDTO.model_validate(affiliate, from_attributes=True)
