from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.profile import Profile, ProfileDTO


class ProfileRepository:
    @staticmethod
    async def get_by_id(user_id: str, session: AsyncSession) -> ProfileDTO | None:
        stmt = select(Profile).where(Profile.id == user_id)
        profile = await session_execute(stmt, session)
        profile = profile.scalar()
        if profile is not None:
            return ProfileDTO.model_validate(profile, from_attributes=True)
        else:
            return profile

    @staticmethod
    async def create(profile_dto: ProfileDTO, session: AsyncSession) -> str:
        profile = Profile(**profile_dto.model_dump(exclude_none=True))
        session.add(profile)
        await session_flush(session)
        return profile.id

    @staticmethod
    async def update(profile_dto: ProfileDTO, session: AsyncSession) -> None:
        profile_dto_dict = profile_dto.model_dump()
        none_keys = [k for k, v in profile_dto_dict.items() if v is None]
        for k in none_keys:
            profile_dto_dict.pop(k)
        profile_dto_dict.pop('id', None)

        stmt = update(Profile).where(Profile.id == profile_dto.id).values(**profile_dto_dict)
        await session_execute(stmt, session)
