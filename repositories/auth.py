from datetime import datetime

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.auth_user import AuthUser, AuthUserDTO, AuthSession, AuthSessionDTO


class AuthRepository:
    @staticmethod
    async def get_user_by_email(email: str, session: AsyncSession) -> AuthUserDTO | None:
        stmt = select(AuthUser).where(AuthUser.email == email)
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return AuthUserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def create_user(user_dto: AuthUserDTO, session: AsyncSession) -> str:
        user = AuthUser(**user_dto.model_dump(exclude_none=True))
        session.add(user)
        await session_flush(session)
        return user.id

    @staticmethod
    async def create_session(session_dto: AuthSessionDTO, session: AsyncSession) -> None:
        session.add(AuthSession(**session_dto.model_dump(exclude_none=True)))
        await session_flush(session)

    @staticmethod
    async def get_session(access_token: str, session: AsyncSession) -> AuthSessionDTO | None:
        stmt = select(AuthSession).where(AuthSession.access_token == access_token)
        auth_session = await session_execute(stmt, session)
        auth_session = auth_session.scalar()
        if auth_session is not None:
            return AuthSessionDTO.model_validate(auth_session, from_attributes=True)
        else:
            return auth_session

    @staticmethod
    async def extend_session(access_token: str, expires_at: datetime, session: AsyncSession) -> bool:
        stmt = update(AuthSession).where(AuthSession.access_token == access_token).values(expires_at=expires_at)
        result = await session_execute(stmt, session)
        return result.rowcount > 0

    @staticmethod
    async def delete_session(access_token: str, session: AsyncSession) -> bool:
        stmt = delete(AuthSession).where(AuthSession.access_token == access_token)
        result = await session_execute(stmt, session)
        return result.rowcount > 0
