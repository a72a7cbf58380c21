# Storage of the identity provider. Nothing outside services/identity.py and
# repositories/auth.py reads these tables, the rest of the app only sees
# sessions and profiles.
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, DateTime, ForeignKey, func

from models.base import Base, generate_uuid


class AuthUser(Base):
    __tablename__ = "auth_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now())


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    access_token = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("auth_users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=func.now())


class AuthUserDTO(BaseModel):
    id: str | None = None
    email: str | None = None
    password_hash: str | None = None
    created_at: datetime | None = None


class AuthSessionDTO(BaseModel):
    access_token: str | None = None
    user_id: str | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None
