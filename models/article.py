from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, String, Text, DateTime, func
from sqlalchemy import Enum as SQLEnum

from enums.content_type import ContentType
from models.base import Base, generate_uuid


class Article(Base):
    __tablename__ = "articles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String, nullable=False)
    excerpt = Column(Text, nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    content_type = Column(SQLEnum(ContentType), nullable=False, default=ContentType.FREE)
    author_id = Column(String(36), nullable=True)
    # NULL means draft, only published articles are shown
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())


class ArticleDTO(BaseModel):
    id: str | None = None
    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    content_type: ContentType | None = None
    author_id: str | None = None
    published_at: datetime | None = None
    created_at: datetime | None = None
