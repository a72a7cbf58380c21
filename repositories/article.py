from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.content_type import ContentType
from models.article import Article, ArticleDTO


class ArticleRepository:
    @staticmethod
    async def get_published(session: AsyncSession, content_type: ContentType | None = None) -> list[ArticleDTO]:
        """
        Published articles, newest first.

        Articles without published_at are drafts and never returned.
        """
        stmt = select(Article).where(Article.published_at.is_not(None))
        if content_type is not None:
            stmt = stmt.where(Article.content_type == content_type)
        stmt = stmt.order_by(Article.published_at.desc())
        articles = await session_execute(stmt, session)
        return [ArticleDTO.model_validate(article, from_attributes=True) for article in articles.scalars().all()]

    @staticmethod
    async def create(article_dto: ArticleDTO, session: AsyncSession) -> str:
        article = Article(**article_dto.model_dump(exclude_none=True))
        session.add(article)
        await session_flush(session)
        return article.id
