import asyncio
import logging
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import SessionFactory, get_db_session
from enums.content_type import ContentType
from exceptions import FetchException
from models.article import ArticleDTO
from models.product import ProductDTO
from models.subscription_plan import SubscriptionPlanDTO
from repositories.article import ArticleRepository
from repositories.product import ProductRepository
from repositories.subscription_plan import SubscriptionPlanRepository
from utils.error_handler import ErrorState, handle_service_error
from utils.retry import with_retry

logger = logging.getLogger(__name__)

CATALOG_ERRORS = (SQLAlchemyError, OSError)


class CatalogCache:
    """
    Read-mostly cache of the public catalog: products, subscription plans and
    published articles.

    The three collections are fetched concurrently and fail independently, a
    broken collection is empty and has an entry in `errors` while the others
    render normally.
    """

    COLLECTIONS = ("products", "plans", "articles")

    def __init__(self,
                 session_factory: SessionFactory = get_db_session,
                 max_retries: int | None = None,
                 retry_delay: float | None = None):
        self.session_factory = session_factory
        self.max_retries = config.CATALOG_FETCH_RETRIES if max_retries is None else max_retries
        self.retry_delay = config.CATALOG_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        self.products: tuple[ProductDTO, ...] = ()
        self.plans: tuple[SubscriptionPlanDTO, ...] = ()
        self.articles: tuple[ArticleDTO, ...] = ()
        self.errors: dict[str, ErrorState] = {}
        self.loaded = False
        self._fetchers: dict[str, Callable[[AsyncSession], Awaitable[list]]] = {
            "products": ProductRepository.get_active,
            "plans": SubscriptionPlanRepository.get_active,
            "articles": ArticleRepository.get_published,
        }

    async def load(self) -> None:
        """Fetch every collection once per client lifetime."""
        if self.loaded:
            return
        await self._fetch_all(self.COLLECTIONS)
        self.loaded = True

    async def retry_failed(self) -> None:
        failed = tuple(name for name in self.COLLECTIONS if name in self.errors)
        if failed:
            logger.info(f"[Catalog] Retrying {', '.join(failed)}")
            await self._fetch_all(failed)

    def get_product(self, product_id: str) -> ProductDTO | None:
        return next((product for product in self.products if product.id == product_id), None)

    def articles_by_type(self, content_type: ContentType | None = None) -> list[ArticleDTO]:
        if content_type is None:
            return list(self.articles)
        return [article for article in self.articles if article.content_type == content_type]

    async def _fetch_all(self, names: tuple[str, ...]) -> None:
        await asyncio.gather(*(self._fetch(name) for name in names))

    async def _fetch(self, name: str) -> None:
        fetcher = self._fetchers[name]

        @with_retry(max_retries=self.max_retries, delay_base=self.retry_delay, retry_on=CATALOG_ERRORS)
        async def fetch() -> list:
            async with self.session_factory() as session:
                return await fetcher(session)

        try:
            records = await fetch()
        except CATALOG_ERRORS as e:
            setattr(self, name, ())
            self.errors[name] = handle_service_error(FetchException(name, str(e)))
            logger.error(f"[Catalog] Giving up on {name}: {e}")
            return

        setattr(self, name, tuple(records))
        self.errors.pop(name, None)
        logger.debug(f"[Catalog] Loaded {len(records)} {name}")
