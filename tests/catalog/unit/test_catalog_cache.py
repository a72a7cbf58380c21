"""
Unit Tests: CatalogCache

Tests for services/catalog.py covering:
- load() - all three collections, once per client
- per-collection failure isolation
- retry with backoff and retry_failed()
- lookups (get_product, articles_by_type)
"""

import pytest
from unittest.mock import AsyncMock, patch

from sqlalchemy.exc import OperationalError

from enums.content_type import ContentType
from services.catalog import CatalogCache


def backend_down():
    return OperationalError("SELECT", {}, Exception("unable to open database file"))


@pytest.fixture
def catalog(session_factory):
    return CatalogCache(session_factory, max_retries=2, retry_delay=0)


class TestCatalogLoad:

    @pytest.mark.asyncio
    async def test_load_fetches_all_collections(self, catalog, catalog_ids):
        await catalog.load()

        assert catalog.loaded
        assert {product.id for product in catalog.products} == set(catalog_ids["products"])
        assert [plan.name for plan in catalog.plans] == ["Starter", "Professional", "Enterprise"]
        assert len(catalog.articles) == 3
        assert catalog.errors == {}

    @pytest.mark.asyncio
    async def test_articles_newest_first(self, catalog, catalog_ids):
        await catalog.load()

        assert catalog.articles[0].title == "10 Ways to Monetize Your Skills Online"
        assert catalog.articles[-1].title == "The Complete Guide to Affiliate Marketing"

    @pytest.mark.asyncio
    async def test_load_runs_once(self, catalog, catalog_ids):
        """A second load() does not hit the backend again"""
        await catalog.load()

        with patch("services.catalog.ProductRepository.get_active", new_callable=AsyncMock) as get_active:
            await catalog.load()

        get_active.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_catalog(self, catalog):
        await catalog.load()

        assert catalog.products == ()
        assert catalog.errors == {}


class TestCatalogFailures:

    @pytest.mark.asyncio
    async def test_failing_collection_does_not_block_others(self, session_factory, catalog_ids):
        """Plans fail, products and articles still render"""
        failing = AsyncMock(side_effect=backend_down())
        catalog = CatalogCache(session_factory, max_retries=2, retry_delay=0)
        catalog._fetchers["plans"] = failing

        await catalog.load()

        assert catalog.plans == ()
        assert set(catalog.errors) == {"plans"}
        assert catalog.errors["plans"].retryable is True
        assert len(catalog.products) == 3
        assert len(catalog.articles) == 3
        # One attempt plus two retries
        assert failing.await_count == 3

    @pytest.mark.asyncio
    async def test_transient_failure_recovers_within_retries(self, session_factory, catalog_ids):
        """A fetch that fails once and then succeeds leaves no error"""
        catalog = CatalogCache(session_factory, max_retries=2, retry_delay=0)
        real_fetch = catalog._fetchers["products"]
        calls = {"count": 0}

        async def flaky(session):
            calls["count"] += 1
            if calls["count"] == 1:
                raise backend_down()
            return await real_fetch(session)

        catalog._fetchers["products"] = flaky
        await catalog.load()

        assert len(catalog.products) == 3
        assert "products" not in catalog.errors

    @pytest.mark.asyncio
    async def test_retry_failed_refetches_only_failed(self, session_factory, catalog_ids):
        catalog = CatalogCache(session_factory, max_retries=0, retry_delay=0)
        real_articles = catalog._fetchers["articles"]
        catalog._fetchers["articles"] = AsyncMock(side_effect=backend_down())
        await catalog.load()
        assert "articles" in catalog.errors

        products_fetch = AsyncMock(wraps=catalog._fetchers["products"])
        catalog._fetchers["products"] = products_fetch
        catalog._fetchers["articles"] = real_articles
        await catalog.retry_failed()

        assert catalog.errors == {}
        assert len(catalog.articles) == 3
        products_fetch.assert_not_awaited()


class TestCatalogLookups:

    @pytest.mark.asyncio
    async def test_get_product(self, catalog, catalog_ids):
        await catalog.load()

        product = catalog.get_product(catalog_ids["products"][0])

        assert product.name == "Complete Business Toolkit"
        assert catalog.get_product("missing") is None

    @pytest.mark.asyncio
    async def test_articles_by_type(self, catalog, catalog_ids):
        await catalog.load()

        assert len(catalog.articles_by_type(ContentType.FREE)) == 2
        assert len(catalog.articles_by_type(ContentType.PREMIUM)) == 1
        assert catalog.articles_by_type(ContentType.SPONSORED) == []
        assert len(catalog.articles_by_type()) == 3
