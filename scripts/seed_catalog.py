#!/usr/bin/env python3
"""
Seed the public catalog: products, articles and subscription plans.

Inserts the launch catalog into an empty database. Running it twice inserts
the catalog twice, use it on fresh databases only.

Usage:
    python scripts/seed_catalog.py
"""

import asyncio
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.ext.asyncio import AsyncSession

from enums.billing_interval import BillingInterval
from enums.content_type import ContentType
from models.article import ArticleDTO
from models.product import ProductDTO
from models.subscription_plan import SubscriptionPlanDTO
from repositories.article import ArticleRepository
from repositories.product import ProductRepository
from repositories.subscription_plan import SubscriptionPlanRepository

IMAGE_BASE = "https://images.pexels.com/photos"

PRODUCTS = [
    ProductDTO(name="Complete Business Toolkit",
               description="Everything you need to start and grow your online business",
               price=Decimal("99.00"), category="Digital Product",
               image_url=f"{IMAGE_BASE}/3184292/pexels-photo-3184292.jpeg?auto=compress&cs=tinysrgb&w=800"),
    ProductDTO(name="Marketing Masterclass",
               description="Learn proven strategies to market your products effectively",
               price=Decimal("149.00"), category="Course",
               image_url=f"{IMAGE_BASE}/3184465/pexels-photo-3184465.jpeg?auto=compress&cs=tinysrgb&w=800"),
    ProductDTO(name="1-on-1 Consulting",
               description="Personalized guidance to accelerate your growth",
               price=Decimal("299.00"), category="Service",
               image_url=f"{IMAGE_BASE}/3184360/pexels-photo-3184360.jpeg?auto=compress&cs=tinysrgb&w=800"),
]

ARTICLES = [
    ArticleDTO(title="10 Ways to Monetize Your Skills Online",
               excerpt="Discover proven methods to turn your expertise into income streams that work for you 24/7.",
               content_type=ContentType.FREE, published_at=datetime(2025, 1, 15, 10, 0)),
    ArticleDTO(title="Building a Sustainable Subscription Business",
               excerpt="Learn the secrets to creating recurring revenue and building long-term customer relationships.",
               content_type=ContentType.PREMIUM, published_at=datetime(2025, 1, 10, 10, 0)),
    ArticleDTO(title="The Complete Guide to Affiliate Marketing",
               excerpt="Everything you need to know about earning commissions by promoting products you love.",
               content_type=ContentType.FREE, published_at=datetime(2025, 1, 5, 10, 0)),
]

PLANS = [
    SubscriptionPlanDTO(name="Starter", description="Perfect for individuals just getting started",
                        price=Decimal("9.00"), billing_interval=BillingInterval.MONTHLY,
                        features=["Access to free content", "Community forum access",
                                  "Monthly newsletter", "Basic support"]),
    SubscriptionPlanDTO(name="Professional", description="For serious creators ready to scale",
                        price=Decimal("29.00"), billing_interval=BillingInterval.MONTHLY,
                        features=["All Starter features", "Access to premium content", "Exclusive webinars",
                                  "Priority support", "Affiliate program access", "Advanced analytics"]),
    SubscriptionPlanDTO(name="Enterprise", description="Maximum features for power users",
                        price=Decimal("99.00"), billing_interval=BillingInterval.MONTHLY,
                        features=["All Professional features", "1-on-1 consulting sessions",
                                  "Custom integration support", "White-label options",
                                  "Dedicated account manager"]),
]


async def seed(session: AsyncSession) -> dict[str, list[str]]:
    """
    Insert the catalog in the given session. The caller commits.

    Returns:
        Created ids per collection, in insertion order
    """
    created = {"products": [], "articles": [], "plans": []}
    for product in PRODUCTS:
        created["products"].append(await ProductRepository.create(product, session))
    for article in ARTICLES:
        # The listing only carries excerpts, the body starts out as the excerpt
        article = article.model_copy(update={"content": article.excerpt})
        created["articles"].append(await ArticleRepository.create(article, session))
    for plan in PLANS:
        created["plans"].append(await SubscriptionPlanRepository.create(plan, session))
    return created


async def main():
    from db import create_db_and_tables, get_db_session, session_commit

    await create_db_and_tables()
    async with get_db_session() as session:
        created = await seed(session)
        await session_commit(session)

    for collection, ids in created.items():
        print(f"✅ Inserted {len(ids)} {collection}")


if __name__ == "__main__":
    asyncio.run(main())
