from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.product import Product, ProductDTO


class ProductRepository:
    @staticmethod
    async def get_active(session: AsyncSession) -> list[ProductDTO]:
        stmt = (select(Product)
                .where(Product.is_active == True)
                .order_by(Product.created_at, Product.name))
        products = await session_execute(stmt, session)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in products.scalars().all()]

    @staticmethod
    async def get_active_by_id(product_id: str, session: AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id, Product.is_active == True)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        else:
            return product

    @staticmethod
    async def create(product_dto: ProductDTO, session: AsyncSession) -> str:
        product = Product(**product_dto.model_dump(exclude_none=True))
        session.add(product)
        await session_flush(session)
        return product.id
