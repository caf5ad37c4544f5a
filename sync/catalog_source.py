"""
Read access to the store catalog (products, categories, CMS pages).
"""

from typing import Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from models.catalog import CatalogProduct, CatalogCategory, CmsPage
from models.base import ProductStatus, ProductVisibility
from schemas.catalog import ProductRecord, CategoryRecord, CmsPageRecord


class CatalogSource:
    """Query catalog entities and return them as records"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def exportable_products(self, limit: Optional[int] = None) -> List[ProductRecord]:
        """Enabled products that are visible somewhere in the storefront"""
        query = (
            select(CatalogProduct)
            .where(
                CatalogProduct.status == ProductStatus.ENABLED.value,
                CatalogProduct.visibility != ProductVisibility.NOT_VISIBLE.value
            )
            .order_by(CatalogProduct.id)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [ProductRecord.model_validate(row) for row in result.scalars().all()]

    async def enabled_products(self, page_size: int, current_page: int) -> Tuple[List[ProductRecord], int]:
        """One page of enabled products (any visibility) and the total count"""
        condition = CatalogProduct.status == ProductStatus.ENABLED.value

        total = (await self.db.execute(
            select(func.count()).select_from(CatalogProduct).where(condition)
        )).scalar() or 0

        result = await self.db.execute(
            select(CatalogProduct)
            .where(condition)
            .order_by(CatalogProduct.id)
            .offset((current_page - 1) * page_size)
            .limit(page_size)
        )
        return [ProductRecord.model_validate(row) for row in result.scalars().all()], total

    async def product(self, product_id: int) -> Optional[ProductRecord]:
        row = await self.db.get(CatalogProduct, product_id)
        return ProductRecord.model_validate(row) if row else None

    async def category_names(self) -> Dict[int, str]:
        result = await self.db.execute(select(CatalogCategory.id, CatalogCategory.name))
        return {category_id: name for category_id, name in result.all()}

    async def active_categories(self) -> List[CategoryRecord]:
        """Active categories below the root level"""
        result = await self.db.execute(
            select(CatalogCategory)
            .where(CatalogCategory.is_active == 1, CatalogCategory.level > 1)
            .order_by(CatalogCategory.path, CatalogCategory.position)
        )
        return [CategoryRecord.model_validate(row) for row in result.scalars().all()]

    async def active_cms_pages(self, page_size: int, current_page: int) -> Tuple[List[CmsPageRecord], int]:
        condition = CmsPage.is_active == 1

        total = (await self.db.execute(
            select(func.count()).select_from(CmsPage).where(condition)
        )).scalar() or 0

        result = await self.db.execute(
            select(CmsPage)
            .where(condition)
            .order_by(CmsPage.id)
            .offset((current_page - 1) * page_size)
            .limit(page_size)
        )
        return [CmsPageRecord.model_validate(row) for row in result.scalars().all()], total
