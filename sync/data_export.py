"""
Catalog data pulled by RequestDesk through the export API.

Products here include every enabled product regardless of visibility:
the knowledge base wants all content, visibility only matters for the
storefront.
"""

from typing import Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.config import RequestDeskConfig
from sync.catalog_source import CatalogSource
from sync.transformers.entity_transformer import EntityTransformer

logger = logging.getLogger(__name__)


class DataExportService:
    def __init__(self, db_session: AsyncSession, config: RequestDeskConfig):
        self.config = config
        self.catalog = CatalogSource(db_session)

    async def transformer(self) -> EntityTransformer:
        return EntityTransformer(
            store_url=self.config.store_url,
            media_url=self.config.media_url,
            category_names=await self.catalog.category_names()
        )

    def test_connection(self) -> Dict[str, Any]:
        return {
            "success": True,
            "store_url": self.config.store_url,
            "store_name": self.config.store_name,
            "store_code": self.config.store_code,
            "message": "Connection successful",
        }

    async def get_products(self, page_size: int = 100, current_page: int = 1) -> Dict[str, Any]:
        products, total = await self.catalog.enabled_products(page_size, current_page)
        transformer = await self.transformer()

        documents = [transformer.to_document(product).to_payload() for product in products]
        logger.info(f"Exported {len(documents)} products (page {current_page})")

        return {
            "success": True,
            "products": documents,
            "total_count": total,
            "page_size": page_size,
            "current_page": current_page,
        }

    async def get_categories(self) -> Dict[str, Any]:
        categories = await self.catalog.active_categories()
        transformer = await self.transformer()

        documents = [transformer.to_document(category).to_payload() for category in categories]
        logger.info(f"Exported {len(documents)} categories")

        return {
            "success": True,
            "categories": documents,
            "total_count": len(documents),
        }

    async def get_cms_pages(self, page_size: int = 100, current_page: int = 1) -> Dict[str, Any]:
        pages, total = await self.catalog.active_cms_pages(page_size, current_page)
        transformer = await self.transformer()

        documents = [transformer.to_document(page).to_payload() for page in pages]
        logger.info(f"Exported {len(documents)} CMS pages (page {current_page})")

        return {
            "success": True,
            "pages": documents,
            "total_count": total,
            "page_size": page_size,
            "current_page": current_page,
        }
