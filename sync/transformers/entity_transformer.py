"""
Convert store entities into RequestDesk documents.

The transformer is pure: everything it needs beyond the entity itself
(category names, media URL, gallery access) is handed in at construction,
so the same instance can be reused for a whole export.
"""

from typing import Callable, List, Mapping, Optional, Union
import logging

from models.base import SourceType, ProductStatus
from schemas.catalog import ProductRecord, CategoryRecord, CmsPageRecord
from schemas.documents import Document
from core.exceptions import TransformError
from sync.transformers.text import slugify, strip_tags

logger = logging.getLogger(__name__)

NO_SELECTION = "no_selection"

GalleryLoader = Callable[[ProductRecord], List[str]]
Entity = Union[ProductRecord, CategoryRecord, CmsPageRecord]


def format_money(value: Optional[float]) -> str:
    """Display price with thousands separator, e.g. 1,234.50"""
    return f"{float(value):,.2f}"


def format_decimal(value: Optional[float]) -> Optional[str]:
    """Wire price without separator, e.g. 1234.50"""
    if value is None:
        return None
    return f"{float(value):.2f}"


def format_weight(value: Optional[float]) -> str:
    return f"{float(value):g}"


class EntityTransformer:
    """
    Build Document records for products, categories and CMS pages.

    Args:
        store_url: Base URL of the storefront
        media_url: Base URL of the media folder (ends with a slash)
        category_names: Category id → display name; unknown ids are skipped
        gallery_loader: Returns the product's gallery image URLs. When it
            raises, the product's main image is used instead.
    """

    def __init__(
        self,
        store_url: str,
        media_url: str,
        category_names: Optional[Mapping[int, str]] = None,
        gallery_loader: Optional[GalleryLoader] = None
    ):
        self.store_url = store_url.rstrip("/")
        self.media_url = media_url if media_url.endswith("/") else media_url + "/"
        self.category_names = dict(category_names or {})
        self.gallery_loader = gallery_loader or self.default_gallery

    def to_document(self, entity: Entity) -> Document:
        if isinstance(entity, ProductRecord):
            return self.product_to_document(entity)
        if isinstance(entity, CategoryRecord):
            return self.category_to_document(entity)
        if isinstance(entity, CmsPageRecord):
            return self.cms_page_to_document(entity)

        raise TransformError(
            f"Unsupported entity type: {type(entity).__name__}",
            context={"entity_type": type(entity).__name__}
        )

    # ========================================================================
    # Products
    # ========================================================================

    def product_to_document(self, product: ProductRecord) -> Document:
        images = self.product_images(product)

        return Document(
            source_id=f"magento_product_{product.id}",
            source_type=SourceType.ECOMMERCE_PRODUCT,
            title=product.name,
            content=self.product_content(product),
            url=self.product_url(product),
            metadata={
                "sku": product.sku,
                "price": format_decimal(product.price or 0),
                "special_price": format_decimal(product.special_price) if product.special_price else None,
                "product_type": product.type_id,
                "status": "enabled" if product.status == ProductStatus.ENABLED.value else "disabled",
                "visibility": product.visibility,
                "categories": self.product_categories(product),
                "images": images,
                "thumbnail": images[0] if images else None,
                "weight": product.weight,
                "created_at": product.created_at.isoformat() if product.created_at else None,
                "updated_at": product.updated_at.isoformat() if product.updated_at else None,
                "store_url": self.store_url,
                "magento_id": product.id,
            }
        )

    def product_content(self, product: ProductRecord) -> str:
        """
        Markdown body for a product.

        Sections without data are left out entirely, so the output never
        contains an empty heading.
        """
        parts = [f"# {product.name}"]

        short_description = strip_tags(product.short_description)
        if short_description:
            parts.append(f"\n## Overview\n{short_description}")

        description = strip_tags(product.description)
        if description:
            parts.append(f"\n## Description\n{description}")

        details = []
        if product.sku:
            details.append(f"SKU: {product.sku}")
        if product.price:
            details.append(f"Price: ${format_money(product.price)}")
        if product.special_price:
            details.append(f"Sale Price: ${format_money(product.special_price)}")
        if product.weight:
            details.append(f"Weight: {format_weight(product.weight)}")

        if details:
            parts.append("\n## Product Details\n" + "\n".join(details))

        if product.meta_keyword and product.meta_keyword.strip():
            parts.append(f"\n## Keywords\n{product.meta_keyword.strip()}")

        return "\n".join(parts)

    def product_url(self, product: ProductRecord) -> str:
        key = product.url_key or product.sku
        return f"{self.store_url}/{key}.html" if key else ""

    def product_images(self, product: ProductRecord) -> List[str]:
        try:
            return list(self.gallery_loader(product))
        except Exception as e:
            logger.warning(
                f"Gallery unavailable for product {product.id}, using main image: {str(e)}"
            )
            return self.main_image(product)

    def main_image(self, product: ProductRecord) -> List[str]:
        if product.image and product.image != NO_SELECTION:
            return [f"{self.media_url}catalog/product{product.image}"]
        return []

    def default_gallery(self, product: ProductRecord) -> List[str]:
        return [
            f"{self.media_url}catalog/product{path}"
            for path in product.gallery
            if path and path != NO_SELECTION
        ]

    def product_categories(self, product: ProductRecord) -> List[str]:
        return [
            self.category_names[category_id]
            for category_id in product.category_ids
            if category_id in self.category_names
        ]

    # ========================================================================
    # Categories
    # ========================================================================

    def category_to_document(self, category: CategoryRecord) -> Document:
        content = f"Category: {category.name}\nPath: {category.path}"
        description = strip_tags(category.description)
        if description:
            content += f"\n{description}"

        url_key = category.url_key or slugify(category.name)

        return Document(
            source_id=f"magento_category_{category.id}",
            source_type=SourceType.CATEGORY,
            title=category.name,
            content=content,
            url=f"{self.store_url}/{url_key}.html",
            metadata={
                "magento_id": category.id,
                "path": category.path,
                "level": category.level,
                "position": category.position,
                "is_active": category.is_active,
                "product_count": category.product_count,
            }
        )

    # ========================================================================
    # CMS pages
    # ========================================================================

    def cms_page_to_document(self, page: CmsPageRecord) -> Document:
        # page bodies are sent as stored, markup included
        return Document(
            source_id=f"magento_cms_{page.id}",
            source_type=SourceType.CMS_PAGE,
            title=page.title or "",
            content=page.content or "",
            url=f"{self.store_url}/{page.identifier}" if page.identifier else "",
            metadata={
                "magento_id": page.id,
                "identifier": page.identifier,
                "is_active": page.is_active,
                "creation_time": page.creation_time.isoformat() if page.creation_time else None,
                "update_time": page.update_time.isoformat() if page.update_time else None,
                "meta_title": page.meta_title,
                "meta_keywords": page.meta_keywords,
                "meta_description": page.meta_description,
            }
        )
