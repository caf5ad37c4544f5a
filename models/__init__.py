"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (PostStatus, SyncStatus, SourceType, ...)
    post: Blog posts and the post → product link table
    catalog: Store catalog products, categories and CMS pages
    sync_run: Import/export run tracking

Usage:
    from models.post import Post, PostProductLink
    from models.base import PostStatus, SyncStatus

Relationships:
    - Post → PostProductLink (one-to-many by post_id, no cascade)
    - PostProductLink.product_id → CatalogProduct.id (soft reference)
"""

from models.base import Base, PostStatus, SyncStatus, SourceType, SyncDirection, RunStatus
from models.post import Post, PostProductLink
from models.catalog import CatalogProduct, CatalogCategory, CmsPage
from models.sync_run import SyncRun

__all__ = [
    "Base",
    "PostStatus",
    "SyncStatus",
    "SourceType",
    "SyncDirection",
    "RunStatus",
    "Post",
    "PostProductLink",
    "CatalogProduct",
    "CatalogCategory",
    "CmsPage",
    "SyncRun",
]
