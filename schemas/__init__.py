"""
Pydantic schemas for data validation and serialization.

Schemas:
    post: Post snapshots and field updates used by the loaders
    catalog: Read-only product, category and CMS page snapshots
    documents: Wire records exchanged with RequestDesk
    results: Import and export outcomes
    api: API endpoint request/response schemas

Usage:
    from schemas import PostFields, ImportResult
    from schemas.api import ExternalPostCreate, HealthCheckResponse

Example:
    fields = PostFields.from_remote({"title": "Spring Guide", "status": "publish"})
    assert fields.status == PostStatus.PUBLISHED
"""

from schemas.post import PostRecord, PostFields, UpsertResult, PostList
from schemas.catalog import ProductRecord, CategoryRecord, CmsPageRecord
from schemas.documents import Document, SyncReport, PostsPage
from schemas.results import ImportResult, ExportResult

__all__ = [
    "PostRecord",
    "PostFields",
    "UpsertResult",
    "PostList",
    "ProductRecord",
    "CategoryRecord",
    "CmsPageRecord",
    "Document",
    "SyncReport",
    "PostsPage",
    "ImportResult",
    "ExportResult",
]
