"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from models.base import PostStatus, SyncDirection, RunStatus
from schemas.post import PostFields, PostRecord
from core.config import RequestDeskConfig


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


# ============================================================================
# Health Check Schemas
# ============================================================================

class SyncRunInfo(BaseModel):
    """Latest import/export runs for the health check"""
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    run_id: str
    direction: SyncDirection
    status: RunStatus
    triggered_by: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    records_fetched: int = 0
    records_created: int = 0
    records_updated: int = 0
    records_failed: int = 0
    has_more: bool = False
    error_message: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    requestdesk_configured: bool = False
    latest_runs: List[SyncRunInfo] = Field(default_factory=list)

    @model_validator(mode="after")
    def determine_status(self):
        """Unhealthy without a database, degraded when the last run failed"""
        if not self.database_connected:
            self.status = "unhealthy"
        elif self.latest_runs and self.latest_runs[0].status == RunStatus.FAILED.value:
            self.status = "degraded"
        else:
            self.status = "healthy"
        return self

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "status": "healthy",
            "timestamp": "2024-01-15T10:30:00Z",
            "database_connected": True,
            "requestdesk_configured": True,
            "latest_runs": [
                {
                    "run_id": "0b6a2c1e-0d7c-4c53-9a39-1f5a0b1f6a11",
                    "direction": "import",
                    "status": "success",
                    "triggered_by": "scheduler",
                    "started_at": "2024-01-15T10:00:00Z",
                    "records_fetched": 20,
                    "records_created": 3,
                    "records_updated": 17,
                    "records_failed": 0,
                    "has_more": True
                }
            ]
        }
    })


# ============================================================================
# External Blog Schemas
# ============================================================================

class ExternalPostCreate(BaseModel):
    """
    Post pushed by RequestDesk; upserted when requestdesk_post_id is set.

    Keys without a local field (tags, categories) are accepted and ignored.
    """
    title: str = Field(..., min_length=1, max_length=255)
    content: str
    slug: Optional[str] = None
    summary: Optional[str] = None
    author: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    featured_image: Optional[str] = None
    published: bool = False
    requestdesk_post_id: Optional[str] = None

    @field_validator("requestdesk_post_id", mode="before")
    @classmethod
    def id_to_str(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    def to_fields(self) -> PostFields:
        return PostFields(
            title=self.title,
            content=self.content,
            slug=self.slug,
            summary=self.summary,
            meta_title=self.seo_title,
            meta_description=self.seo_description,
            featured_image=self.featured_image,
            author=self.author,
            status=PostStatus.PUBLISHED if self.published else PostStatus.DRAFT,
        )


class ExternalPostUpdate(BaseModel):
    """Partial update; omitted fields are left untouched"""
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    author: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    featured_image: Optional[str] = None
    published: Optional[bool] = None

    def to_fields(self) -> PostFields:
        status = None
        if self.published is not None:
            status = PostStatus.PUBLISHED if self.published else PostStatus.DRAFT

        return PostFields(
            title=self.title,
            content=self.content,
            slug=self.slug,
            summary=self.summary,
            meta_title=self.seo_title,
            meta_description=self.seo_description,
            featured_image=self.featured_image,
            author=self.author,
            status=status,
        )


class PostPayload(BaseModel):
    """Post as exposed to RequestDesk"""
    id: int
    title: str
    content: Optional[str] = None
    slug: str
    author: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    featured_image: Optional[str] = None
    status: str
    requestdesk_post_id: Optional[str] = None
    sync_status: Optional[str] = None
    last_sync: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    url: str

    @classmethod
    def from_record(cls, post: PostRecord, config: RequestDeskConfig) -> "PostPayload":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            slug=post.url_key,
            author=post.author,
            seo_title=post.meta_title,
            seo_description=post.meta_description,
            featured_image=post.featured_image,
            status="published" if post.is_published else "draft",
            requestdesk_post_id=post.external_id,
            sync_status=post.sync_status.value if post.sync_status else None,
            last_sync=post.last_sync_at,
            created_at=post.created_at,
            updated_at=post.updated_at,
            url=f"{config.base_store_url}/blog/post/{post.url_key}",
        )


class PostResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    post: PostPayload


class PostListResponse(BaseModel):
    success: bool = True
    posts: List[PostPayload] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 20
    has_more: bool = False


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ============================================================================
# Admin Schemas
# ============================================================================

class ConnectionTestRequest(BaseModel):
    """Credentials to test before saving them; defaults to the configured ones"""
    api_key: Optional[str] = None
    endpoint_url: Optional[str] = None


class LinkProductsRequest(BaseModel):
    product_ids: List[int] = Field(default_factory=list)


class SyncStatusRequest(BaseModel):
    status: str


class LinkedProductsResponse(BaseModel):
    success: bool = True
    post_id: int
    product_ids: List[int] = Field(default_factory=list)


class RelatedPostsResponse(BaseModel):
    success: bool = True
    product_id: int
    query: str
    posts: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = 0
    confidence: float = 0.0
