"""
Pydantic records for blog posts.

ORM rows never leave the loaders package: callers work with immutable
PostRecord snapshots and describe changes with PostFields.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any, List
from datetime import datetime
from models.base import PostStatus, SyncStatus


class PostRecord(BaseModel):
    """Immutable snapshot of a stored post"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: str
    content: Optional[str] = None
    url_key: str
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    featured_image: Optional[str] = None
    status: PostStatus = PostStatus.DRAFT
    author: Optional[str] = None
    store_id: int = 0
    external_id: Optional[str] = None
    sync_status: Optional[SyncStatus] = None
    last_sync_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED


class PostFields(BaseModel):
    """
    Field values for creating or updating a post.

    Every field is optional: on update only the fields that are set (not
    None) are applied, everything else is left untouched. slug and summary
    are inputs for the url key and meta description defaults.
    """
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
    featured_image: Optional[str] = Field(None, max_length=2048)
    author: Optional[str] = Field(None, max_length=255)
    status: Optional[PostStatus] = None
    store_id: Optional[int] = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def clean_title(cls, v):
        """Titles are stripped and may not be blank"""
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Title cannot be empty after stripping")
        return v

    @field_validator("slug", "summary", "meta_title", "meta_description", "featured_image", "author", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def provided(self) -> Dict[str, Any]:
        """Fields carried by this update, without None placeholders"""
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_remote(cls, item: Dict[str, Any]) -> "PostFields":
        """
        Map a RequestDesk post payload onto local fields.

        Only keys present in the payload are mapped so an import never
        blanks out local values the remote did not send.
        """
        mapping = {
            "title": "title",
            "content": "content",
            "slug": "slug",
            "summary": "summary",
            "seo_title": "meta_title",
            "seo_description": "meta_description",
            "featured_image": "featured_image",
            "author": "author",
        }
        values: Dict[str, Any] = {}
        for remote_key, local_key in mapping.items():
            if item.get(remote_key) is not None:
                values[local_key] = item[remote_key]

        if "status" in item:
            values["status"] = PostStatus.PUBLISHED if item["status"] == "publish" else PostStatus.DRAFT

        return cls(**values)


class UpsertResult(BaseModel):
    """Outcome of a reconciliation by external id"""
    model_config = ConfigDict(frozen=True)

    post: PostRecord
    created: bool


class PostList(BaseModel):
    """One page of posts"""
    model_config = ConfigDict(frozen=True)

    items: List[PostRecord] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 20

    @property
    def has_more(self) -> bool:
        return self.page * self.per_page < self.total
