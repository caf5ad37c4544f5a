"""
Wire records exchanged with RequestDesk.

Documents and sync reports are transient: built right before a call and
never persisted locally.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from models.base import SourceType, SyncStatus

PLATFORM = "magento"


class Document(BaseModel):
    """Normalized store entity sent to the RequestDesk knowledge base"""
    model_config = ConfigDict(frozen=True)

    source_id: str = Field(..., min_length=1)
    source_type: SourceType
    title: str
    content: str
    url: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class SyncReport(BaseModel):
    """
    Per-post outcome reported back after an import.

    local_id and local_url are only known when the post was stored.
    """
    model_config = ConfigDict(frozen=True)

    external_id: str = Field(..., min_length=1)
    local_id: Optional[int] = None
    sync_status: SyncStatus
    local_url: Optional[str] = None
    store_identifier: str
    error_message: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "platform": PLATFORM,
            "platform_post_id": str(self.local_id) if self.local_id else None,
            "sync_status": self.sync_status.value,
            "platform_url": self.local_url,
            "platform_store_id": self.store_identifier,
            "error_message": self.error_message,
        }


class PostsPage(BaseModel):
    """One page of remote posts"""
    model_config = ConfigDict(frozen=True)

    # items are validated one by one during the import
    posts: List[Any] = Field(default_factory=list)
    total: int = 0
    has_more: bool = False

    @classmethod
    def from_response(cls, body: Optional[Dict[str, Any]]) -> "PostsPage":
        body = body or {}
        return cls(
            posts=body.get("posts") or [],
            total=body.get("total") or 0,
            has_more=body.get("has_more") is True,
        )
