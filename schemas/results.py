"""
Outcomes of import and export runs
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class ImportResult(BaseModel):
    """Counts for one imported page; has_more is copied from the remote page"""
    model_config = ConfigDict(frozen=True)

    created_count: int = 0
    updated_count: int = 0
    failed_count: int = 0
    has_more: bool = False
    total_fetched: int = 0
    errors: List[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed_count == 0


class ExportResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    total_products: int = 0
    total_synced: int = 0
    collection_id: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
