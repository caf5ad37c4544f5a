"""
Read-only snapshots of store catalog entities handed to the transformer.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime


class ProductRecord(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    sku: str
    name: str
    type_id: str = "simple"
    status: int = 1
    visibility: int = 4
    price: Optional[float] = None
    special_price: Optional[float] = None
    weight: Optional[float] = None
    short_description: Optional[str] = None
    description: Optional[str] = None
    meta_keyword: Optional[str] = None
    url_key: Optional[str] = None
    image: Optional[str] = None
    gallery: List[str] = Field(default_factory=list)
    category_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("gallery", "category_ids", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []


class CategoryRecord(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    path: str = ""
    level: int = 2
    position: int = 0
    is_active: int = 1
    description: Optional[str] = None
    url_key: Optional[str] = None
    product_count: int = 0


class CmsPageRecord(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    identifier: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    is_active: int = 1
    meta_title: Optional[str] = None
    meta_keywords: Optional[str] = None
    meta_description: Optional[str] = None
    creation_time: Optional[datetime] = None
    update_time: Optional[datetime] = None
