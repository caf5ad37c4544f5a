from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, SmallInteger, JSON, Index
from datetime import datetime
from models.base import Base, ProductStatus, ProductVisibility


class CatalogProduct(Base):
    """
    Store catalog product (read-only for the sync service).

    gallery holds media paths relative to the catalog/product media folder,
    category_ids the ids of the categories the product is assigned to.
    """
    __tablename__ = "catalog_product"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sku = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    type_id = Column(String(32), nullable=False, default="simple")
    status = Column(SmallInteger, nullable=False, default=ProductStatus.ENABLED.value, index=True)
    visibility = Column(SmallInteger, nullable=False, default=ProductVisibility.BOTH.value, index=True)

    price = Column(Numeric(12, 4), nullable=True)
    special_price = Column(Numeric(12, 4), nullable=True)
    weight = Column(Numeric(12, 4), nullable=True)

    short_description = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    meta_keyword = Column(Text, nullable=True)
    url_key = Column(String(255), nullable=True)

    image = Column(String(255), nullable=True)
    gallery = Column(JSON, nullable=True)
    category_ids = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_catalog_product_status_visibility", "status", "visibility"),
    )


class CatalogCategory(Base):
    """Store catalog category; level 0/1 are root categories"""
    __tablename__ = "catalog_category"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    path = Column(String(255), nullable=False)
    level = Column(Integer, nullable=False, default=2)
    position = Column(Integer, nullable=False, default=0)
    is_active = Column(SmallInteger, nullable=False, default=1, index=True)
    description = Column(Text, nullable=True)
    url_key = Column(String(255), nullable=True)
    product_count = Column(Integer, nullable=False, default=0)


class CmsPage(Base):
    """Store CMS page"""
    __tablename__ = "cms_page"

    id = Column(Integer, primary_key=True, autoincrement=True)
    identifier = Column(String(100), nullable=True)
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=True)
    is_active = Column(SmallInteger, nullable=False, default=1, index=True)
    meta_title = Column(String(255), nullable=True)
    meta_keywords = Column(Text, nullable=True)
    meta_description = Column(Text, nullable=True)
    creation_time = Column(DateTime, nullable=False, default=datetime.utcnow)
    update_time = Column(DateTime, nullable=False, default=datetime.utcnow)
