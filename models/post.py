from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, Index, SmallInteger
from datetime import datetime
from models.base import Base, SyncStatus, PostStatus


class Post(Base):
    """
    Blog post stored in the shop and kept in sync with RequestDesk.

    Identity:
    - id is the local identifier
    - external_id is the RequestDesk post id (reconciliation key, unique when set)
    - (url_key, store_id) is unique; store_id 0 means "all stores"
    """
    __tablename__ = "requestdesk_blog_post"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Content
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    url_key = Column(String(255), nullable=False)
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)
    featured_image = Column(String(2048), nullable=True)
    status = Column(SmallInteger, nullable=False, default=PostStatus.DRAFT.value, index=True)
    author = Column(String(255), nullable=True)
    store_id = Column(Integer, nullable=False, default=0, index=True)

    # RequestDesk tracking
    external_id = Column(String(255), nullable=True, unique=True)
    sync_status = Column(Enum(SyncStatus), nullable=True, index=True)
    last_sync_at = Column(DateTime, nullable=True)

    # Timestamps (assigned by the repository)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_blog_post_url_key_store", "url_key", "store_id", unique=True),
    )


class PostProductLink(Base):
    """Ordered post → product links, replaced wholesale on every relink"""
    __tablename__ = "requestdesk_blog_post_product"

    post_id = Column(Integer, primary_key=True)
    product_id = Column(Integer, primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)
