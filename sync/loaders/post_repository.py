"""
Persistence for blog posts.

Lookups come in two flavours:
- find_* returns None on a miss (expected misses never raise)
- get_* raises NotFoundError

Public methods return immutable PostRecord snapshots. The row_* methods hand
out ORM rows and are meant for the reconciler only.
"""

from typing import Optional, List
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import SQLAlchemyError
import logging

from models.post import Post
from models.base import PostStatus
from schemas.post import PostRecord, PostList
from core.exceptions import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

# local ids are 32-bit integer columns
MAX_LOCAL_ID = 2 ** 31 - 1


class PostRepository:
    """Load, save and delete posts within one session"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # ========================================================================
    # Rows
    # ========================================================================

    async def row_by_id(self, post_id: int) -> Optional[Post]:
        return await self.db.get(Post, post_id, populate_existing=True)

    async def row_by_external_id(self, external_id: str) -> Optional[Post]:
        result = await self.db.execute(
            select(Post)
            .where(Post.external_id == external_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def save(self, post: Post, operation: str = "save") -> PostRecord:
        """
        Commit a new or modified row and return its snapshot.

        updated_at is refreshed here; created_at is set on first save.

        Raises:
            PersistenceError: The commit failed (the session is rolled back)
        """
        now = datetime.utcnow()
        if post.created_at is None:
            post.created_at = now
        post.updated_at = now

        context = {"operation": operation, "post_id": post.id, "external_id": post.external_id}

        try:
            self.db.add(post)
            await self.db.commit()
            await self.db.refresh(post)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {operation} post (id={context['post_id']}, external_id={context['external_id']}): {str(e)}")
            raise PersistenceError(
                f"Could not {operation} the post",
                context=context,
                original_exception=e
            )

        return PostRecord.model_validate(post)

    # ========================================================================
    # Lookups
    # ========================================================================

    async def find_by_id(self, post_id: int) -> Optional[PostRecord]:
        row = await self.row_by_id(post_id)
        return PostRecord.model_validate(row) if row else None

    async def find_by_external_id(self, external_id: str) -> Optional[PostRecord]:
        row = await self.row_by_external_id(external_id)
        return PostRecord.model_validate(row) if row else None

    async def find_by_url_key(self, url_key: str, store_id: int = 0) -> Optional[PostRecord]:
        """Match a url key in the given store or in the global scope (store 0)"""
        result = await self.db.execute(
            select(Post)
            .where(Post.url_key == url_key, Post.store_id.in_([0, store_id]))
            .order_by(Post.store_id.desc())
        )
        row = result.scalars().first()
        return PostRecord.model_validate(row) if row else None

    async def find_by_identifier(self, identifier: str) -> Optional[PostRecord]:
        """
        Resolve an identifier that may be a local id or a RequestDesk id.

        Numeric identifiers are tried as local id first, then as external id;
        anything else goes straight to the external id lookup.
        """
        identifier = str(identifier).strip()
        if not identifier:
            return None

        if identifier.isdecimal() and int(identifier) <= MAX_LOCAL_ID:
            post = await self.find_by_id(int(identifier))
            if post is not None:
                return post

        return await self.find_by_external_id(identifier)

    async def get_by_id(self, post_id: int) -> PostRecord:
        post = await self.find_by_id(post_id)
        if post is None:
            raise NotFoundError(f"Post not found: {post_id}", context={"post_id": post_id})
        return post

    async def get_by_external_id(self, external_id: str) -> PostRecord:
        post = await self.find_by_external_id(external_id)
        if post is None:
            raise NotFoundError(f"Post not found: {external_id}", context={"external_id": external_id})
        return post

    async def get_by_url_key(self, url_key: str, store_id: int = 0) -> PostRecord:
        post = await self.find_by_url_key(url_key, store_id)
        if post is None:
            raise NotFoundError(
                f"Post with url key '{url_key}' does not exist",
                context={"url_key": url_key, "store_id": store_id}
            )
        return post

    async def get_by_identifier(self, identifier: str) -> PostRecord:
        post = await self.find_by_identifier(identifier)
        if post is None:
            raise NotFoundError(f"Post not found: {identifier}", context={"identifier": identifier})
        return post

    async def url_key_taken(self, url_key: str, store_id: int, exclude_id: Optional[int] = None) -> bool:
        """
        True when another post already uses the url key in the same store or
        globally. A global post (store 0) conflicts with every store.
        """
        query = select(Post.id).where(Post.url_key == url_key)
        if store_id != 0:
            query = query.where(or_(Post.store_id == store_id, Post.store_id == 0))
        if exclude_id is not None:
            query = query.where(Post.id != exclude_id)

        result = await self.db.execute(query.limit(1))
        return result.scalar() is not None

    async def get_many(self, post_ids: List[int]) -> List[PostRecord]:
        """Posts for the given ids in the given order; missing ids are skipped"""
        if not post_ids:
            return []

        result = await self.db.execute(select(Post).where(Post.id.in_(post_ids)))
        rows = {row.id: row for row in result.scalars().all()}
        return [PostRecord.model_validate(rows[post_id]) for post_id in post_ids if post_id in rows]

    async def list_posts(
        self,
        page: int = 1,
        per_page: int = 20,
        status: Optional[PostStatus] = None
    ) -> PostList:
        """Newest first, optionally filtered by publication status"""
        query = select(Post)
        count_query = select(func.count()).select_from(Post)

        if status is not None:
            query = query.where(Post.status == status.value)
            count_query = count_query.where(Post.status == status.value)

        total = (await self.db.execute(count_query)).scalar() or 0

        result = await self.db.execute(
            query.order_by(Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )

        return PostList(
            items=[PostRecord.model_validate(row) for row in result.scalars().all()],
            total=total,
            page=page,
            per_page=per_page
        )

    # ========================================================================
    # Delete
    # ========================================================================

    async def delete(self, post_id: int) -> None:
        """
        Delete a post. Product links live in a side table and are left alone.

        Raises:
            NotFoundError: No post with this id
            PersistenceError: The delete could not be committed
        """
        row = await self.row_by_id(post_id)
        if row is None:
            raise NotFoundError(f"Post not found: {post_id}", context={"post_id": post_id})

        try:
            await self.db.delete(row)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete post {post_id}: {str(e)}")
            raise PersistenceError(
                "Could not delete the post",
                context={"operation": "delete", "post_id": post_id},
                original_exception=e
            )

        logger.info(f"Deleted post {post_id}")
