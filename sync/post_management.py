"""
Local post operations used by the admin endpoints.
"""

from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
import logging

from models.post import PostProductLink
from models.base import SyncStatus
from schemas.post import PostFields, PostRecord
from core.config import RequestDeskConfig
from core.exceptions import ValidationError, PersistenceError, NotFoundError
from sync.loaders.post_repository import PostRepository
from sync.loaders.reconciler import SyncReconciler

logger = logging.getLogger(__name__)


class PostManagement:
    """
    Create posts, manage their product links and sync status.

    Product links are kept in a side table keyed by post id and are replaced
    wholesale on every link_products call.
    """

    def __init__(self, db_session: AsyncSession, config: RequestDeskConfig):
        self.db = db_session
        self.config = config
        self.repository = PostRepository(db_session)
        self.reconciler = SyncReconciler(db_session, config)

    async def create_or_update(
        self,
        fields: PostFields,
        external_id: Optional[str] = None,
        product_ids: Optional[List[int]] = None
    ) -> PostRecord:
        """Upsert by external id when one is given, else create; then link products"""
        if external_id:
            post = (await self.reconciler.upsert(external_id, fields)).post
        else:
            post = await self.reconciler.create(fields)

        if product_ids:
            await self.link_products(post.id, product_ids)

        return post

    async def link_products(self, post_id: int, product_ids: List[int]) -> List[int]:
        """
        Replace the products linked to a post. Positions follow the given
        order starting at 0; duplicate ids keep their first position.

        Returns:
            The linked product ids in position order
        """
        await self.repository.get_by_id(post_id)

        ordered = list(dict.fromkeys(int(product_id) for product_id in product_ids))

        try:
            await self.db.execute(delete(PostProductLink).where(PostProductLink.post_id == post_id))
            self.db.add_all([
                PostProductLink(post_id=post_id, product_id=product_id, position=position)
                for position, product_id in enumerate(ordered)
            ])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to link products to post {post_id}: {str(e)}")
            raise PersistenceError(
                "Could not link products to the post",
                context={"operation": "link", "post_id": post_id, "product_ids": ordered},
                original_exception=e
            )

        logger.info(f"Linked {len(ordered)} products to post {post_id}")
        return ordered

    async def get_linked_products(self, post_id: int) -> List[int]:
        result = await self.db.execute(
            select(PostProductLink.product_id)
            .where(PostProductLink.post_id == post_id)
            .order_by(PostProductLink.position.asc())
        )
        return list(result.scalars().all())

    async def get_posts_by_product(self, product_id: int) -> List[PostRecord]:
        """Posts linked to a product; posts deleted since linking are skipped"""
        result = await self.db.execute(
            select(PostProductLink.post_id)
            .where(PostProductLink.product_id == product_id)
            .order_by(PostProductLink.position.asc(), PostProductLink.post_id.asc())
        )
        return await self.repository.get_many(list(result.scalars().all()))

    async def update_sync_status(self, post_id: int, status: str) -> PostRecord:
        """
        Set the sync status of a post; "synced" also stamps last_sync_at.

        Raises:
            ValidationError: Unknown status value
            NotFoundError: No post with this id
        """
        valid = [s.value for s in SyncStatus]
        if status not in valid:
            raise ValidationError(
                f"Invalid sync status: {status}. Valid values are: {', '.join(valid)}",
                context={"field_name": "sync_status", "field_value": status, "post_id": post_id}
            )

        row = await self.repository.row_by_id(post_id)
        if row is None:
            raise NotFoundError(f"Post not found: {post_id}", context={"post_id": post_id})

        sync_status = SyncStatus(status)
        row.sync_status = sync_status
        if sync_status == SyncStatus.SYNCED:
            row.last_sync_at = datetime.utcnow()

        post = await self.repository.save(row, operation="update")
        logger.info(f"Sync status of post {post_id} set to {status}")
        return post
