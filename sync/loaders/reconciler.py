"""
Find-or-create reconciliation of posts keyed on the RequestDesk post id.
"""

from typing import Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from models.post import Post
from models.base import PostStatus, SyncStatus
from schemas.post import PostFields, PostRecord, UpsertResult
from core.config import RequestDeskConfig
from core.exceptions import ValidationError, PersistenceError, NotFoundError
from sync.loaders.post_repository import PostRepository
from sync.transformers.text import slugify, strip_tags, truncate

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "RequestDesk"
META_DESCRIPTION_LENGTH = 160


class SyncReconciler:
    """
    Apply remote post data to local posts.

    Guarantees:
    - at most one post per external id: a second upsert with the same id
      updates the first post
    - updates are partial: fields that are not set are left untouched
    - every create or update marks the post synced and stamps last_sync_at

    Concurrent upserts of the same external id are not serialized here; the
    unique constraint on external_id turns the loser into a PersistenceError.
    """

    def __init__(self, db_session: AsyncSession, config: RequestDeskConfig):
        self.db = db_session
        self.config = config
        self.repository = PostRepository(db_session)

    async def upsert(self, external_id: str, fields: PostFields) -> UpsertResult:
        external_id = str(external_id).strip()
        if not external_id:
            raise ValidationError(
                "External post id is required",
                context={"field_name": "external_id", "field_value": external_id}
            )

        row = await self.repository.row_by_external_id(external_id)

        if row is not None:
            logger.info(f"Updating post {row.id} for external id {external_id}")
            post = await self._apply_update(row, fields)
            return UpsertResult(post=post, created=False)

        logger.info(f"Creating post for external id {external_id}")
        post = await self.create(fields, external_id=external_id)
        return UpsertResult(post=post, created=True)

    async def create(self, fields: PostFields, external_id: Optional[str] = None) -> PostRecord:
        """
        Create a post. title and content are required; everything else has
        a default:

        - meta_title ← title
        - meta_description ← summary, else the first 160 characters of the
          plain-text content
        - author ← "RequestDesk"
        - url_key ← slugify(slug or title)
        - status ← draft, store_id ← configured store

        Raises:
            ValidationError: title or content missing, or no usable url key
            PersistenceError: url key already used, or the save failed
        """
        if not fields.title:
            raise ValidationError(
                "Title is required",
                context={"field_name": "title", "external_id": external_id}
            )
        if fields.content is None:
            raise ValidationError(
                "Content is required",
                context={"field_name": "content", "external_id": external_id}
            )

        url_key = self._url_key(fields.slug or fields.title, external_id)
        store_id = fields.store_id if fields.store_id is not None else self.config.store_id
        await self._ensure_url_key_free(url_key, store_id, None, external_id)

        now = datetime.utcnow()
        row = Post(
            title=fields.title,
            content=fields.content,
            url_key=url_key,
            meta_title=fields.meta_title or fields.title,
            meta_description=(
                fields.meta_description
                or fields.summary
                or truncate(strip_tags(fields.content), META_DESCRIPTION_LENGTH)
            ),
            featured_image=fields.featured_image,
            author=fields.author or DEFAULT_AUTHOR,
            status=(fields.status or PostStatus.DRAFT).value,
            store_id=store_id,
            external_id=external_id,
            sync_status=SyncStatus.SYNCED,
            last_sync_at=now,
        )

        post = await self.repository.save(row, operation="create")
        logger.info(f"Created post {post.id} (external_id={external_id}, url_key={url_key})")
        return post

    async def update(self, post_id: int, fields: PostFields) -> PostRecord:
        """
        Partial update of an existing post by local id.

        Raises:
            NotFoundError: No post with this id
        """
        row = await self.repository.row_by_id(post_id)
        if row is None:
            raise NotFoundError(f"Post not found: {post_id}", context={"post_id": post_id})
        return await self._apply_update(row, fields)

    async def _apply_update(self, row: Post, fields: PostFields) -> PostRecord:
        post_id = row.id
        external_id = row.external_id
        values = fields.provided()

        # summary only feeds the meta description default on create
        values.pop("summary", None)

        slug = values.pop("slug", None)
        if slug is not None:
            url_key = self._url_key(slug, external_id)
            store_id = values.get("store_id", row.store_id)
            await self._ensure_url_key_free(url_key, store_id, post_id, external_id)
            row.url_key = url_key

        if "status" in values:
            values["status"] = values["status"].value

        for field_name, value in values.items():
            setattr(row, field_name, value)

        row.sync_status = SyncStatus.SYNCED
        row.last_sync_at = datetime.utcnow()

        post = await self.repository.save(row, operation="update")
        logger.info(f"Updated post {post_id} (external_id={external_id}, fields={sorted(values)})")
        return post

    def _url_key(self, source: Optional[str], external_id: Optional[str]) -> str:
        url_key = slugify(source)
        if not url_key:
            raise ValidationError(
                "Cannot derive a url key from the slug or title",
                context={"field_name": "url_key", "field_value": source, "external_id": external_id}
            )
        return url_key

    async def _ensure_url_key_free(
        self,
        url_key: str,
        store_id: int,
        post_id: Optional[int],
        external_id: Optional[str]
    ) -> None:
        if await self.repository.url_key_taken(url_key, store_id, exclude_id=post_id):
            raise PersistenceError(
                f"A post with url key '{url_key}' already exists",
                context={
                    "operation": "save",
                    "url_key": url_key,
                    "store_id": store_id,
                    "post_id": post_id,
                    "external_id": external_id,
                }
            )
