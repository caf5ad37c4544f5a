"""
Blog API called by RequestDesk to push posts into the store.

Post ids in the path accept either the local id or the RequestDesk id.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from api.dependencies import get_db, get_config, verify_api_key
from core.config import RequestDeskConfig
from models.base import PostStatus
from schemas.api import (
    ExternalPostCreate,
    ExternalPostUpdate,
    MessageResponse,
    PostListResponse,
    PostPayload,
    PostResponse,
)
from sync.loaders.post_repository import PostRepository
from sync.loaders.reconciler import SyncReconciler

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/external/blog",
    tags=["External Blog"],
    dependencies=[Depends(verify_api_key)]
)

STATUS_FILTERS = {"published": PostStatus.PUBLISHED, "draft": PostStatus.DRAFT}


@router.get("/test")
async def test_connection(config: RequestDeskConfig = Depends(get_config)):
    """Confirm the key and describe the available endpoints"""
    return {
        "success": True,
        "message": "External Blog API connection successful",
        "store": {
            "url": config.store_url,
            "name": config.store_name,
            "code": config.store_code,
        },
        "endpoints": {
            "create": f"POST {router.prefix}/posts",
            "update": f"PUT {router.prefix}/posts/{{post_id}}",
            "delete": f"DELETE {router.prefix}/posts/{{post_id}}",
            "get": f"GET {router.prefix}/posts/{{post_id}}",
            "list": f"GET {router.prefix}/posts",
        },
    }


@router.post("/posts", response_model=PostResponse)
async def create_post(
    request: Request,
    payload: ExternalPostCreate,
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    """Create a post, or update it when requestdesk_post_id is already known"""
    request_id = getattr(request.state, "request_id", "-")
    logger.info(f"[{request_id}] Creating post '{payload.title}' (requestdesk_post_id={payload.requestdesk_post_id})")

    reconciler = SyncReconciler(db, config)

    if payload.requestdesk_post_id:
        result = await reconciler.upsert(payload.requestdesk_post_id, payload.to_fields())
        post, created = result.post, result.created
    else:
        post, created = await reconciler.create(payload.to_fields()), True

    return PostResponse(
        message="Post created successfully" if created else "Post updated successfully",
        post=PostPayload.from_record(post, config)
    )


@router.put("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    payload: ExternalPostUpdate,
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    existing = await PostRepository(db).get_by_identifier(post_id)
    post = await SyncReconciler(db, config).update(existing.id, payload.to_fields())

    return PostResponse(message="Post updated successfully", post=PostPayload.from_record(post, config))


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, db: AsyncSession = Depends(get_db)):
    repository = PostRepository(db)
    existing = await repository.get_by_identifier(post_id)
    await repository.delete(existing.id)

    return MessageResponse(message="Post deleted successfully")


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    post = await PostRepository(db).get_by_identifier(post_id)
    return PostResponse(post=PostPayload.from_record(post, config))


@router.get("/posts", response_model=PostListResponse)
async def list_posts(
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(20, ge=1, le=100, description="Posts per page"),
    status: Optional[str] = Query(None, description="published or draft"),
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    """Newest first; an unknown status value lists all posts"""
    result = await PostRepository(db).list_posts(page, per_page, STATUS_FILTERS.get(status))

    return PostListResponse(
        posts=[PostPayload.from_record(post, config) for post in result.items],
        total=result.total,
        page=page,
        per_page=per_page,
        has_more=result.has_more
    )
