"""
FastAPI dependencies: database session, configuration and API key check
"""

from typing import AsyncGenerator, Optional
import secrets
import logging

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import RequestDeskConfig
from core.database import async_session_maker
from core.exceptions import AuthenticationError
from sync.client import RequestDeskClient

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session per request"""
    async with async_session_maker() as session:
        yield session


def get_config() -> RequestDeskConfig:
    """Configuration resolved once per request"""
    return RequestDeskConfig.from_settings()


async def verify_api_key(
    requestdesk_key: Optional[str] = Header(None, alias="X-RequestDesk-Key"),
    requestdesk_api_key: Optional[str] = Header(None, alias="x-requestdesk-api-key"),
    config: RequestDeskConfig = Depends(get_config)
) -> None:
    """
    Accept either header spelling and compare with the configured key.

    Raises:
        AuthenticationError: No key configured, no key sent, or a mismatch
    """
    if not config.api_key:
        raise AuthenticationError("RequestDesk API key not configured")

    provided = requestdesk_key or requestdesk_api_key
    if not provided or not secrets.compare_digest(provided, config.api_key):
        logger.warning("Invalid RequestDesk API key attempt")
        raise AuthenticationError("Invalid RequestDesk API key")


def get_remote_client(config: RequestDeskConfig = Depends(get_config)) -> RequestDeskClient:
    """RequestDesk client for the request's configuration"""
    return RequestDeskClient(config)
