"""
Health check endpoint with database and sync run status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from api.dependencies import get_db, get_config
from core.config import RequestDeskConfig
from schemas.api import HealthCheckResponse, SyncRunInfo
from sync.run_log import SyncRunLog
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Whether RequestDesk credentials are configured
    - The latest import/export runs, newest first
    """
    db_connected = False

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    latest_runs = []
    if db_connected:
        try:
            latest_runs = [SyncRunInfo.model_validate(run) for run in await SyncRunLog(db).latest(limit=5)]
        except Exception as e:
            logger.error(f"Failed to fetch sync runs: {str(e)}")

    return HealthCheckResponse(
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        requestdesk_configured=bool(config.api_key and config.endpoint_url),
        latest_runs=latest_runs
    )
