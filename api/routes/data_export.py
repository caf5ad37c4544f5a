"""
Catalog export API pulled by RequestDesk
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.dependencies import get_db, get_config, verify_api_key
from core.config import RequestDeskConfig
from sync.data_export import DataExportService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/requestdesk/export",
    tags=["Data Export"],
    dependencies=[Depends(verify_api_key)]
)


@router.get("/test")
async def test_connection(
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    return DataExportService(db, config).test_connection()


@router.get("/products")
async def get_products(
    page_size: int = Query(100, ge=1, le=500, alias="pageSize"),
    current_page: int = Query(1, ge=1, alias="currentPage"),
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    """Enabled products as documents, one page at a time"""
    return await DataExportService(db, config).get_products(page_size, current_page)


@router.get("/categories")
async def get_categories(
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    """Active categories below the root level"""
    return await DataExportService(db, config).get_categories()


@router.get("/cms-pages")
async def get_cms_pages(
    page_size: int = Query(100, ge=1, le=500, alias="pageSize"),
    current_page: int = Query(1, ge=1, alias="currentPage"),
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    return await DataExportService(db, config).get_cms_pages(page_size, current_page)
