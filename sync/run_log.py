"""
Audit rows for import and export runs
"""

from typing import Optional, Dict, Any, List
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
import logging

from models.sync_run import SyncRun
from models.base import SyncDirection, RunStatus

logger = logging.getLogger(__name__)


def run_status(succeeded: int, failed: int) -> RunStatus:
    if failed == 0:
        return RunStatus.SUCCESS
    if succeeded > 0:
        return RunStatus.PARTIAL
    return RunStatus.FAILED


class SyncRunLog:
    """
    Writes one SyncRun row per finished run.

    Recording is best effort: a failure to write the audit row is logged
    and never changes the outcome of the run itself.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def record(
        self,
        direction: SyncDirection,
        status: RunStatus,
        started_at: datetime,
        triggered_by: str = "manual",
        records_fetched: int = 0,
        records_created: int = 0,
        records_updated: int = 0,
        records_failed: int = 0,
        has_more: bool = False,
        error_message: Optional[str] = None,
        error_details: Optional[Dict[str, Any]] = None
    ) -> Optional[SyncRun]:
        completed_at = datetime.utcnow()
        run = SyncRun(
            direction=direction,
            status=status,
            triggered_by=triggered_by,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            records_fetched=records_fetched,
            records_created=records_created,
            records_updated=records_updated,
            records_failed=records_failed,
            has_more=has_more,
            error_message=error_message,
            error_details=error_details,
        )

        try:
            self.db.add(run)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(f"Could not record {direction.value} run: {str(e)}")
            return None

        logger.info(
            f"Recorded {direction.value} run {run.run_id}: {status.value} "
            f"(fetched={records_fetched}, created={records_created}, "
            f"updated={records_updated}, failed={records_failed})"
        )
        return run

    async def latest(self, limit: int = 10) -> List[SyncRun]:
        result = await self.db.execute(
            select(SyncRun).order_by(SyncRun.started_at.desc(), SyncRun.id.desc()).limit(limit)
        )
        return list(result.scalars().all())
