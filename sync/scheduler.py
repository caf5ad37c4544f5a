import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings, Settings, RequestDeskConfig
from core.database import async_session_maker
from core.exceptions import SyncException
from sync.importer import ImportOrchestrator

logger = logging.getLogger(__name__)


class PostImportScheduler:
    """
    Periodic post import.

    Each tick imports the first page of published posts that RequestDesk
    has not marked as synced yet; re-running is safe because posts are
    reconciled by their RequestDesk id.
    """

    def __init__(self, source: Settings = None, session_factory=None):
        self.settings = source or settings
        self.scheduler = AsyncIOScheduler()
        self.SessionLocal = session_factory or async_session_maker

    async def run_import_job(self):
        """Job to import one page of posts"""
        if not self.settings.IMPORT_CRON_ENABLED:
            logger.debug("Scheduler: post import disabled, skipping")
            return None

        logger.info("Scheduler: Starting post import job")
        config = RequestDeskConfig.from_settings(self.settings)

        async with self.SessionLocal() as session:
            try:
                orchestrator = ImportOrchestrator(session, config)
                result = await orchestrator.import_page(
                    status_filter="publish",
                    sync_status_filter="not_synced",
                    page=1,
                    per_page=self.settings.IMPORT_CRON_PAGE_SIZE,
                    triggered_by="scheduler"
                )

                logger.info(
                    f"Scheduler: Imported {result.created_count} new, "
                    f"{result.updated_count} updated, {result.failed_count} failed"
                )
                if result.has_more:
                    logger.info("Scheduler: More posts available, they will be imported on the next run")

                return result

            except SyncException as e:
                logger.error(f"Scheduler: Post import job failed - {e.message}")
            except Exception as e:
                logger.exception(f"Scheduler: Post import job crashed - {e}")

        return None

    def start(self):
        """Start the scheduler"""
        if not self.settings.IMPORT_CRON_ENABLED:
            logger.info("Post import scheduler disabled (IMPORT_CRON_ENABLED=false)")
            return

        self.scheduler.add_job(
            self.run_import_job,
            trigger=IntervalTrigger(minutes=self.settings.IMPORT_CRON_INTERVAL_MINUTES),
            id="post_import_job",
            replace_existing=True,
            max_instances=1
        )
        self.scheduler.start()
        logger.info(f"Post import scheduler started (every {self.settings.IMPORT_CRON_INTERVAL_MINUTES} minutes)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Post import scheduler stopped")
