# ============================================================================
# File: sync/importer.py
# Description: Imports one page of RequestDesk posts into the local blog
# ============================================================================
"""
Post import orchestration.

One call fetches exactly one remote page; the caller owns pagination and
decides on has_more. Each item is reconciled in isolation:

- success → post created or updated, "synced" reported back
- failure → counted, "{external_id}: {message}" collected, "failed" reported

Reporting is best effort. Configuration, authentication and fetch errors
abort the call before any item is processed.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from models.base import SyncStatus, SyncDirection, RunStatus
from schemas.documents import SyncReport
from schemas.post import PostFields, UpsertResult
from schemas.results import ImportResult
from core.config import RequestDeskConfig
from core.exceptions import SyncException, TransformError, describe_error
from sync.client import RequestDeskClient
from sync.loaders.reconciler import SyncReconciler
from sync.run_log import SyncRunLog, run_status

logger = logging.getLogger(__name__)


class ImportOrchestrator:
    """
    Import posts from RequestDesk.

    Args:
        db_session: Session used for reconciliation and the run log
        config: Resolved RequestDesk configuration
        client: Optional preconfigured client (tests inject a stubbed one)
    """

    def __init__(
        self,
        db_session: AsyncSession,
        config: RequestDeskConfig,
        client: Optional[RequestDeskClient] = None
    ):
        self.db = db_session
        self.config = config
        self.client = client or RequestDeskClient(config)
        self.reconciler = SyncReconciler(db_session, config)
        self.run_log = SyncRunLog(db_session)

    async def import_page(
        self,
        status_filter: Optional[str] = "publish",
        sync_status_filter: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
        triggered_by: str = "manual"
    ) -> ImportResult:
        """
        Import one page of remote posts.

        Returns:
            ImportResult with created/updated/failed counts and the remote
            has_more flag

        Raises:
            ConfigurationError: API key or endpoint missing
            AuthenticationError: Credentials rejected while fetching
            RemoteError: The page could not be fetched
        """
        started_at = datetime.utcnow()
        logger.info(
            f"Starting post import (status={status_filter}, sync_status={sync_status_filter}, "
            f"page={page}, per_page={per_page})"
        )

        try:
            self.config.require_credentials()
            posts_page = await self.client.fetch_posts(
                status=status_filter,
                sync_status=sync_status_filter,
                page=page,
                per_page=per_page
            )
        except SyncException as e:
            logger.error(f"Post import aborted: {e.message}", extra={"error_context": e.to_dict()})
            await self.run_log.record(
                SyncDirection.IMPORT,
                RunStatus.FAILED,
                started_at,
                triggered_by=triggered_by,
                error_message=e.message,
                error_details=e.to_dict()
            )
            raise

        created = 0
        updated = 0
        failed = 0
        errors = []

        for item in posts_page.posts:
            external_id = self._external_id(item)

            try:
                if not external_id:
                    raise TransformError("Post payload has no id", context={"payload_keys": self._keys(item)})

                result = await self._import_item(external_id, item)

            except Exception as e:
                failed += 1
                message = describe_error(e)
                errors.append(f"{external_id or 'unknown'}: {message}")
                logger.error(f"Failed to import post {external_id or '<no id>'}: {message}")

                await self._discard_pending()

                if external_id:
                    await self._report(SyncReport(
                        external_id=external_id,
                        sync_status=SyncStatus.FAILED,
                        store_identifier=str(self.config.store_id),
                        error_message=message
                    ))
                continue

            if result.created:
                created += 1
            else:
                updated += 1

            await self._report(SyncReport(
                external_id=external_id,
                local_id=result.post.id,
                sync_status=SyncStatus.SYNCED,
                local_url=self.config.post_url(result.post.id),
                store_identifier=str(self.config.store_id)
            ))

        import_result = ImportResult(
            created_count=created,
            updated_count=updated,
            failed_count=failed,
            has_more=posts_page.has_more,
            total_fetched=len(posts_page.posts),
            errors=errors
        )

        logger.info(
            f"Import complete: {created} created, {updated} updated, {failed} failed "
            f"(has_more={posts_page.has_more})"
        )

        await self.run_log.record(
            SyncDirection.IMPORT,
            run_status(created + updated, failed),
            started_at,
            triggered_by=triggered_by,
            records_fetched=len(posts_page.posts),
            records_created=created,
            records_updated=updated,
            records_failed=failed,
            has_more=posts_page.has_more,
            error_message=f"{failed} posts failed" if failed else None,
            error_details={"errors": errors} if errors else None
        )

        return import_result

    async def _import_item(self, external_id: str, item: Dict[str, Any]) -> UpsertResult:
        fields = PostFields.from_remote(item)
        return await self.reconciler.upsert(external_id, fields)

    async def _report(self, report: SyncReport) -> None:
        try:
            await self.client.report_sync_status(report)
        except SyncException as e:
            logger.warning(
                f"Failed to report sync status '{report.sync_status.value}' "
                f"for post {report.external_id}: {e.message}"
            )

    async def _discard_pending(self) -> None:
        """Leave the session clean for the next item"""
        await self.db.rollback()

    @staticmethod
    def _external_id(item: Any) -> str:
        if not isinstance(item, dict) or item.get("id") is None:
            return ""
        return str(item["id"]).strip()

    @staticmethod
    def _keys(item: Any) -> list:
        return sorted(item) if isinstance(item, dict) else []
