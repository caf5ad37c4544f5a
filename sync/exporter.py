"""
Product export to the RequestDesk knowledge base.

All eligible products go out in a single request; there is no chunking on
the outbound side.
"""

from typing import Callable, List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from models.base import SyncDirection, RunStatus
from schemas.catalog import ProductRecord
from schemas.documents import Document
from schemas.results import ExportResult
from core.config import RequestDeskConfig
from core.exceptions import AuthenticationError, ConfigurationError, SyncException
from sync.catalog_source import CatalogSource
from sync.client import RequestDeskClient
from sync.run_log import SyncRunLog
from sync.transformers.entity_transformer import EntityTransformer

logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_MESSAGE = "Products synced successfully"


class ExportOrchestrator:
    """
    Export catalog products as documents.

    Args:
        db_session: Session used to read the catalog and write the run log
        config: Resolved RequestDesk configuration
        client: Optional preconfigured client
        gallery_loader: Optional gallery accessor passed to the transformer
    """

    def __init__(
        self,
        db_session: AsyncSession,
        config: RequestDeskConfig,
        client: Optional[RequestDeskClient] = None,
        gallery_loader: Optional[Callable[[ProductRecord], List[str]]] = None
    ):
        self.db = db_session
        self.config = config
        self.client = client or RequestDeskClient(config)
        self.catalog = CatalogSource(db_session)
        self.gallery_loader = gallery_loader
        self.run_log = SyncRunLog(db_session)

    async def transformer(self) -> EntityTransformer:
        return EntityTransformer(
            store_url=self.config.store_url,
            media_url=self.config.media_url,
            category_names=await self.catalog.category_names(),
            gallery_loader=self.gallery_loader
        )

    async def export_all(self, limit: Optional[int] = None, triggered_by: str = "manual") -> ExportResult:
        """
        Export every enabled, visible product (optionally the first `limit`).

        Zero eligible products is a success with zero counts.

        Raises:
            ConfigurationError: API key or endpoint missing
            AuthenticationError: Credentials rejected
        """
        started_at = datetime.utcnow()
        logger.info(f"Starting product export (limit={limit})")

        try:
            self.config.require_credentials()
        except ConfigurationError as e:
            await self._record(started_at, triggered_by, 0, error=e.message)
            raise

        products = await self.catalog.exportable_products(limit)

        if not products:
            logger.info("No products to export")
            result = ExportResult(
                success=True,
                total_products=0,
                total_synced=0,
                message="No products to export"
            )
            await self._record(started_at, triggered_by, 0, result=result)
            return result

        logger.info(f"Found {len(products)} products to export")

        transformer = await self.transformer()
        documents = [transformer.to_document(product) for product in products]

        return await self._send(documents, started_at, triggered_by)

    async def export_one(self, product_id: int, triggered_by: str = "manual") -> ExportResult:
        """
        Export a single product regardless of its status or visibility.

        An unknown product id is reported as an unsuccessful result.
        """
        started_at = datetime.utcnow()
        self.config.require_credentials()

        product = await self.catalog.product(product_id)
        if product is None:
            logger.error(f"Single product export failed: product {product_id} does not exist")
            return ExportResult(
                success=False,
                error=f"Product with id {product_id} does not exist"
            )

        transformer = await self.transformer()
        return await self._send([transformer.to_document(product)], started_at, triggered_by)

    async def _send(self, documents: List[Document], started_at: datetime, triggered_by: str) -> ExportResult:
        try:
            body = await self.client.send_documents(self.config.store_identifier, documents)

        except AuthenticationError as e:
            logger.error(f"Product export rejected: {e.message}")
            await self._record(started_at, triggered_by, len(documents), error=e.message)
            raise

        except SyncException as e:
            logger.error(f"Product export failed: {e.message}", extra={"error_context": e.to_dict()})
            result = ExportResult(success=False, total_products=len(documents), error=e.message)
            await self._record(started_at, triggered_by, len(documents), result=result)
            return result

        total_synced = body.get("total_chunks_created")
        collection_id = body.get("collection_id")

        result = ExportResult(
            success=True,
            total_products=len(documents),
            total_synced=total_synced if total_synced is not None else len(documents),
            collection_id=str(collection_id) if collection_id is not None else None,
            message=body.get("message") or DEFAULT_SUCCESS_MESSAGE
        )

        logger.info(
            f"Exported {result.total_products} products "
            f"({result.total_synced} synced, collection={result.collection_id})"
        )
        await self._record(started_at, triggered_by, len(documents), result=result)
        return result

    async def _record(
        self,
        started_at: datetime,
        triggered_by: str,
        fetched: int,
        result: Optional[ExportResult] = None,
        error: Optional[str] = None
    ) -> None:
        succeeded = result is not None and result.success
        await self.run_log.record(
            SyncDirection.EXPORT,
            RunStatus.SUCCESS if succeeded else RunStatus.FAILED,
            started_at,
            triggered_by=triggered_by,
            records_fetched=fetched,
            records_created=result.total_synced if succeeded else 0,
            records_failed=0 if succeeded else fetched,
            error_message=error or (result.error if result else None)
        )
