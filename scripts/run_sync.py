"""
Run a post import or a product export from the command line

    python scripts/run_sync.py import --page 1 --per-page 20
    python scripts/run_sync.py export --limit 10
    python scripts/run_sync.py export --product-id 42
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import RequestDeskConfig
from core.database import async_session_maker, engine
from core.exceptions import SyncException
from core.logging import setup_logging
from sync.importer import ImportOrchestrator
from sync.exporter import ExportOrchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="RequestDesk blog and catalog sync")
    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import", help="Import one page of posts from RequestDesk")
    import_cmd.add_argument("--status", default="publish", help="Remote status filter (empty for all)")
    import_cmd.add_argument("--sync-status", default=None, help="Remote sync status filter, e.g. not_synced")
    import_cmd.add_argument("--page", type=int, default=1)
    import_cmd.add_argument("--per-page", type=int, default=20)

    export_cmd = commands.add_parser("export", help="Export products to RequestDesk")
    export_cmd.add_argument("--limit", type=int, default=None, help="Only export the first N products")
    export_cmd.add_argument("--product-id", type=int, default=None, help="Export a single product")

    return parser


async def run_sync(args: argparse.Namespace) -> int:
    config = RequestDeskConfig.from_settings()

    try:
        async with async_session_maker() as session:
            if args.command == "import":
                result = await ImportOrchestrator(session, config).import_page(
                    status_filter=args.status or None,
                    sync_status_filter=args.sync_status,
                    page=args.page,
                    per_page=args.per_page,
                    triggered_by="cli"
                )
                logger.info(
                    f"Import complete: {result.created_count} created, {result.updated_count} updated, "
                    f"{result.failed_count} failed, has_more={result.has_more}"
                )
                for error in result.errors:
                    logger.warning(f"  {error}")
                return 0 if result.success else 2

            exporter = ExportOrchestrator(session, config)
            if args.product_id is not None:
                result = await exporter.export_one(args.product_id, triggered_by="cli")
            else:
                result = await exporter.export_all(limit=args.limit, triggered_by="cli")

            if result.success:
                logger.info(f"{result.message}: {result.total_products} products, {result.total_synced} synced")
                return 0

            logger.error(f"Export failed: {result.error}")
            return 2

    except SyncException as e:
        logger.error(f"Sync failed: {e.message}")
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_sync(build_parser().parse_args())))
