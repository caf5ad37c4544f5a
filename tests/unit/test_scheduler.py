import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from core.config import Settings
from core.exceptions import AuthenticationError
from schemas.results import ImportResult
from sync.scheduler import PostImportScheduler


def cron_settings(enabled=True):
    return Settings(
        IMPORT_CRON_ENABLED=enabled,
        IMPORT_CRON_PAGE_SIZE=25,
        REQUESTDESK_API_KEY="test-api-key",
        STORE_BASE_URL="https://shop.example.com/",
    )


def mock_session_maker():
    mock_session = AsyncMock()
    mock_maker = MagicMock()
    mock_maker.return_value.__aenter__.return_value = mock_session
    return mock_maker


@pytest.mark.asyncio
async def test_scheduler_initialization():
    scheduler = PostImportScheduler()
    assert scheduler.scheduler is not None
    assert scheduler.SessionLocal is not None

@pytest.mark.asyncio
async def test_scheduler_job_execution():
    with patch("sync.scheduler.ImportOrchestrator") as mock_orchestrator_cls:
        mock_orchestrator = AsyncMock()
        mock_orchestrator.import_page.return_value = ImportResult(created_count=2, has_more=True)
        mock_orchestrator_cls.return_value = mock_orchestrator

        scheduler = PostImportScheduler(source=cron_settings())
        # Inject mocked session maker
        scheduler.SessionLocal = mock_session_maker()

        result = await scheduler.run_import_job()

        assert result.created_count == 2
        mock_orchestrator.import_page.assert_called_once_with(
            status_filter="publish",
            sync_status_filter="not_synced",
            page=1,
            per_page=25,
            triggered_by="scheduler"
        )

@pytest.mark.asyncio
async def test_scheduler_job_disabled():
    with patch("sync.scheduler.ImportOrchestrator") as mock_orchestrator_cls:
        scheduler = PostImportScheduler(source=cron_settings(enabled=False))
        scheduler.SessionLocal = mock_session_maker()

        assert await scheduler.run_import_job() is None
        mock_orchestrator_cls.assert_not_called()

@pytest.mark.asyncio
async def test_scheduler_job_failure_is_contained():
    with patch("sync.scheduler.ImportOrchestrator") as mock_orchestrator_cls:
        mock_orchestrator = AsyncMock()
        mock_orchestrator.import_page.side_effect = AuthenticationError("Invalid API key. Please check your credentials.")
        mock_orchestrator_cls.return_value = mock_orchestrator

        scheduler = PostImportScheduler(source=cron_settings())
        scheduler.SessionLocal = mock_session_maker()

        assert await scheduler.run_import_job() is None

def test_scheduler_start_disabled_adds_no_job():
    scheduler = PostImportScheduler(source=cron_settings(enabled=False))

    scheduler.start()

    assert scheduler.scheduler.get_jobs() == []
    assert scheduler.scheduler.running is False
    scheduler.stop()
