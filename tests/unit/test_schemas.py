"""
Unit tests for schemas, configuration and error formatting
"""

import pytest
import pydantic
from core.config import RequestDeskConfig, Settings
from core.exceptions import ConfigurationError, NotFoundError, describe_error
from models.base import PostStatus, SyncStatus
from schemas.api import ExternalPostCreate, ExternalPostUpdate, HealthCheckResponse, SyncRunInfo
from schemas.documents import PostsPage, SyncReport
from schemas.post import PostFields, PostList
from schemas.results import ImportResult
from datetime import datetime


class TestPostFields:

    def test_from_remote_maps_seo_fields(self):
        fields = PostFields.from_remote({
            "id": "rd-1",
            "title": "Spring Guide",
            "content": "<p>Body</p>",
            "seo_title": "Spring Hiking",
            "seo_description": "Where to hike",
            "status": "publish",
        })

        assert fields.title == "Spring Guide"
        assert fields.meta_title == "Spring Hiking"
        assert fields.meta_description == "Where to hike"
        assert fields.status == PostStatus.PUBLISHED

    def test_from_remote_only_maps_present_keys(self):
        fields = PostFields.from_remote({"title": "Only Title"})

        assert fields.provided() == {"title": "Only Title"}

    def test_non_publish_status_is_draft(self):
        assert PostFields.from_remote({"status": "draft"}).status == PostStatus.DRAFT
        assert PostFields.from_remote({"status": "scheduled"}).status == PostStatus.DRAFT

    def test_blank_title_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            PostFields(title="   ")

    def test_blank_optional_strings_become_none(self):
        fields = PostFields(slug="  ", author="")

        assert fields.slug is None
        assert fields.author is None


class TestApiSchemas:

    def test_create_coerces_remote_id_to_string(self):
        payload = ExternalPostCreate(title="Guide", content="Body", requestdesk_post_id=42, published=True)

        assert payload.requestdesk_post_id == "42"
        assert payload.to_fields().status == PostStatus.PUBLISHED

    def test_create_requires_title_and_content(self):
        with pytest.raises(pydantic.ValidationError):
            ExternalPostCreate(title="Guide")

    def test_update_leaves_unset_status_alone(self):
        fields = ExternalPostUpdate(title="New Title").to_fields()

        assert fields.status is None
        assert fields.provided() == {"title": "New Title"}

    def test_update_published_false_means_draft(self):
        assert ExternalPostUpdate(published=False).to_fields().status == PostStatus.DRAFT

    def test_health_status_derivation(self):
        failed_run = SyncRunInfo(
            run_id="r1", direction="import", status="failed", started_at=datetime.utcnow()
        )

        healthy = HealthCheckResponse(timestamp=datetime.utcnow(), database_connected=True, requestdesk_configured=True)
        degraded = HealthCheckResponse(
            timestamp=datetime.utcnow(), database_connected=True, requestdesk_configured=True, latest_runs=[failed_run]
        )
        unhealthy = HealthCheckResponse(timestamp=datetime.utcnow(), database_connected=False, requestdesk_configured=True)

        assert healthy.status == "healthy"
        assert degraded.status == "degraded"
        assert unhealthy.status == "unhealthy"


class TestWireRecords:

    def test_failed_report_has_no_local_id(self):
        payload = SyncReport(
            external_id="rd-2",
            sync_status=SyncStatus.FAILED,
            store_identifier="1",
            error_message="Title is required"
        ).to_payload()

        assert payload["platform_post_id"] is None
        assert payload["platform_url"] is None
        assert payload["sync_status"] == "failed"
        assert payload["error_message"] == "Title is required"

    def test_posts_page_defaults(self):
        page = PostsPage.from_response({})

        assert page.posts == []
        assert page.total == 0
        assert page.has_more is False

    @pytest.mark.parametrize("raw,expected", [
        (True, True),
        (False, False),
        ("false", False),
        ("true", False),
        (1, False),
        (None, False),
    ])
    def test_posts_page_has_more_only_for_json_true(self, raw, expected):
        assert PostsPage.from_response({"has_more": raw}).has_more is expected

    def test_posts_page_keeps_non_object_items(self):
        page = PostsPage.from_response({"posts": [{"id": "rd-1"}, None, "junk"], "total": 3})

        assert page.posts == [{"id": "rd-1"}, None, "junk"]

    def test_import_result_success(self):
        assert ImportResult(created_count=2).success is True
        assert ImportResult(created_count=2, failed_count=1).success is False

    def test_post_list_has_more(self):
        assert PostList(total=45, page=2, per_page=20).has_more is True
        assert PostList(total=40, page=2, per_page=20).has_more is False


class TestConfig:

    def test_derived_urls(self, config):
        assert config.base_endpoint == "https://requestdesk.test"
        assert config.base_store_url == "https://shop.example.com"
        assert config.media_url == "https://shop.example.com/media/"
        assert config.store_identifier == "shop.example.com"
        assert config.post_url(7) == "https://shop.example.com/blog/post/view/id/7"

    def test_require_credentials(self):
        config = RequestDeskConfig(store_url="https://shop.example.com/")

        with pytest.raises(ConfigurationError):
            config.require_credentials()

    def test_from_settings(self):
        source = Settings(
            REQUESTDESK_API_KEY="abc",
            STORE_BASE_URL="https://store.test/",
            STORE_ID=3,
            HTTP_TIMEOUT_SECONDS=5,
        )

        config = RequestDeskConfig.from_settings(source)

        assert config.api_key == "abc"
        assert config.store_id == 3
        assert config.timeout == 5
        assert config.store_identifier == "store.test"


class TestDescribeError:

    def test_sync_exception_message_only(self):
        assert describe_error(NotFoundError("Post not found: 9", context={"post_id": 9})) == "Post not found: 9"

    def test_pydantic_error(self):
        with pytest.raises(pydantic.ValidationError) as exc_info:
            PostFields(title="  ")

        assert describe_error(exc_info.value).startswith("title: ")

    def test_plain_exception(self):
        assert describe_error(RuntimeError("boom")) == "boom"
        assert describe_error(RuntimeError()) == "RuntimeError"
