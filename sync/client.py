"""
HTTP client for the RequestDesk public API.

Every call is a single request with a bounded timeout. There is no retry:
a failed call surfaces immediately and the caller decides whether it is a
per-item failure or aborts the whole operation.

Status mapping (check_response):
    2xx      → parsed JSON body
    401, 403 → AuthenticationError
    other    → RemoteError with the remote "detail" message when present
"""

import httpx
import json
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional
import logging

from core.config import RequestDeskConfig
from core.exceptions import RemoteError, AuthenticationError
from schemas.documents import Document, SyncReport, PostsPage, PLATFORM

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-requestdesk-api-key"
INVALID_API_KEY_MESSAGE = "Invalid API key. Please check your credentials."


def format_error_entry(entry: Any) -> str:
    """Render one remote error entry (FastAPI {loc, msg} or any JSON value) as text"""
    if isinstance(entry, dict) and "msg" in entry:
        loc = entry.get("loc")
        if isinstance(loc, (list, tuple)) and loc:
            return f"{'.'.join(str(part) for part in loc)}: {entry['msg']}"
        return str(entry["msg"])
    if isinstance(entry, str):
        return entry
    return json.dumps(entry, default=str)


class RemoteResponse(BaseModel):
    """Raw outcome of one call; interpreted by check_response"""
    model_config = ConfigDict(frozen=True)

    status_code: int
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def error_detail(self) -> Optional[str]:
        """
        Remote error message as text.

        FastAPI validation errors carry a list of {"loc", "msg"} entries in
        "detail"; those are joined as "loc: msg; ...".
        """
        if not isinstance(self.body, dict):
            return None

        for key in ("detail", "message"):
            value = self.body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, list) and value:
                return "; ".join(format_error_entry(entry) for entry in value)
            if isinstance(value, dict) and value:
                return format_error_entry(value)
        return None


class RequestDeskClient:
    """
    Authenticated wrapper around the RequestDesk endpoints.

    Args:
        config: Resolved configuration (API key, endpoint, timeouts)
        transport: Optional httpx transport, used by tests to stub the remote
    """

    def __init__(
        self,
        config: RequestDeskConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config
        self.transport = transport

    def url(self, path: str) -> str:
        return f"{self.config.base_endpoint}{path}"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            API_KEY_HEADER: self.config.api_key or "",
        }

    # ========================================================================
    # Low level
    # ========================================================================

    async def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None
    ) -> RemoteResponse:
        return await self._request("GET", url, params=params, timeout=timeout)

    async def post(
        self,
        url: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None
    ) -> RemoteResponse:
        return await self._request("POST", url, body=body if body is not None else {}, params=params, timeout=timeout)

    async def _request(
        self,
        method: str,
        url: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None
    ) -> RemoteResponse:
        self.config.require_credentials()
        timeout = timeout or self.config.timeout

        logger.debug(f"{method} {url}")

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self.headers(),
                    params=params,
                    json=body if method != "GET" else None
                )

        except httpx.TimeoutException as e:
            raise RemoteError(
                f"Request to RequestDesk timed out after {timeout} seconds",
                context={"url": url, "timeout": timeout},
                original_exception=e
            )

        except httpx.HTTPError as e:
            raise RemoteError(
                f"Failed to connect to RequestDesk: {str(e)}",
                context={"url": url},
                original_exception=e
            )

        try:
            parsed = response.json()
        except ValueError:
            parsed = None

        logger.debug(f"{method} {url} -> {response.status_code}")
        return RemoteResponse(status_code=response.status_code, body=parsed, text=response.text)

    @staticmethod
    def check_response(response: RemoteResponse, url: str = "") -> Dict[str, Any]:
        """
        Return the JSON body of a successful response, raise otherwise.

        Raises:
            AuthenticationError: HTTP 401 or 403
            RemoteError: Any other non-2xx status
        """
        if response.ok:
            return response.body if isinstance(response.body, dict) else {}

        if response.status_code in (401, 403):
            raise AuthenticationError(
                INVALID_API_KEY_MESSAGE,
                context={"url": url},
                status_code=response.status_code
            )

        raise RemoteError(
            response.error_detail() or f"HTTP {response.status_code}",
            context={"url": url, "response_body": response.text[:500]},
            status_code=response.status_code
        )

    # ========================================================================
    # Operations
    # ========================================================================

    async def test_connection(self) -> Dict[str, Any]:
        """Check the credentials against the catalog sync API"""
        url = self.url("/api/public/magento/test")
        body = self.check_response(
            await self.post(url, timeout=self.config.connection_test_timeout), url
        )
        return {
            "success": True,
            "message": body.get("message") or "Connection successful",
            "agent_name": body.get("agent_name"),
        }

    async def test_posts_connection(self) -> Dict[str, Any]:
        """Check the credentials against the posts API"""
        url = self.url("/api/public/posts/test")
        body = self.check_response(
            await self.post(url, timeout=self.config.connection_test_timeout), url
        )
        return {
            "success": True,
            "message": body.get("message") or "Posts API connection successful",
            "agent_name": body.get("agent_name"),
            "posts_available": body.get("posts_available") or 0,
        }

    async def fetch_posts(
        self,
        status: Optional[str] = "publish",
        sync_status: Optional[str] = None,
        page: int = 1,
        per_page: int = 20
    ) -> PostsPage:
        """Fetch one page of posts; filters are only sent when set"""
        params: Dict[str, Any] = {"page": page, "per_page": per_page, "platform": PLATFORM}
        if status:
            params["status"] = status
        if sync_status:
            params["sync_status"] = sync_status

        url = self.url("/api/public/posts")
        logger.info(f"Fetching posts from {url} (page {page}, per_page {per_page})")

        body = self.check_response(await self.get(url, params=params), url)
        posts_page = PostsPage.from_response(body)

        logger.info(f"Fetched {len(posts_page.posts)} of {posts_page.total} posts (page {page})")
        return posts_page

    async def report_sync_status(self, report: SyncReport) -> None:
        url = self.url(f"/api/public/posts/{report.external_id}/sync-status")
        self.check_response(await self.post(url, report.to_payload()), url)
        logger.info(f"Reported sync status '{report.sync_status.value}' for post {report.external_id}")

    async def send_documents(self, store_identifier: str, documents: List[Document]) -> Dict[str, Any]:
        """Send one batch of documents to the knowledge base"""
        url = self.url("/api/public/magento/sync")
        payload = {
            "store_url": store_identifier,
            "documents": [document.to_payload() for document in documents],
            "auto_create_collection": True,
        }

        logger.info(f"Sending {len(documents)} documents to {url}")
        return self.check_response(await self.post(url, payload), url)

    async def related_posts(self, query: str, max_results: int = 5) -> Dict[str, Any]:
        """Semantic lookup of posts related to a product"""
        url = self.url("/api/public/posts/related")
        body = self.check_response(
            await self.post(url, params={"query": query, "max_results": max_results}), url
        )

        logger.info(
            f"Found {body.get('total', 0)} related posts for '{query}' "
            f"(confidence: {body.get('confidence', 0.0)})"
        )
        return {
            "posts": body.get("posts") or [],
            "total": body.get("total") or 0,
            "confidence": body.get("confidence") or 0.0,
            "query": query,
        }
