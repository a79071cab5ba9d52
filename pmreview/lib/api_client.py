"""
Collaborator service client.

Typed async operations against the review service. Every call returns an
ApiResult; transport exceptions and error responses are translated into an
ApiError with an ErrorKind and never escape:

    transport failure / timeout      -> UNREACHABLE
    401 / 403                        -> UNAUTHORIZED
    404                              -> NOT_FOUND
    envelope with success=false      -> SERVICE_REJECTED (service message)
    anything else that isn't usable  -> UNKNOWN (best-effort detail)

The client holds no business state. Configuration is passed in; tests
inject an httpx.AsyncClient backed by httpx.MockTransport.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar
from urllib.parse import quote

import httpx

from pmreview.lib.config import ApiConfig
from pmreview.lib.errors import ApiError, ErrorKind
from pmreview.lib.validate import ValidationError, is_valid, validate
from pmreview.pm.models import ReviewRecord, parse_ticket_references

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Longest response body excerpt carried in an error message
ERROR_DETAIL_MAX_CHARS = 200


@dataclass
class ApiResult(Generic[T]):
    """Uniform result of a client call. error is set iff success is False."""
    success: bool
    data: Optional[T] = None
    error: Optional[ApiError] = None

    @classmethod
    def succeeded(cls, data: Any = None) -> "ApiResult":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "ApiResult":
        return cls(success=False, error=ApiError(kind, message))


@dataclass(frozen=True)
class HealthStatus:
    status: str
    database: Optional[str] = None
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class ApprovalResult:
    """What the service reports after approving a review."""
    success: bool
    ticket_references: tuple[str, ...] = ()
    message: Optional[str] = None


def _review_path(review_id: str, suffix: str = "") -> str:
    return f"/api/reviews/{quote(str(review_id), safe='')}{suffix}"


def _error_detail(response: httpx.Response) -> str:
    """Best-effort diagnostic text from an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    text = response.text.strip()
    if text:
        return text[:ERROR_DETAIL_MAX_CHARS]
    return response.reason_phrase or f"HTTP {response.status_code}"


class ReviewApiClient:
    """Async client for the review collaborator service."""

    def __init__(self, config: ApiConfig, http_client: httpx.AsyncClient | None = None):
        """Create a client.

        Args:
            config: Base URL, credential and timeout
            http_client: Optional pre-configured httpx.AsyncClient. If None,
                one is created and closed by aclose().
        """
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(config.timeout))

    async def __aenter__(self) -> "ReviewApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        # The service requires both forms of the credential
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
            "X-API-Key": self.config.api_key,
        }

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        enveloped: bool = True,
        default_error: str = "Request failed",
    ) -> ApiResult[Any]:
        """Send one request and unwrap the response.

        Returns the envelope's data (or the whole body when enveloped is
        False) on success.
        """
        url = f"{self.config.base_url}{path}"
        logger.debug(f"API request: {method} {path}")

        try:
            response = await self._client.request(
                method,
                url,
                json=body,
                headers=self._headers(),
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"API timeout: {method} {path}: {e!r}")
            return ApiResult.failed(
                ErrorKind.UNREACHABLE,
                f"Request timed out after {self.config.timeout:g}s",
            )
        except httpx.TransportError as e:
            logger.warning(f"API unreachable: {method} {path}: {e!r}")
            return ApiResult.failed(
                ErrorKind.UNREACHABLE,
                f"Unable to connect to API at {self.config.base_url}: {e}",
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"API request error: {method} {path}: {e!r}")
            return ApiResult.failed(ErrorKind.UNKNOWN, f"Request error: {e}")

        status = response.status_code
        logger.debug(f"API response: {status} {path}")

        if status in (401, 403):
            return ApiResult.failed(
                ErrorKind.UNAUTHORIZED,
                f"API authentication failed: {_error_detail(response)}",
            )
        if status == 404:
            return ApiResult.failed(ErrorKind.NOT_FOUND, f"Not found: {path}")

        try:
            payload = response.json()
        except ValueError:
            payload = None
            decoded = False
        else:
            decoded = True

        if not response.is_success:
            if enveloped and decoded and is_valid(payload, "envelope") and not payload["success"]:
                return ApiResult.failed(
                    ErrorKind.SERVICE_REJECTED,
                    payload.get("error") or payload.get("message") or default_error,
                )
            return ApiResult.failed(
                ErrorKind.UNKNOWN,
                f"HTTP {status}: {_error_detail(response)}",
            )

        if not decoded:
            return ApiResult.failed(ErrorKind.UNKNOWN, f"Invalid JSON in response from {path}")

        if not enveloped:
            return ApiResult.succeeded(payload)

        try:
            validate(payload, "envelope")
        except ValidationError as e:
            return ApiResult.failed(ErrorKind.UNKNOWN, f"Malformed response envelope: {e}")

        if not payload["success"]:
            message = payload.get("error") or payload.get("message") or default_error
            logger.warning(f"API rejected {method} {path}: {message}")
            return ApiResult.failed(ErrorKind.SERVICE_REJECTED, message)

        return ApiResult.succeeded(payload.get("data"))

    @staticmethod
    def _to_record(result: ApiResult, allow_empty: bool = False) -> ApiResult[ReviewRecord]:
        if not result.success:
            return result
        if result.data is None and allow_empty:
            return ApiResult.succeeded(None)
        try:
            validate(result.data, "review")
        except ValidationError as e:
            return ApiResult.failed(ErrorKind.UNKNOWN, f"Malformed review record: {e}")
        return ApiResult.succeeded(ReviewRecord.from_dict(result.data))

    async def health_check(self) -> ApiResult[HealthStatus]:
        """GET /health (not enveloped)."""
        result = await self._request("GET", "/health", enveloped=False)
        if not result.success:
            return result
        try:
            validate(result.data, "health")
        except ValidationError as e:
            return ApiResult.failed(ErrorKind.UNKNOWN, f"Malformed health response: {e}")
        data = result.data
        return ApiResult.succeeded(HealthStatus(
            status=data["status"],
            database=data.get("database"),
            timestamp=data.get("timestamp"),
        ))

    async def list_reviews(self) -> ApiResult[list[ReviewRecord]]:
        """List reviews. Malformed records are skipped with a warning."""
        result = await self._request("GET", "/api/reviews", default_error="Failed to fetch reviews")
        if not result.success:
            return result

        items = result.data or []
        if not isinstance(items, list):
            return ApiResult.failed(ErrorKind.UNKNOWN, "Expected a list of reviews")

        records = []
        for item in items:
            if not is_valid(item, "review"):
                item_id = item.get("id", "?") if isinstance(item, dict) else "?"
                logger.warning(f"Skipping malformed review record {item_id}")
                continue
            records.append(ReviewRecord.from_dict(item))
        return ApiResult.succeeded(records)

    async def get_review(self, review_id: str) -> ApiResult[ReviewRecord]:
        result = await self._request("GET", _review_path(review_id), default_error="Failed to fetch review")
        return self._to_record(result)

    async def update_review(self, review_id: str, edited_content: Any) -> ApiResult[ReviewRecord]:
        """Save edited content. Structured content is serialized to JSON text."""
        if isinstance(edited_content, str):
            edited_json = edited_content
        else:
            edited_json = json.dumps(edited_content, ensure_ascii=False)
        result = await self._request(
            "PUT",
            _review_path(review_id),
            body={"edited_json": edited_json},
            default_error="Failed to update review",
        )
        return self._to_record(result)

    async def approve_review(self, review_id: str) -> ApiResult[ApprovalResult]:
        """Approve a review; the service creates tickets."""
        result = await self._request(
            "POST",
            _review_path(review_id, "/approve"),
            default_error="Failed to approve review",
        )
        if not result.success:
            return result

        data = result.data or {}
        try:
            validate(data, "approval")
        except ValidationError as e:
            return ApiResult.failed(ErrorKind.UNKNOWN, f"Malformed approval response: {e}")

        if data.get("success") is False:
            return ApiResult.failed(
                ErrorKind.SERVICE_REJECTED,
                data.get("message") or "Failed to approve review",
            )

        return ApiResult.succeeded(ApprovalResult(
            success=True,
            ticket_references=tuple(parse_ticket_references(data.get("jiraTickets"))),
            message=data.get("message"),
        ))

    async def reject_review(self, review_id: str, reason: Optional[str] = None) -> ApiResult[Optional[ReviewRecord]]:
        """Reject a review. data may be None if the service returns no record."""
        body = {"reason": reason} if reason else {}
        result = await self._request(
            "POST",
            _review_path(review_id, "/reject"),
            body=body,
            default_error="Failed to reject review",
        )
        return self._to_record(result, allow_empty=True)

    async def submit_manual_content(self, text: str, context: Optional[str] = None) -> ApiResult[str]:
        """Submit free text for generation. Returns the new review ID."""
        body = {"content": text}
        if context:
            body["additional_context"] = context
        result = await self._request(
            "POST",
            "/api/generate",
            body=body,
            default_error="Failed to generate content",
        )
        if not result.success:
            return result
        try:
            validate(result.data, "generate")
        except ValidationError as e:
            return ApiResult.failed(ErrorKind.UNKNOWN, f"Malformed generate response: {e}")
        return ApiResult.succeeded(str(result.data["id"]))
