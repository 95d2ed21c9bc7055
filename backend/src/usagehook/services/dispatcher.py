"""Single-shot delivery of usage events to the usage hook endpoint."""
import asyncio
import json
import time
from typing import Any

import httpx
import structlog

from usagehook.config import settings
from usagehook.errors import DispatchError, DispatchTimeout, HttpStatusError, TransportError
from usagehook.metrics import usage_hook_request_duration_seconds, usage_hook_requests_total
from usagehook.schemas.dispatch_result import DispatchResult
from usagehook.schemas.usage_event import UsageEvent

logger = structlog.get_logger(__name__)


def serialize_payload(payload: UsageEvent | dict[str, Any]) -> bytes:
    """Compact JSON body for the request."""
    if isinstance(payload, UsageEvent):
        return payload.to_wire()
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def parse_body(text: str) -> Any:
    """Parsed JSON, or the raw text wrapped as ``{"success": True, "raw": text}``."""
    try:
        return json.loads(text)
    except ValueError:
        return {"success": True, "raw": text}


class UsageHookClient:
    """Posts usage events to the hook, one attempt per call, no retries."""

    def __init__(
        self,
        endpoint_url: str | None = None,
        timeout_seconds: float | None = None,
        cli_version: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            endpoint_url: Default target, ``settings.usage_hook_url`` if omitted
            timeout_seconds: Deadline per request
            cli_version: Value for the X-CLI-Version header
            transport: Optional httpx transport (mock or ASGI in tests)
        """
        self.endpoint_url = endpoint_url or settings.usage_hook_url
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.request_timeout_seconds
        self.cli_version = cli_version or settings.cli_version
        self.transport = transport

    def build_headers(self, body: bytes) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
            "X-CLI-Version": self.cli_version,
        }

    async def send(
        self,
        payload: UsageEvent | dict[str, Any],
        endpoint_url: str | None = None,
    ) -> DispatchResult:
        """
        POST a payload once and classify the outcome.

        Args:
            payload: Usage event or plain JSON-serializable dict
            endpoint_url: Override for this request

        Returns:
            DispatchResult; failures are returned, not raised
        """
        url = endpoint_url or self.endpoint_url
        body = serialize_payload(payload)
        headers = self.build_headers(body)

        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._post(url, body, headers),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._fail(url, DispatchTimeout(self.timeout_seconds))
        except httpx.HTTPError as e:
            return self._fail(url, TransportError(e))
        finally:
            usage_hook_request_duration_seconds.observe(time.perf_counter() - started)

        text = response.text
        logger.info(
            "usage_hook_response",
            endpoint=url,
            status_code=response.status_code,
            headers=dict(response.headers),
            body=text,
        )

        if 200 <= response.status_code < 300:
            usage_hook_requests_total.labels(outcome="success").inc()
            return DispatchResult.success(parse_body(text), response.status_code)

        return self._fail(url, HttpStatusError(response.status_code, text), response.status_code)

    async def _post(self, url: str, body: bytes, headers: dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self.transport,
        ) as client:
            return await client.post(url, content=body, headers=headers)

    def _fail(self, url: str, error: DispatchError, status_code: int | None = None) -> DispatchResult:
        usage_hook_requests_total.labels(outcome=error.code).inc()
        if isinstance(error, DispatchTimeout):
            logger.warning("usage_hook_timeout", endpoint=url, timeout_seconds=self.timeout_seconds)
        elif isinstance(error, TransportError):
            logger.error("usage_hook_transport_error", endpoint=url, **error.details())
        else:
            logger.warning("usage_hook_rejected", endpoint=url, status_code=status_code, error=str(error))
        return DispatchResult.failure(error, status_code)


async def send(endpoint_url: str, payload: UsageEvent | dict[str, Any]) -> DispatchResult:
    """Send one payload to ``endpoint_url`` with the configured defaults."""
    return await UsageHookClient(endpoint_url=endpoint_url).send(payload)
