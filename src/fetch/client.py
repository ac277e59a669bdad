"""Mercado Livre HTTP client: one authenticated GET per call."""
import copy
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import config
from src.errors import UpstreamError
from src.fetch.endpoints import build_url
from src.fetch.rate_limit import RateLimiter
from src.fetch.tracker import EndpointTracker
from src.parse.redact import redact_string

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 300


def is_retryable_status(response: httpx.Response) -> bool:
    """Check if status code is retryable."""
    return response.status_code in (429, 500, 502, 503, 504)


class _RetryableStatus(Exception):
    def __init__(self, response: httpx.Response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


class MLClient:
    """HTTP client with bearer auth, per-call timeout, optional retries and pacing.

    ``get`` never raises for upstream problems: it returns ``(payload, None)``
    on a 2xx JSON response and ``(None, UpstreamError)`` otherwise.
    """

    def __init__(
        self,
        access_token: str,
        tracker: Optional[EndpointTracker] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        rate_per_second: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.tracker = tracker if tracker is not None else EndpointTracker()
        self.base_url = base_url or config.ML_API_BASE
        self.max_retries = config.MAX_RETRIES if max_retries is None else max_retries

        limits = httpx.Limits(
            max_connections=50,
            max_keepalive_connections=10,
        )
        self.client = httpx.AsyncClient(
            http2=transport is None,
            timeout=config.TIMEOUT if timeout is None else timeout,
            limits=limits,
            transport=transport,
        )
        self.rate_limiter = RateLimiter(
            config.RATE_PER_SECOND if rate_per_second is None else rate_per_second
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def bind(self, tracker: EndpointTracker) -> "MLClient":
        """Same connection pool and limiter, different endpoint tracker."""
        scoped = copy.copy(self)
        scoped.tracker = tracker
        return scoped

    async def get(
        self,
        endpoint: str,
        path_params: Optional[dict] = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> tuple[Optional[Any], Optional[UpstreamError]]:
        """GET one endpoint template; see class docstring for the contract."""
        self.tracker.add(endpoint)
        url = build_url(endpoint, path_params, self.base_url)
        request_headers = {"Authorization": f"Bearer {self.access_token}"}
        if headers:
            request_headers.update(headers)

        try:
            response = await self._send(url, params, request_headers)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout for {endpoint}: {e!r}")
            return None, UpstreamError(endpoint, f"timeout: {e!r}")
        except httpx.HTTPError as e:
            logger.warning(f"Network error for {endpoint}: {e!r}")
            return None, UpstreamError(endpoint, redact_string(f"network error: {e!r}"))

        if not response.is_success:
            body = redact_string(response.text)[:MAX_ERROR_BODY]
            logger.debug(f"{endpoint} returned {response.status_code}: {body}")
            return None, UpstreamError(endpoint, body or response.reason_phrase, response.status_code)

        try:
            payload = response.json()
        except ValueError:
            return None, UpstreamError(endpoint, "malformed JSON body", response.status_code)
        return payload, None

    async def _send(self, url: str, params: Optional[dict], headers: dict) -> httpx.Response:
        host = urlparse(url).netloc
        response = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(
                (httpx.TimeoutException, httpx.NetworkError, _RetryableStatus)
            ),
            reraise=True,
        ):
            with attempt:
                await self.rate_limiter.acquire(host)
                response = await self.client.get(url, params=params, headers=headers)
                # The last attempt hands the error response back to the caller
                if is_retryable_status(response) and attempt.retry_state.attempt_number <= self.max_retries:
                    logger.info(f"Retryable HTTP {response.status_code} for {urlparse(url).path}")
                    raise _RetryableStatus(response)
        return response
