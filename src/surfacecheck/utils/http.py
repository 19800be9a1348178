"""Async HTTP client with retries for the completion API."""

import asyncio
from typing import Any

import httpx

from surfacecheck.utils.logging import get_logger

logger = get_logger(__name__)

# 529 is the Anthropic API's "overloaded" status
RETRY_STATUSES = frozenset({429, 500, 502, 503, 504, 529})
RETRY_EXCEPTIONS = (httpx.ConnectError, httpx.ReadTimeout, httpx.RemoteProtocolError)


class AsyncHttpClient:
    """Async JSON-over-HTTP client with backoff.

    Retryable statuses and transport errors are retried up to
    ``max_retries`` times. A ``Retry-After`` header overrides the backoff
    delay. Other 4xx responses are raised immediately.
    """

    DEFAULT_TIMEOUT = 60.0
    DEFAULT_RETRIES = 2
    RETRY_DELAYS = (1.0, 2.0, 4.0)

    def __init__(
        self,
        base_url: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_RETRIES,
        headers: dict[str, str] | None = None,
        retry_delays: tuple[float, ...] = RETRY_DELAYS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL for requests.
            timeout: Request timeout in seconds.
            max_retries: Retries after the first attempt.
            headers: Default headers for all requests.
            retry_delays: Backoff delays in seconds; the last one repeats.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        """
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.default_headers = headers or {}
        self.retry_delays = retry_delays or (0.0,)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AsyncHttpClient":
        """Open the underlying connection pool."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self.default_headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        """Close the underlying connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the underlying httpx client."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use async with statement.")
        return self._client

    def _backoff(self, attempt: int, response: httpx.Response | None = None) -> float:
        if response is not None:
            retry_after = response.headers.get("Retry-After")
            if retry_after:
                try:
                    return max(float(retry_after), 0.0)
                except ValueError:
                    pass
        return self.retry_delays[min(attempt, len(self.retry_delays) - 1)]

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            httpx.HTTPStatusError: For non-retryable statuses, or once retries
                are exhausted.
            httpx.TransportError: If the connection keeps failing.
        """
        attempt = 0
        while True:
            try:
                response = await self.client.request(method, url, **kwargs)
            except RETRY_EXCEPTIONS as e:
                if attempt >= self.max_retries:
                    raise
                delay = self._backoff(attempt)
                logger.warning(f"{type(e).__name__} on {url}, retrying in {delay:.1f}s")
            else:
                if response.status_code not in RETRY_STATUSES or attempt >= self.max_retries:
                    response.raise_for_status()
                    return response
                delay = self._backoff(attempt, response)
                logger.warning(f"HTTP {response.status_code} from {url}, retrying in {delay:.1f}s")

            await asyncio.sleep(delay)
            attempt += 1

    async def post_json(
        self,
        url: str,
        json: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON body and parse the JSON response.

        Args:
            url: Request URL, relative to ``base_url``.
            json: JSON body.
            headers: Additional headers.

        Returns:
            Parsed JSON data.
        """
        response = await self._request("POST", url, json=json, headers=headers)
        return response.json()
