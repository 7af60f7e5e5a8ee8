"""
Async HTTP client for the report page.

Built on httpx with a hard per-request deadline. Failures are not
retried: a timeout, transport error or non-2xx status ends the run.
"""

import asyncio
from typing import Optional

import httpx
import structlog

from .exceptions import FetchError


USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


class HttpClient:
    """
    Async HTTP client with a bounded timeout.

    Usage:
        async with HttpClient(timeout=10.0) as client:
            html = await client.get_text("https://example.com")
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[structlog.typing.FilteringBoundLogger] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request deadline in seconds
            transport: Optional httpx transport (tests plug a MockTransport)
            logger: Logger to report with (module logger if not provided)
        """
        self.timeout = timeout
        self.transport = transport
        self.logger = logger or structlog.get_logger(__name__)

        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={
                "Accept-Language": "de,en;q=0.9",
                "User-Agent": USER_AGENT,
            },
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            try:
                await self._client.aclose()
            except httpx.HTTPError as e:
                self.logger.warning("close_failed", error=str(e))
            self._client = None

    async def get(self, url: str) -> httpx.Response:
        """
        GET request bounded by the client timeout.

        Args:
            url: URL to fetch

        Returns:
            httpx.Response with a 2xx status

        Raises:
            FetchError: On timeout, transport failure or non-2xx status
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        self.logger.debug("http_get", url=url)

        try:
            response = await asyncio.wait_for(
                self._client.get(url),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise FetchError(f"timed out after {self.timeout}s fetching {url}", url=url) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(f"unexpected status {status} fetching {url}", url=url, status=status) from e
        except httpx.HTTPError as e:
            raise FetchError(f"failed to get {url}: {e}", url=url) from e

        self.logger.debug(
            "http_response",
            url=url,
            status=response.status_code,
            size=len(response.content),
        )
        return response

    async def get_text(self, url: str) -> str:
        """GET request returning text content."""
        response = await self.get(url)
        return response.text
