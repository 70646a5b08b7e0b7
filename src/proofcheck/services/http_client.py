"""
Anchor Proof Verifier - HTTP Client Base

Shared httpx plumbing for the network collaborators: lazy client creation,
per-request timeout, retries with exponential backoff for transient transport
errors, and translation of transport failures into FetchFailedError.
"""

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from proofcheck.core.config import settings
from proofcheck.core.errors import FetchFailedError

logger = structlog.get_logger(__name__)


class HttpClientBase:
    """
    Base for collaborators that GET resources over HTTP.

    Subclasses decide how status codes map onto the error taxonomy; this
    class only guarantees that a response or a FetchFailedError comes back.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = settings.REQUEST_TIMEOUT,
        retry_count: int = settings.FETCH_RETRY_COUNT,
        retry_delay: float = settings.FETCH_RETRY_DELAY,
        retry_max_delay: float = settings.FETCH_RETRY_MAX_DELAY,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            client: Pre-configured client (not closed by aclose)
            timeout: Per-request timeout in seconds
            retry_count: Attempts for transient transport errors
            retry_delay: Backoff multiplier in seconds
            retry_max_delay: Maximum backoff in seconds
        """
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._retry_count = max(1, retry_count)
        self._retry_delay = retry_delay
        self._retry_max_delay = retry_max_delay

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str) -> httpx.Response:
        """
        GET a URL, retrying transient transport errors.

        Returns:
            The response, whatever its status code

        Raises:
            FetchFailedError: On timeout or transport failure
        """
        client = self._get_client()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_count),
                wait=wait_exponential(
                    multiplier=self._retry_delay,
                    max=self._retry_max_delay,
                ),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    return await client.get(url)
        except httpx.TimeoutException as e:
            logger.warning("Request timed out", url=url, error=str(e))
            raise FetchFailedError(f"Timed out fetching {url}", body=str(e)) from e
        except httpx.HTTPError as e:
            logger.warning("Request failed", url=url, error=str(e))
            raise FetchFailedError(f"Failed to fetch {url}: {e}", body=str(e)) from e

    @staticmethod
    def _body_excerpt(response: httpx.Response) -> str:
        return response.text[:200]
