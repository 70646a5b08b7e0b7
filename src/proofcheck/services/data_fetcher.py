"""
Anchor Proof Verifier - Data Fetcher

Retrieves the raw bytes a proof's data hash is checked against.
"""

from typing import Protocol

import structlog

from proofcheck.core.errors import FetchFailedError, NotFoundError
from proofcheck.services.http_client import HttpClientBase

logger = structlog.get_logger(__name__)


class DataFetcher(Protocol):
    """Retrieves raw bytes from a location."""

    async def fetch(self, location: str) -> bytes:
        """
        Fetch raw bytes.

        Raises:
            FetchFailedError: If the bytes cannot be retrieved
        """
        ...


class HttpDataFetcher(HttpClientBase):
    """DataFetcher backed by HTTP GET."""

    async def fetch(self, location: str) -> bytes:
        """
        Download the resource at location.

        Args:
            location: Absolute URL

        Returns:
            Response body as bytes

        Raises:
            NotFoundError: If the server answers 404
            FetchFailedError: On any other non-2xx status or transport failure
        """
        logger.debug("Fetching data", location=location)

        response = await self._get(location)

        if response.status_code == 404:
            raise NotFoundError(
                f"Data not found at {location}",
                status=404,
                body=self._body_excerpt(response),
            )

        if not response.is_success:
            logger.warning(
                "Data fetch failed",
                location=location,
                status_code=response.status_code,
            )
            raise FetchFailedError(
                f"Data fetch failed with status {response.status_code}",
                status=response.status_code,
                body=self._body_excerpt(response),
            )

        logger.debug("Fetched data", location=location, size=len(response.content))
        return response.content
