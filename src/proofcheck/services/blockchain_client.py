"""
Anchor Proof Verifier - Blockchain Client

Looks up anchoring transactions through the blockchain.info explorer API and
normalizes them into TransactionRecord. Missing transactions are reported as
TransactionNotFoundError; every other failure as FetchFailedError.
"""

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from proofcheck.core.config import settings
from proofcheck.core.errors import FetchFailedError, TransactionNotFoundError
from proofcheck.services.http_client import HttpClientBase

logger = structlog.get_logger(__name__)

# blockchain.info answers 500 with this body for unknown transactions
_NOT_FOUND_MARKER = "Transaction not found"


def normalize_script(script: str | bytes) -> str:
    """Canonical script encoding: lower-case hex without a 0x prefix."""
    if isinstance(script, (bytes, bytearray)):
        return bytes(script).hex()
    script = script.strip().lower()
    if script.startswith("0x"):
        script = script[2:]
    return script


@dataclass(frozen=True)
class TransactionRecord:
    """
    Transaction as seen by the verifier.

    Attributes:
        transaction_id: Transaction identifier
        outputs: Output scripts, normalized to lower-case hex
        confirmations: Blocks mined on top of (and including) the tx block
        block_height: Height of the including block, None if unconfirmed
    """

    transaction_id: str
    outputs: tuple[str, ...]
    confirmations: int = 0
    block_height: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "outputs",
            tuple(normalize_script(script) for script in self.outputs),
        )
        if self.confirmations < 0:
            raise ValueError("confirmations must be non-negative")


class TransactionFetcher(Protocol):
    """Retrieves transactions by identifier."""

    async def fetch(self, transaction_id: str) -> TransactionRecord:
        """
        Fetch a transaction.

        Raises:
            TransactionNotFoundError: If the transaction does not exist
            FetchFailedError: On any other failure
        """
        ...


class BlockchainInfoClient(HttpClientBase):
    """TransactionFetcher backed by the blockchain.info explorer API."""

    def __init__(
        self,
        api_url: str = settings.BLOCKCHAIN_API_URL,
        **kwargs: Any,
    ) -> None:
        """
        Initialize blockchain client.

        Args:
            api_url: Explorer API base URL
            **kwargs: Passed to HttpClientBase
        """
        super().__init__(**kwargs)
        self._api_url = api_url.rstrip("/")

    @property
    def api_url(self) -> str:
        """Get configured API base URL."""
        return self._api_url

    async def fetch(self, transaction_id: str) -> TransactionRecord:
        """
        Fetch a transaction and derive its confirmation count.

        Args:
            transaction_id: Transaction hash

        Returns:
            TransactionRecord

        Raises:
            TransactionNotFoundError: If the transaction does not exist
            FetchFailedError: On any other failure
        """
        logger.info("Fetching transaction", tx_id=transaction_id)

        raw_tx = await self._get_json(
            f"{self._api_url}/rawtx/{transaction_id}",
            transaction_id=transaction_id,
        )

        block_height = raw_tx.get("block_height")
        confirmations = 0
        if block_height is not None:
            latest = await self._get_json(f"{self._api_url}/latestblock")
            try:
                tip_height = int(latest["height"])
            except (KeyError, TypeError, ValueError) as e:
                raise FetchFailedError(
                    "Latest block response has no height",
                    body=str(latest)[:200],
                ) from e
            confirmations = max(0, tip_height - int(block_height) + 1)

        record = TransactionRecord(
            transaction_id=transaction_id,
            outputs=tuple(
                vout["script"]
                for vout in raw_tx.get("out", [])
                if vout.get("script")
            ),
            confirmations=confirmations,
            block_height=block_height,
        )

        logger.info(
            "Fetched transaction",
            tx_id=transaction_id,
            outputs=len(record.outputs),
            confirmations=record.confirmations,
        )
        return record

    async def _get_json(
        self,
        url: str,
        transaction_id: str | None = None,
    ) -> dict[str, Any]:
        response = await self._get(url)

        if transaction_id is not None and self._is_not_found(response):
            logger.info("Transaction not found", tx_id=transaction_id)
            raise TransactionNotFoundError(
                f"Transaction {transaction_id} not found",
                status=404,
                body=self._body_excerpt(response),
            )

        if not response.is_success:
            logger.warning(
                "Explorer request failed",
                url=url,
                status_code=response.status_code,
            )
            raise FetchFailedError(
                f"Explorer request failed with status {response.status_code}",
                status=response.status_code,
                body=self._body_excerpt(response),
            )

        try:
            return response.json()
        except ValueError as e:
            raise FetchFailedError(
                "Explorer returned invalid JSON",
                status=response.status_code,
                body=self._body_excerpt(response),
            ) from e

    @staticmethod
    def _is_not_found(response: httpx.Response) -> bool:
        if response.status_code == 404:
            return True
        return response.status_code == 500 and _NOT_FOUND_MARKER in response.text
