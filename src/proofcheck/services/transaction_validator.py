"""
Anchor Proof Verifier - Transaction Validator

Checks that an anchoring transaction commits to a Merkle root and reports
its confirmation count. Transaction lookups go through a per-analysis cache
so that several checks share one network round-trip.
"""

import asyncio
from enum import Enum

import structlog

from proofcheck.core.errors import TransactionNotFoundError
from proofcheck.metrics import get_verification_metrics
from proofcheck.services.blockchain_client import (
    TransactionFetcher,
    TransactionRecord,
    normalize_script,
)

logger = structlog.get_logger(__name__)


def is_anchored(tx: TransactionRecord, merkle_root: str) -> bool:
    """
    Check whether any output script ends with the Merkle root.

    Anchoring appends the commitment to the script, so this is a suffix
    match: a root appearing elsewhere in a script does not count.
    """
    root = normalize_script(merkle_root)
    if not root:
        return False
    return any(script.endswith(root) for script in tx.outputs)


def confirmations(tx: TransactionRecord) -> int:
    """Get the confirmation count of a transaction."""
    return tx.confirmations


class CacheState(str, Enum):
    """Transaction cache state."""

    UNFETCHED = "unfetched"
    IN_FLIGHT = "in_flight"
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"


class TransactionCache:
    """
    Memoized transaction lookup for one proof.

    The first get() issues the fetch; callers arriving while it is in flight
    await the same task. Found and not-found outcomes are kept for the
    lifetime of the cache. Any other failure resets it to UNFETCHED.
    """

    def __init__(self, fetcher: TransactionFetcher, transaction_id: str) -> None:
        self._fetcher = fetcher
        self._transaction_id = transaction_id
        self._state = CacheState.UNFETCHED
        self._record: TransactionRecord | None = None
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> CacheState:
        return self._state

    async def get(self) -> TransactionRecord | None:
        """
        Get the transaction, fetching it at most once.

        Returns:
            The record, or None if the transaction does not exist

        Raises:
            FetchFailedError: If the lookup failed for another reason
        """
        if self._state == CacheState.RESOLVED:
            return self._record
        if self._state == CacheState.NOT_FOUND:
            return None

        if self._task is None:
            self._state = CacheState.IN_FLIGHT
            self._task = asyncio.ensure_future(self._resolve())

        return await asyncio.shield(self._task)

    async def _resolve(self) -> TransactionRecord | None:
        get_verification_metrics().record_transaction_fetch()
        try:
            record = await self._fetcher.fetch(self._transaction_id)
        except TransactionNotFoundError:
            self._state = CacheState.NOT_FOUND
            self._task = None
            return None
        except BaseException:
            self._state = CacheState.UNFETCHED
            self._task = None
            raise

        self._record = record
        self._state = CacheState.RESOLVED
        self._task = None
        return record


class TransactionValidator:
    """Validates the anchoring transaction of one proof."""

    def __init__(self, cache: TransactionCache, merkle_root: str) -> None:
        self._cache = cache
        self._merkle_root = merkle_root

    async def is_valid(self) -> bool:
        """Check that the transaction exists and commits to the Merkle root."""
        tx = await self._cache.get()
        if tx is None:
            return False

        anchored = is_anchored(tx, self._merkle_root)
        if not anchored:
            logger.info(
                "Merkle root not found in transaction outputs",
                tx_id=tx.transaction_id,
                outputs=len(tx.outputs),
            )
        return anchored

    async def get_confirmations(self) -> int:
        """Get confirmations, 0 if the transaction does not exist."""
        tx = await self._cache.get()
        if tx is None:
            return 0
        return confirmations(tx)
