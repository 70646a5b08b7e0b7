"""
Anchor Proof Verifier - Proof Analyzer

Orchestrates verification of one proof:
1. Rebuild the Merkle root from the leaves and compare with the target hash
2. Walk the inclusion proof from the target hash to the Merkle root
3. Download the original data and check its hash
4. Check that the anchoring transaction commits to the Merkle root
5. Count confirmations of the anchoring transaction

Checks 1-4 run concurrently. Checks 4 and 5 share one transaction lookup.
If a check fails, the others are cancelled; a transaction lookup already in
flight is shielded and still fills the cache for the next analysis.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from proofcheck.core.config import settings
from proofcheck.core.errors import FetchFailedError
from proofcheck.crypto.merkle import verify_merkle_root, verify_proof_against_root
from proofcheck.metrics import get_verification_metrics
from proofcheck.models.proof import Proof
from proofcheck.services.blockchain_client import BlockchainInfoClient, TransactionFetcher
from proofcheck.services.data_fetcher import DataFetcher, HttpDataFetcher
from proofcheck.services.data_integrity import DataIntegrityChecker, resolve_data_location
from proofcheck.services.transaction_validator import TransactionCache, TransactionValidator

logger = structlog.get_logger(__name__)


class AnalyzerState(str, Enum):
    """Analysis lifecycle state."""

    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


@dataclass(frozen=True)
class VerificationReport:
    """Outcome of one analysis."""

    target_hash_valid: bool
    merkle_root_valid: bool
    data_hash_valid: bool
    transaction_valid: bool
    confirmations: int

    @property
    def overall_valid(self) -> bool:
        """True only if every check passed."""
        return (
            self.target_hash_valid
            and self.merkle_root_valid
            and self.data_hash_valid
            and self.transaction_valid
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "validations": {
                "target_hash_valid": self.target_hash_valid,
                "merkle_root_valid": self.merkle_root_valid,
                "data_hash_valid": self.data_hash_valid,
                "transaction_valid": self.transaction_valid,
            },
            "confirmations": self.confirmations,
            "overall_valid": self.overall_valid,
        }


class ProofAnalyzer:
    """
    Verification object for a single proof.

    Each check can be called on its own; analyze() runs them all and folds
    the results into a VerificationReport. The transaction lookup is cached
    for the lifetime of the analyzer, so repeated analyses do not re-fetch.

    Example:
        >>> async with ProofAnalyzer.from_document(document) as analyzer:
        ...     report = await analyzer.analyze()
    """

    def __init__(
        self,
        proof: Proof,
        data_fetcher: DataFetcher | None = None,
        transaction_fetcher: TransactionFetcher | None = None,
        data_base_url: str = settings.DATA_BASE_URL,
    ) -> None:
        """
        Initialize proof analyzer.

        Args:
            proof: Proof to verify
            data_fetcher: Source of the original data (HTTP by default)
            transaction_fetcher: Source of transactions (blockchain.info by default)
            data_base_url: Endpoint used to infer a missing data location

        Raises:
            MalformedProofError: If no data location can be resolved
        """
        self._owned_clients = []
        if data_fetcher is None:
            data_fetcher = HttpDataFetcher()
            self._owned_clients.append(data_fetcher)
        if transaction_fetcher is None:
            transaction_fetcher = BlockchainInfoClient()
            self._owned_clients.append(transaction_fetcher)

        self._proof = proof
        self._data_location = resolve_data_location(proof, data_base_url)
        self._data_checker = DataIntegrityChecker(data_fetcher)
        self._tx_cache = TransactionCache(transaction_fetcher, proof.transaction_id)
        self._tx_validator = TransactionValidator(self._tx_cache, proof.merkle_root)
        self._state = AnalyzerState.IDLE
        self._metrics = get_verification_metrics()

    @classmethod
    def from_document(cls, document: dict[str, Any], **kwargs: Any) -> "ProofAnalyzer":
        """
        Create an analyzer from a proof document.

        Raises:
            MalformedProofError: If the document is not a valid proof
            UnsupportedAlgorithmError: If the proof's hash type is unknown
        """
        return cls(Proof.from_document(document), **kwargs)

    @property
    def proof(self) -> Proof:
        return self._proof

    @property
    def data_location(self) -> str:
        """Location the original data is downloaded from."""
        return self._data_location

    @property
    def state(self) -> AnalyzerState:
        return self._state

    @property
    def transaction_cache(self) -> TransactionCache:
        return self._tx_cache

    def is_target_hash_valid(self) -> bool:
        """Check that the leaves rebuild to the target hash."""
        valid = verify_merkle_root(
            self._proof.leaf_hashes(),
            self._proof.target_hash,
            self._proof.hash_algorithm,
        )
        self._metrics.record_check("target_hash", valid)
        return valid

    def is_merkle_root_valid(self) -> bool:
        """Check that the inclusion proof leads from target hash to Merkle root."""
        valid = verify_proof_against_root(
            self._proof.target_hash,
            self._proof.merkle_root,
            self._proof.target_proof,
            self._proof.hash_algorithm,
        )
        self._metrics.record_check("merkle_root", valid)
        return valid

    async def is_data_hash_valid(self) -> bool:
        """
        Check that the data at data_location matches the data hash.

        Raises:
            FetchFailedError: If the data cannot be retrieved
        """
        try:
            valid = await self._data_checker.verify(self._proof, self._data_location)
        except FetchFailedError:
            self._metrics.record_fetch_failure("data")
            raise
        self._metrics.record_check("data_hash", valid)
        return valid

    async def is_tx_valid(self) -> bool:
        """
        Check that the anchoring transaction commits to the Merkle root.

        A transaction that does not exist is not valid.

        Raises:
            FetchFailedError: If the lookup failed for another reason
        """
        try:
            valid = await self._tx_validator.is_valid()
        except FetchFailedError:
            self._metrics.record_fetch_failure("transaction")
            raise
        self._metrics.record_check("transaction", valid)
        return valid

    async def get_confirmations(self) -> int:
        """
        Get confirmations of the anchoring transaction, 0 if it does not exist.

        Raises:
            FetchFailedError: If the lookup failed for another reason
        """
        try:
            return await self._tx_validator.get_confirmations()
        except FetchFailedError:
            self._metrics.record_fetch_failure("transaction")
            raise

    async def analyze(self) -> VerificationReport:
        """
        Run every check and fold the results into a report.

        Returns:
            VerificationReport

        Raises:
            FetchFailedError: If a network-backed check could not complete
            UnsupportedAlgorithmError: If the proof's hash type is unknown
        """
        started = time.monotonic()
        self._state = AnalyzerState.RUNNING

        logger.info(
            "Analyzing proof",
            tx_id=self._proof.transaction_id,
            merkle_root=self._proof.merkle_root[:16] + "...",
            data_location=self._data_location,
        )

        checks = [
            asyncio.ensure_future(self._run_sync(self.is_target_hash_valid)),
            asyncio.ensure_future(self._run_sync(self.is_merkle_root_valid)),
            asyncio.ensure_future(self.is_data_hash_valid()),
            asyncio.ensure_future(self.is_tx_valid()),
        ]

        try:
            target_hash_valid, merkle_root_valid, data_hash_valid, transaction_valid = (
                await asyncio.gather(*checks)
            )
            confirmations = await self.get_confirmations()
        except Exception as e:
            # The shielded transaction lookup still completes into the cache
            for check in checks:
                check.cancel()
            self._state = AnalyzerState.IDLE
            self._metrics.record_analysis(None, time.monotonic() - started)
            logger.error(
                "Proof analysis failed",
                tx_id=self._proof.transaction_id,
                error=str(e),
            )
            raise

        report = VerificationReport(
            target_hash_valid=target_hash_valid,
            merkle_root_valid=merkle_root_valid,
            data_hash_valid=data_hash_valid,
            transaction_valid=transaction_valid,
            confirmations=confirmations,
        )

        self._state = AnalyzerState.DONE
        duration = time.monotonic() - started
        self._metrics.record_analysis(report.overall_valid, duration)

        logger.info(
            "Proof analysis completed",
            tx_id=self._proof.transaction_id,
            overall_valid=report.overall_valid,
            confirmations=confirmations,
            duration_seconds=round(duration, 3),
        )

        return report

    @staticmethod
    async def _run_sync(check) -> bool:
        return check()

    async def aclose(self) -> None:
        """Close HTTP collaborators created by this analyzer."""
        for client in self._owned_clients:
            await client.aclose()
        self._owned_clients = []

    async def __aenter__(self) -> "ProofAnalyzer":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
