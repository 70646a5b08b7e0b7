"""
Anchor Proof Verifier - Data Integrity Checker

Downloads the original data and checks it against the proof's data hash.
"""

import structlog

from proofcheck.core.config import settings
from proofcheck.core.errors import MalformedProofError
from proofcheck.crypto.hashing import data_digest, digest
from proofcheck.models.proof import Proof
from proofcheck.services.data_fetcher import DataFetcher

logger = structlog.get_logger(__name__)


def resolve_data_location(proof: Proof, base_url: str = settings.DATA_BASE_URL) -> str:
    """
    Resolve where the original data can be downloaded.

    Args:
        proof: Proof under verification
        base_url: Endpoint the inferred location is templated on

    Returns:
        The explicit location, else <base_url>/<data hash>/download

    Raises:
        MalformedProofError: If there is neither a location nor a data hash
    """
    if proof.data_location:
        return proof.data_location

    if proof.data_hash is None:
        raise MalformedProofError(
            "Proof has no data location and no data hash to infer one from"
        )

    return f"{base_url.rstrip('/')}/{proof.data_hash}/download"


class DataIntegrityChecker:
    """Checks fetched data against the data hash carried by the first leaf."""

    def __init__(self, fetcher: DataFetcher) -> None:
        self._fetcher = fetcher

    async def verify(self, proof: Proof, location: str) -> bool:
        """
        Download the data and compare hashes.

        Both sides are digested with the proof's algorithm; the fetched bytes
        go through the legacy SHA-1 step first.

        Args:
            proof: Proof under verification
            location: Resolved data location

        Returns:
            True if the data matches the proof's data hash

        Raises:
            FetchFailedError: If the data cannot be retrieved
        """
        if proof.data_hash is None:
            logger.warning("Proof carries no data hash; data cannot be checked")
            return False

        data = await self._fetcher.fetch(location)

        expected = digest(proof.hash_algorithm, proof.data_hash)
        actual = data_digest(proof.hash_algorithm, data)

        if expected != actual:
            logger.info(
                "Data hash mismatch",
                location=location,
                expected=expected[:16] + "...",
                actual=actual[:16] + "...",
            )
        return expected == actual
