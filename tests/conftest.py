"""
Pytest configuration and shared fixtures for proof verifier tests.
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from proofcheck.crypto.hashing import digest, legacy_digest
from proofcheck.crypto.merkle import MerkleTree
from proofcheck.services.blockchain_client import TransactionRecord

SAMPLE_DATA = b"The quick brown fox jumps over the lazy dog\n"
SAMPLE_TX_ID = "b" * 63 + "1"
DATA_URL = "http://data.test/sample/file"


def build_proof_document(
    data: bytes = SAMPLE_DATA,
    hash_type: str = "sha256",
    data_url: str | None = DATA_URL,
) -> dict[str, Any]:
    """
    Build a mutually consistent proof document for data.

    The data's SHA-1 hash is the first leaf of a three-leaf tree whose root
    is the target hash; the target hash is in turn the second leaf of an
    upper tree whose root is the anchored Merkle root.
    """
    leaves = [
        {"data": legacy_digest(data)},
        {"data": "second leaf payload"},
        digest(hash_type, b"third leaf"),
    ]
    leaf_hashes = [
        digest(hash_type, leaves[0]["data"]),
        digest(hash_type, leaves[1]["data"]),
        leaves[2],
    ]
    target_hash = MerkleTree.from_hashes(leaf_hashes, hash_type).root_hash

    upper = MerkleTree.from_hashes(
        [digest(hash_type, b"before"), target_hash, digest(hash_type, b"after")],
        hash_type,
    )
    inclusion = upper.get_proof(1)

    extras: dict[str, Any] = {"leaves": leaves}
    if data_url is not None:
        extras["dataUrl"] = data_url

    return {
        "header": {
            "chainpoint_version": "1.0",
            "hash_type": hash_type.upper(),
            "merkle_root": upper.root_hash,
            "tx_id": SAMPLE_TX_ID,
            "timestamp": 1496247832,
        },
        "target": {
            "target_hash": target_hash,
            "target_proof": [step.to_dict() for step in inclusion.steps],
        },
        "extras": extras,
    }


def anchoring_transaction(merkle_root: str, confirmations: int = 4097) -> TransactionRecord:
    """Transaction with an OP_RETURN output committing to merkle_root."""
    return TransactionRecord(
        transaction_id=SAMPLE_TX_ID,
        outputs=(
            "76a914" + "1" * 40 + "88ac",
            "6a20" + merkle_root,
        ),
        confirmations=confirmations,
        block_height=467000,
    )


@pytest.fixture
def proof_document() -> dict[str, Any]:
    """Create a fully valid proof document."""
    return build_proof_document()


@pytest.fixture
def mock_data_fetcher() -> AsyncMock:
    """Create a data fetcher serving the sample data."""
    fetcher = AsyncMock()
    fetcher.fetch = AsyncMock(return_value=SAMPLE_DATA)
    return fetcher


@pytest.fixture
def mock_transaction_fetcher(proof_document: dict[str, Any]) -> AsyncMock:
    """Create a transaction fetcher returning the anchoring transaction."""
    fetcher = AsyncMock()
    fetcher.fetch = AsyncMock(
        return_value=anchoring_transaction(proof_document["header"]["merkle_root"])
    )
    return fetcher
