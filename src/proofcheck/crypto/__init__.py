"""
Anchor Proof Verifier - Cryptographic Utilities

Provides digest computation, Merkle root recomputation and inclusion proof
verification.
"""

from proofcheck.crypto.hashing import (
    data_digest,
    digest,
    legacy_digest,
    normalize_algorithm,
)
from proofcheck.crypto.merkle import (
    MerkleProof,
    MerkleTree,
    ProofDirection,
    ProofStep,
    compute_merkle_root,
    compute_parent_hash,
    verify_proof_against_root,
)

__all__ = [
    "data_digest",
    "digest",
    "legacy_digest",
    "normalize_algorithm",
    "MerkleProof",
    "MerkleTree",
    "ProofDirection",
    "ProofStep",
    "compute_merkle_root",
    "compute_parent_hash",
    "verify_proof_against_root",
]
