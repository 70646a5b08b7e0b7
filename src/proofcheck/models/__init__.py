"""
Anchor Proof Verifier - Proof Models
"""

from proofcheck.models.proof import (
    DigestLeaf,
    Leaf,
    Proof,
    RawDataLeaf,
    load_proof,
    normalize_leaves,
    parse_proof_document,
)

__all__ = [
    "DigestLeaf",
    "Leaf",
    "Proof",
    "RawDataLeaf",
    "load_proof",
    "normalize_leaves",
    "parse_proof_document",
]
