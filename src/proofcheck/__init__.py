"""
Anchor Proof Verifier

Re-derives every claim of a blockchain-anchored Merkle proof of existence.
"""

__version__ = "1.0.0"
