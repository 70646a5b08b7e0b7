"""
Anchor Proof Verifier - Hash Engine

Computes hex digests under a named hashlib family.

Data hashes keep the legacy two-step shape: the raw payload is digested with
SHA-1 first and the resulting hex string is digested again with the proof's
configured algorithm. Proofs issued before the algorithm became configurable
rely on this shape.
"""

import hashlib

from proofcheck.core.errors import UnsupportedAlgorithmError

DEFAULT_ALGORITHM = "sha256"
LEGACY_ALGORITHM = "sha1"

# Extendable-output functions need an explicit length and cannot back a proof
_VARIABLE_LENGTH = frozenset({"shake_128", "shake_256"})


def _build_aliases() -> dict[str, str]:
    """Map separator-free names (e.g. sha3256) to hashlib constructor names."""
    aliases: dict[str, str] = {}
    for name in hashlib.algorithms_available:
        lowered = name.lower()
        if lowered in _VARIABLE_LENGTH:
            continue
        compact = lowered.replace("-", "")
        aliases[compact] = lowered
        aliases.setdefault(compact.replace("_", ""), lowered)
    return aliases


_ALIASES = _build_aliases()


def normalize_algorithm(algorithm: str | None) -> str:
    """
    Normalize an algorithm identifier.

    Lower-cases and strips hyphen separators, so "SHA-256" and "sha256"
    are equivalent. An absent identifier selects the default family.
    """
    if not algorithm:
        return DEFAULT_ALGORITHM
    return algorithm.strip().lower().replace("-", "")


def is_supported(algorithm: str | None) -> bool:
    """Check whether an algorithm identifier resolves to a digest family."""
    return normalize_algorithm(algorithm) in _ALIASES


def _new_hasher(algorithm: str | None):
    normalized = normalize_algorithm(algorithm)
    name = _ALIASES.get(normalized)
    if name is None:
        raise UnsupportedAlgorithmError(algorithm or normalized)
    return hashlib.new(name)


def digest(algorithm: str | None, data: bytes | str) -> str:
    """
    Compute the hex digest of data.

    Args:
        algorithm: Digest family identifier (normalized before use)
        data: Bytes, or text which is UTF-8 encoded

    Returns:
        Lower-case hex digest

    Raises:
        UnsupportedAlgorithmError: If the family is unknown
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    hasher = _new_hasher(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


def legacy_digest(data: bytes | str) -> str:
    """Compute the SHA-1 hex digest used by legacy data hashes."""
    return digest(LEGACY_ALGORITHM, data)


def data_digest(algorithm: str | None, data: bytes | str) -> str:
    """
    Compute a data hash with the legacy double-hash rule.

    Args:
        algorithm: The proof's configured digest family
        data: Raw payload

    Returns:
        digest(algorithm, legacy_digest(data))
    """
    return digest(algorithm, legacy_digest(data))
