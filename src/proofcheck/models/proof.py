"""
Anchor Proof Verifier - Proof Model

Immutable proof entity and the parser for the document it is loaded from.

Document layout:
    {
      "header": {"hash_type", "merkle_root", "tx_id", "timestamp"},
      "target": {"target_hash", "target_proof"},
      "extras": {"leaves", "dataUrl"}
    }

The document may be wrapped as {"proof": {...}}.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from proofcheck.core.errors import MalformedProofError, UnsupportedAlgorithmError
from proofcheck.crypto.hashing import digest, is_supported, normalize_algorithm
from proofcheck.crypto.merkle import ProofDirection, ProofStep


@dataclass(frozen=True)
class RawDataLeaf:
    """Leaf carrying a payload that is hashed to obtain the leaf digest."""

    payload: bytes

    @property
    def text(self) -> str:
        return self.payload.decode("utf-8")


@dataclass(frozen=True)
class DigestLeaf:
    """Leaf given as a pre-computed hex digest."""

    digest: str


Leaf = Union[RawDataLeaf, DigestLeaf]


def normalize_leaf(leaf: Leaf, algorithm: str) -> str:
    """Resolve a leaf to its digest (no legacy double hash)."""
    if isinstance(leaf, DigestLeaf):
        return leaf.digest
    return digest(algorithm, leaf.payload)


def normalize_leaves(leaves: tuple[Leaf, ...] | list[Leaf], algorithm: str) -> list[str]:
    """Resolve leaves to digests, preserving order."""
    return [normalize_leaf(leaf, algorithm) for leaf in leaves]


@dataclass(frozen=True)
class Proof:
    """
    Proof of existence under verification.

    Every field is a hypothesis to be re-derived, never trusted as-is.

    Attributes:
        merkle_root: Root claimed to be anchored on-chain
        transaction_id: Identifier of the anchoring transaction
        target_hash: Digest the inclusion proof must resolve to
        target_proof: Ordered sibling steps from target hash to root
        leaves: Ordered leaves of the tree the target hash commits to
        hash_algorithm: Normalized digest family
        data_location: Explicit location of the original data, if any
        timestamp: Anchoring time claimed by the issuer, if any
    """

    merkle_root: str
    transaction_id: str
    target_hash: str
    target_proof: tuple[ProofStep, ...] = ()
    leaves: tuple[Leaf, ...] = ()
    hash_algorithm: str = "sha256"
    data_location: str | None = None
    timestamp: int | str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash_algorithm", normalize_algorithm(self.hash_algorithm))
        if not is_supported(self.hash_algorithm):
            raise UnsupportedAlgorithmError(self.hash_algorithm)
        object.__setattr__(self, "target_proof", tuple(self.target_proof))
        object.__setattr__(self, "leaves", tuple(self.leaves))

    @property
    def data_hash(self) -> str | None:
        """
        Canonical data hash carried by the first leaf.

        By convention the first leaf's payload is the legacy (SHA-1) hash of
        the original data. A digest leaf carries the hash directly. A raw
        payload that is not UTF-8 text cannot be a hex hash, so it carries none.
        """
        if not self.leaves:
            return None
        first = self.leaves[0]
        if isinstance(first, DigestLeaf):
            return first.digest
        try:
            return first.text
        except UnicodeDecodeError:
            return None

    def leaf_hashes(self) -> list[str]:
        """Leaf digests under the proof's algorithm, in tree order."""
        return normalize_leaves(self.leaves, self.hash_algorithm)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Proof":
        """
        Parse a proof document.

        Raises:
            MalformedProofError: If a required field is missing or invalid
        """
        return parse_proof_document(document)


# Document models

class _ProofHeader(BaseModel):
    model_config = ConfigDict(extra="ignore")

    hash_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("hash_type", "hashAlgorithm", "hash_algorithm"),
    )
    merkle_root: str = Field(
        validation_alias=AliasChoices("merkle_root", "merkleRoot"),
        min_length=1,
    )
    tx_id: str = Field(
        validation_alias=AliasChoices("tx_id", "transactionId", "transaction_id"),
        min_length=1,
    )
    timestamp: int | str | None = None


class _ProofTarget(BaseModel):
    model_config = ConfigDict(extra="ignore")

    target_hash: str = Field(
        validation_alias=AliasChoices("target_hash", "targetHash"),
        min_length=1,
    )
    target_proof: list[dict[str, str]] | None = Field(
        default=None,
        validation_alias=AliasChoices("target_proof", "targetProofSteps", "target_proof_steps"),
    )


class _RawLeaf(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: str


class _ProofExtras(BaseModel):
    model_config = ConfigDict(extra="ignore")

    leaves: list[Union[str, _RawLeaf]] = Field(default_factory=list)
    data_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("dataUrl", "data_url", "dataLocation", "data_location"),
    )


class _ProofDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    header: _ProofHeader
    target: _ProofTarget
    extras: _ProofExtras = Field(default_factory=_ProofExtras)


def _parse_steps(target_hash: str, raw_steps: list[dict[str, str]]) -> tuple[ProofStep, ...]:
    """
    Convert document proof steps into sibling/orientation steps.

    Accepts {"left": h} / {"right": h} steps and Chainpoint 1.x
    {"parent", "left", "right"} triplets. A triplet's orientation is found by
    locating the running hash in it; the declared parent becomes the running
    hash for the next step. A triplet that does not contain the running hash
    cannot verify, so it is kept with the right-hand sibling and left to fail.
    """
    steps = []
    current = target_hash.lower()

    for index, raw in enumerate(raw_steps):
        keys = set(raw)
        if "parent" in keys:
            if not {"left", "right"} <= keys:
                raise MalformedProofError(f"Proof step {index} is missing left or right")
            left, right = raw["left"].lower(), raw["right"].lower()
            if right == current and left != current:
                steps.append(ProofStep(hash=raw["left"], direction=ProofDirection.LEFT))
            else:
                steps.append(ProofStep(hash=raw["right"], direction=ProofDirection.RIGHT))
            current = raw["parent"].lower()
        elif keys == {"left"}:
            steps.append(ProofStep(hash=raw["left"], direction=ProofDirection.LEFT))
        elif keys == {"right"}:
            steps.append(ProofStep(hash=raw["right"], direction=ProofDirection.RIGHT))
        else:
            raise MalformedProofError(
                f"Proof step {index} must have exactly one of 'left' or 'right'"
            )

    return tuple(steps)


def parse_proof_document(document: dict[str, Any]) -> Proof:
    """
    Build a Proof from a (possibly wrapped) proof document.

    Args:
        document: Decoded JSON proof document

    Returns:
        Immutable Proof

    Raises:
        MalformedProofError: If a required field is missing or invalid
        UnsupportedAlgorithmError: If hash_type names an unknown digest family
    """
    if not isinstance(document, dict):
        raise MalformedProofError("Proof document must be a JSON object")

    if isinstance(document.get("proof"), dict):
        document = document["proof"]

    try:
        parsed = _ProofDocument.model_validate(document)
    except ValidationError as e:
        raise MalformedProofError(f"Invalid proof document: {e}") from e

    leaves: list[Leaf] = []
    for raw_leaf in parsed.extras.leaves:
        if isinstance(raw_leaf, str):
            leaves.append(DigestLeaf(digest=raw_leaf))
        else:
            leaves.append(RawDataLeaf(payload=raw_leaf.data.encode("utf-8")))

    return Proof(
        merkle_root=parsed.header.merkle_root,
        transaction_id=parsed.header.tx_id,
        target_hash=parsed.target.target_hash,
        target_proof=_parse_steps(
            parsed.target.target_hash,
            parsed.target.target_proof or [],
        ),
        leaves=tuple(leaves),
        hash_algorithm=normalize_algorithm(parsed.header.hash_type),
        data_location=parsed.extras.data_url or None,
        timestamp=parsed.header.timestamp,
    )


def load_proof(path: str | Path) -> Proof:
    """
    Load a proof document from a JSON file.

    Raises:
        MalformedProofError: If the file is not valid JSON or not a proof
    """
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedProofError(f"Proof file {path} is not valid JSON: {e}") from e

    return parse_proof_document(document)
