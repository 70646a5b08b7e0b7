"""
Anchor Proof Verifier - Merkle Tree Recomputation

Rebuilds Merkle trees from ordered leaf digests and walks inclusion proofs.

Conventions (Chainpoint-style binary concatenation):
- Leaf digests are used verbatim as leaf nodes; input order is tree order
- An internal node is H(bytes(left) || bytes(right)) under the proof's algorithm
- For odd numbers of nodes, the last node is promoted (not duplicated)
- A single-leaf tree's root is the leaf itself
- An empty tree's root is H(b"")
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from proofcheck.crypto.hashing import DEFAULT_ALGORITHM, digest


class ProofDirection(str, Enum):
    """Side on which the sibling digest sits at a proof step."""

    LEFT = "L"
    RIGHT = "R"


@dataclass(frozen=True)
class ProofStep:
    """
    Single step of an inclusion proof.

    Attributes:
        hash: The sibling digest at this level
        direction: Whether the sibling is LEFT or RIGHT of the running hash
    """

    hash: str
    direction: ProofDirection

    def to_dict(self) -> dict[str, str]:
        """Serialize to the {"left": h} / {"right": h} document form."""
        key = "left" if self.direction == ProofDirection.LEFT else "right"
        return {key: self.hash}


@dataclass(frozen=True)
class MerkleProof:
    """
    Inclusion proof for one leaf of a recomputed tree.

    Attributes:
        leaf_hash: Digest of the leaf being proven
        leaf_index: Position of the leaf in the tree
        steps: Sibling digests from leaf to root
        root_hash: Root of the tree the proof was derived from
    """

    leaf_hash: str
    leaf_index: int
    steps: tuple[ProofStep, ...]
    root_hash: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize proof to the target section of a proof document."""
        return {
            "target_hash": self.leaf_hash,
            "target_proof": [step.to_dict() for step in self.steps],
        }


def _same_digest(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def compute_parent_hash(
    left_hash: str,
    right_hash: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Compute the digest of an internal node.

    Args:
        left_hash: Digest of left child (hex string)
        right_hash: Digest of right child (hex string)
        algorithm: Digest family

    Returns:
        Hex digest of the concatenated binary children

    Raises:
        ValueError: If a child is not valid hex
    """
    return digest(algorithm, bytes.fromhex(left_hash) + bytes.fromhex(right_hash))


class MerkleTree:
    """
    Merkle tree rebuilt from ordered leaf digests.

    Example:
        >>> tree = MerkleTree.from_hashes(["aa" * 32, "bb" * 32, "cc" * 32])
        >>> proof = tree.get_proof(2)
        >>> verify_proof_against_root(proof.leaf_hash, tree.root_hash, proof.steps)
        True
    """

    def __init__(self, levels: list[list[str]], leaf_count: int, algorithm: str) -> None:
        """
        Initialize Merkle tree (internal use).

        Use from_hashes() to construct trees.
        """
        self._levels = levels
        self._leaf_count = leaf_count
        self._algorithm = algorithm

    @classmethod
    def from_hashes(
        cls,
        hashes: list[str],
        algorithm: str = DEFAULT_ALGORITHM,
    ) -> "MerkleTree":
        """
        Construct a Merkle tree using hashes directly as leaf nodes.

        Args:
            hashes: Hex-encoded leaf digests, in tree order
            algorithm: Digest family for internal nodes

        Returns:
            Constructed MerkleTree

        Raises:
            ValueError: If a digest is not valid hex
        """
        if not hashes:
            return cls([[digest(algorithm, b"")]], 0, algorithm)

        current_level = [h.lower() for h in hashes]
        levels = [current_level]

        while len(current_level) > 1:
            next_level = []

            i = 0
            while i < len(current_level):
                if i + 1 < len(current_level):
                    next_level.append(
                        compute_parent_hash(
                            current_level[i],
                            current_level[i + 1],
                            algorithm,
                        )
                    )
                    i += 2
                else:
                    # Odd case: promote the last node
                    next_level.append(current_level[i])
                    i += 1

            levels.append(next_level)
            current_level = next_level

        return cls(levels, len(hashes), algorithm)

    @property
    def root_hash(self) -> str:
        """Get the root hash (Merkle root)."""
        return self._levels[-1][0]

    @property
    def leaf_count(self) -> int:
        """Get the number of leaves."""
        return self._leaf_count

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def get_proof(self, leaf_index: int) -> MerkleProof:
        """
        Derive the inclusion proof for a leaf.

        Args:
            leaf_index: Index of the leaf to prove

        Returns:
            MerkleProof for the leaf

        Raises:
            IndexError: If leaf_index out of bounds
        """
        if leaf_index < 0 or leaf_index >= self._leaf_count:
            raise IndexError(f"Leaf index {leaf_index} out of bounds")

        steps = []
        index = leaf_index

        for level in self._levels[:-1]:
            if index % 2 == 0:
                if index + 1 < len(level):
                    steps.append(ProofStep(hash=level[index + 1], direction=ProofDirection.RIGHT))
                # else promoted: no step at this level
            else:
                steps.append(ProofStep(hash=level[index - 1], direction=ProofDirection.LEFT))
            index //= 2

        return MerkleProof(
            leaf_hash=self._levels[0][leaf_index],
            leaf_index=leaf_index,
            steps=tuple(steps),
            root_hash=self.root_hash,
        )


def compute_merkle_root(hashes: list[str], algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Compute the root of the tree built from leaf digests.

    Args:
        hashes: Hex-encoded leaf digests, in tree order
        algorithm: Digest family

    Returns:
        Root digest; the leaf itself for one leaf, H(b"") for none
    """
    return MerkleTree.from_hashes(hashes, algorithm).root_hash


def verify_merkle_root(
    hashes: list[str],
    expected_root: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> bool:
    """
    Check that the leaf digests rebuild to the expected root.

    Leaves that are not valid hex cannot belong to the tree and yield False.
    """
    try:
        root = compute_merkle_root(hashes, algorithm)
    except ValueError:
        return False
    return _same_digest(root, expected_root)


def compute_root_from_proof(
    leaf_hash: str,
    steps: list[ProofStep] | tuple[ProofStep, ...],
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Compute the root hash from a leaf and proof steps.

    Args:
        leaf_hash: Digest the walk starts from
        steps: Ordered proof steps
        algorithm: Digest family

    Returns:
        Computed root hash

    Raises:
        ValueError: If a digest is not valid hex
    """
    current_hash = leaf_hash

    for step in steps:
        if step.direction == ProofDirection.LEFT:
            current_hash = compute_parent_hash(step.hash, current_hash, algorithm)
        else:
            current_hash = compute_parent_hash(current_hash, step.hash, algorithm)

    return current_hash


def verify_proof_against_root(
    leaf_hash: str,
    expected_root: str,
    steps: list[ProofStep] | tuple[ProofStep, ...],
    algorithm: str = DEFAULT_ALGORITHM,
) -> bool:
    """
    Verify an inclusion proof against a specific root hash.

    With no steps (empty branch) the leaf must equal the root.

    Args:
        leaf_hash: Target digest
        expected_root: Claimed Merkle root
        steps: Ordered proof steps
        algorithm: Digest family

    Returns:
        True if the steps reconstruct the expected root
    """
    if not steps:
        return _same_digest(leaf_hash, expected_root)

    try:
        computed = compute_root_from_proof(leaf_hash, steps, algorithm)
    except ValueError:
        return False

    return _same_digest(computed, expected_root)
