"""
Unit tests for Merkle root recomputation and inclusion proof verification.

Includes edge cases for degenerate trees and tampered proofs.
"""

import hashlib

import pytest

from proofcheck.crypto.hashing import digest
from proofcheck.crypto.merkle import (
    MerkleTree,
    ProofDirection,
    ProofStep,
    compute_merkle_root,
    compute_parent_hash,
    compute_root_from_proof,
    verify_merkle_root,
    verify_proof_against_root,
)


def leaf(name: str) -> str:
    return hashlib.sha256(name.encode()).hexdigest()


class TestParentHash:
    """Tests for internal node computation."""

    def test_binary_concatenation(self) -> None:
        """Test that children are concatenated in binary form."""
        left = "a" * 64
        right = "b" * 64

        expected = hashlib.sha256(bytes.fromhex(left) + bytes.fromhex(right)).hexdigest()
        assert compute_parent_hash(left, right) == expected

    def test_order_matters(self) -> None:
        """Test that swapping children changes the parent."""
        assert compute_parent_hash("a" * 64, "b" * 64) != compute_parent_hash("b" * 64, "a" * 64)

    def test_configured_algorithm(self) -> None:
        """Test that the parent uses the given family."""
        left, right = "aa" * 16, "bb" * 16
        expected = hashlib.sha512(bytes.fromhex(left) + bytes.fromhex(right)).hexdigest()

        assert compute_parent_hash(left, right, "SHA-512") == expected

    def test_invalid_hex_raises(self) -> None:
        """Test that non-hex children are rejected."""
        with pytest.raises(ValueError):
            compute_parent_hash("not hex", "b" * 64)


class TestMerkleTree:
    """Tests for MerkleTree construction."""

    def test_empty_tree(self) -> None:
        """Test that zero leaves still produce a root."""
        tree = MerkleTree.from_hashes([])

        assert tree.leaf_count == 0
        assert tree.root_hash == hashlib.sha256(b"").hexdigest()
        assert compute_merkle_root([]) == compute_merkle_root([])

    def test_single_leaf(self) -> None:
        """Test tree with single leaf."""
        tree = MerkleTree.from_hashes([leaf("only")])

        assert tree.leaf_count == 1
        assert tree.root_hash == leaf("only")
        assert compute_merkle_root([leaf("only")]) == compute_merkle_root([leaf("only")])

    def test_two_leaves(self) -> None:
        """Test tree with two leaves."""
        tree = MerkleTree.from_hashes([leaf("a"), leaf("b")])

        assert tree.root_hash == compute_parent_hash(leaf("a"), leaf("b"))

    def test_four_leaves(self) -> None:
        """Test tree with four leaves (perfect binary tree)."""
        hashes = [leaf(c) for c in "abcd"]
        tree = MerkleTree.from_hashes(hashes)

        h01 = compute_parent_hash(hashes[0], hashes[1])
        h23 = compute_parent_hash(hashes[2], hashes[3])
        assert tree.root_hash == compute_parent_hash(h01, h23)

    def test_three_leaves_odd(self) -> None:
        """Test that the odd node is promoted, not duplicated."""
        hashes = [leaf(c) for c in "abc"]
        tree = MerkleTree.from_hashes(hashes)

        h01 = compute_parent_hash(hashes[0], hashes[1])
        assert tree.root_hash == compute_parent_hash(h01, hashes[2])

    def test_five_leaves_odd(self) -> None:
        """Test promotion across two levels."""
        hashes = [leaf(c) for c in "abcde"]
        tree = MerkleTree.from_hashes(hashes)

        h01 = compute_parent_hash(hashes[0], hashes[1])
        h23 = compute_parent_hash(hashes[2], hashes[3])
        h0123 = compute_parent_hash(h01, h23)
        assert tree.root_hash == compute_parent_hash(h0123, hashes[4])

    def test_input_order_is_tree_order(self) -> None:
        """Test that leaves are not sorted."""
        tree1 = MerkleTree.from_hashes([leaf("a"), leaf("b")])
        tree2 = MerkleTree.from_hashes([leaf("b"), leaf("a")])

        assert tree1.root_hash != tree2.root_hash

    def test_deterministic_root(self) -> None:
        """Test that same leaves produce same root."""
        hashes = [leaf(c) for c in "abcdefg"]

        assert compute_merkle_root(hashes) == compute_merkle_root(list(hashes))

    def test_root_is_lower_case(self) -> None:
        """Test that upper-case leaf digests do not change the root."""
        hashes = [leaf("a"), leaf("b")]

        assert compute_merkle_root([h.upper() for h in hashes]) == compute_merkle_root(hashes)


class TestVerifyMerkleRoot:
    """Tests for target hash recomputation."""

    def test_matching_root(self) -> None:
        """Test that the true root verifies."""
        hashes = [leaf(c) for c in "abc"]
        assert verify_merkle_root(hashes, compute_merkle_root(hashes))

    def test_case_insensitive(self) -> None:
        """Test that digest comparison ignores case."""
        hashes = [leaf(c) for c in "abc"]
        assert verify_merkle_root(hashes, compute_merkle_root(hashes).upper())

    def test_wrong_root(self) -> None:
        """Test that another root fails."""
        assert not verify_merkle_root([leaf("a"), leaf("b")], "0" * 64)

    def test_invalid_leaf_is_false(self) -> None:
        """Test that non-hex leaves yield False instead of raising."""
        assert not verify_merkle_root(["zz", leaf("b")], "0" * 64)


class TestProofGeneration:
    """Tests for proof derivation."""

    def test_proof_single_leaf(self) -> None:
        """Test proof for single leaf tree."""
        tree = MerkleTree.from_hashes([leaf("only")])
        proof = tree.get_proof(0)

        assert proof.leaf_hash == leaf("only")
        assert proof.steps == ()
        assert proof.root_hash == tree.root_hash

    def test_proof_two_leaves(self) -> None:
        """Test proof generation for two-leaf tree."""
        tree = MerkleTree.from_hashes([leaf("a"), leaf("b")])

        proof0 = tree.get_proof(0)
        assert proof0.steps == (ProofStep(hash=leaf("b"), direction=ProofDirection.RIGHT),)

        proof1 = tree.get_proof(1)
        assert proof1.steps == (ProofStep(hash=leaf("a"), direction=ProofDirection.LEFT),)

    def test_proof_promoted_leaf(self) -> None:
        """Test that a promoted leaf skips the level it was promoted on."""
        tree = MerkleTree.from_hashes([leaf(c) for c in "abc"])
        proof = tree.get_proof(2)

        assert len(proof.steps) == 1
        assert proof.steps[0].direction == ProofDirection.LEFT

    def test_proof_out_of_bounds(self) -> None:
        """Test that out-of-bounds proof request raises."""
        tree = MerkleTree.from_hashes([leaf("a"), leaf("b")])

        with pytest.raises(IndexError):
            tree.get_proof(5)

        with pytest.raises(IndexError):
            tree.get_proof(-1)

    def test_proof_empty_tree(self) -> None:
        """Test that an empty tree has no provable leaves."""
        with pytest.raises(IndexError):
            MerkleTree.from_hashes([]).get_proof(0)


class TestProofVerification:
    """Tests for inclusion proof verification."""

    def test_empty_branch_equal(self) -> None:
        """Test that no steps verify when target equals root."""
        assert verify_proof_against_root(leaf("a"), leaf("a"), [])

    def test_empty_branch_different(self) -> None:
        """Test that no steps fail when target differs from root."""
        assert not verify_proof_against_root(leaf("a"), leaf("b"), [])

    def test_empty_branch_ignores_hex_case(self) -> None:
        """Test that an upper-case spelling of the root still matches."""
        assert verify_proof_against_root(leaf("a"), leaf("a").upper(), [])
        assert verify_proof_against_root(leaf("a").upper(), leaf("a"), [])

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 7, 8, 11, 16])
    def test_generated_proofs_verify(self, count: int) -> None:
        """Test that every derived proof verifies against the true root."""
        hashes = [leaf(f"leaf{i}") for i in range(count)]
        tree = MerkleTree.from_hashes(hashes)

        for i in range(count):
            proof = tree.get_proof(i)
            assert verify_proof_against_root(proof.leaf_hash, tree.root_hash, proof.steps), (
                f"Proof failed for leaf {i} in {count}-leaf tree"
            )

    @pytest.mark.parametrize("count", [2, 3, 6, 9])
    def test_generated_proofs_reject_other_roots(self, count: int) -> None:
        """Test that derived proofs fail against any other root."""
        hashes = [leaf(f"leaf{i}") for i in range(count)]
        tree = MerkleTree.from_hashes(hashes)
        other_root = MerkleTree.from_hashes(hashes[::-1]).root_hash

        for i in range(count):
            proof = tree.get_proof(i)
            assert not verify_proof_against_root(proof.leaf_hash, other_root, proof.steps)
            assert not verify_proof_against_root(proof.leaf_hash, "0" * 64, proof.steps)

    def test_verify_large_tree(self) -> None:
        """Test verification for larger tree."""
        hashes = [leaf(f"data{i}") for i in range(100)]
        tree = MerkleTree.from_hashes(hashes)

        for i in [0, 25, 50, 75, 99]:
            proof = tree.get_proof(i)
            assert verify_proof_against_root(proof.leaf_hash, tree.root_hash, proof.steps)

    def test_tampered_leaf_fails(self) -> None:
        """Test that a tampered target hash fails verification."""
        tree = MerkleTree.from_hashes([leaf(c) for c in "abcd"])
        proof = tree.get_proof(0)

        assert not verify_proof_against_root("0" * 64, tree.root_hash, proof.steps)

    def test_tampered_step_fails(self) -> None:
        """Test that a tampered sibling fails verification."""
        tree = MerkleTree.from_hashes([leaf(c) for c in "abcd"])
        proof = tree.get_proof(0)

        tampered = (ProofStep(hash="0" * 64, direction=proof.steps[0].direction),) + proof.steps[1:]
        assert not verify_proof_against_root(proof.leaf_hash, tree.root_hash, tampered)

    def test_flipped_direction_fails(self) -> None:
        """Test that orientation is part of the proof."""
        tree = MerkleTree.from_hashes([leaf("a"), leaf("b")])
        proof = tree.get_proof(0)

        flipped = (ProofStep(hash=proof.steps[0].hash, direction=ProofDirection.LEFT),)
        assert not verify_proof_against_root(proof.leaf_hash, tree.root_hash, flipped)

    def test_malformed_step_is_false(self) -> None:
        """Test that a non-hex sibling yields False instead of raising."""
        steps = [ProofStep(hash="not-hex", direction=ProofDirection.RIGHT)]
        assert not verify_proof_against_root(leaf("a"), leaf("b"), steps)

    def test_compute_root_from_proof(self) -> None:
        """Test computing root from proof."""
        tree = MerkleTree.from_hashes([leaf(c) for c in "abcd"])
        proof = tree.get_proof(2)

        assert compute_root_from_proof(proof.leaf_hash, proof.steps) == tree.root_hash

    def test_configured_algorithm(self) -> None:
        """Test trees and proofs under a non-default family."""
        hashes = [digest("sha512", c) for c in "abc"]
        tree = MerkleTree.from_hashes(hashes, "sha512")
        proof = tree.get_proof(1)

        assert verify_proof_against_root(proof.leaf_hash, tree.root_hash, proof.steps, "sha512")
        assert not verify_proof_against_root(proof.leaf_hash, tree.root_hash, proof.steps, "sha256")


class TestProofStep:
    """Tests for ProofStep serialization."""

    def test_to_dict(self) -> None:
        """Test document form."""
        assert ProofStep(hash="a" * 64, direction=ProofDirection.LEFT).to_dict() == {"left": "a" * 64}
        assert ProofStep(hash="b" * 64, direction=ProofDirection.RIGHT).to_dict() == {"right": "b" * 64}

