"""
Append-only commitment accumulator (LeanIMT).

Leaves are identity commitments. The tree grows one level whenever the leaf
count passes a power of two, internal nodes are ``poseidon2(left, right)``,
and a node without a right sibling is carried to the next level unhashed.
Proofs therefore only contain the siblings that exist, and circuits receive
them padded to a fixed depth together with the real ``leaf_depth``.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from ..errors import LeafNotFound, ValidationError
from .field import FIELD_MODULUS
from .poseidon import poseidon2

logger = logging.getLogger(__name__)

# Fills sibling slots past leaf_depth so they never collide with a real zero sibling.
PROOF_PADDING_SENTINEL = FIELD_MODULUS - 1

HashFunction = Callable[[int, int], int]


@dataclass(frozen=True)
class LeanIMTProof:
    """Inclusion proof holding only the siblings that exist."""

    root: int
    leaf: int
    index: int
    siblings: List[int]

    def verify(self, hash_fn: HashFunction = poseidon2) -> bool:
        """Verify that this proof is valid."""
        node = self.leaf
        for i, sibling in enumerate(self.siblings):
            if (self.index >> i) & 1:
                node = hash_fn(sibling, node)
            else:
                node = hash_fn(node, sibling)
        return node == self.root


@dataclass(frozen=True)
class MerkleProof:
    """Circuit-shaped inclusion proof padded to a fixed depth."""

    root: int
    siblings: List[int]
    path: List[int]
    leaf_depth: int

    def verify(self, leaf: int, hash_fn: HashFunction = poseidon2) -> bool:
        """Recompute the root from ``leaf`` using the first ``leaf_depth`` levels."""
        if not 0 <= self.leaf_depth <= len(self.siblings):
            return False
        if any(s != PROOF_PADDING_SENTINEL for s in self.siblings[self.leaf_depth :]):
            return False
        node = leaf
        for i in range(self.leaf_depth):
            if self.path[i]:
                node = hash_fn(self.siblings[i], node)
            else:
                node = hash_fn(node, self.siblings[i])
        return node == self.root


class LeanIMT:
    """
    Lean incremental Merkle tree.

    Inserts are serialized with a lock: leaf index assignment and root
    recomputation must not interleave.
    """

    def __init__(
        self, leaves: Optional[Iterable[int]] = None, hash_fn: HashFunction = poseidon2
    ):
        self._hash = hash_fn
        self._nodes: List[List[int]] = [[]]
        self._lock = threading.RLock()
        if leaves:
            self.insert_many(leaves)

    @property
    def root(self) -> int:
        """Current root; 0 for an empty tree."""
        with self._lock:
            top = self._nodes[-1]
            return top[0] if top else 0

    @property
    def depth(self) -> int:
        return len(self._nodes) - 1

    @property
    def size(self) -> int:
        return len(self._nodes[0])

    @property
    def leaves(self) -> List[int]:
        return list(self._nodes[0])

    def insert(self, leaf: int) -> int:
        """
        Append a leaf and update the path to the root.

        Returns:
            The index assigned to the leaf

        Raises:
            ValidationError: If the leaf is not a non-zero field element
        """
        if not 0 < leaf < FIELD_MODULUS:
            raise ValidationError(
                "Leaf must be a non-zero field element",
                field="leaf",
                value=leaf,
                expected=f"0 < leaf < {FIELD_MODULUS}",
            )
        with self._lock:
            index = self.size
            if (1 << self.depth) < index + 1:
                self._nodes.append([])

            node = leaf
            position = index
            for level in range(self.depth):
                self._set_node(level, position, node)
                if position & 1:
                    node = self._hash(self._nodes[level][position - 1], node)
                position >>= 1
            self._nodes[self.depth] = [node]

            logger.debug("inserted leaf at index %d, depth %d", index, self.depth)
            return index

    def insert_many(self, leaves: Iterable[int]) -> None:
        with self._lock:
            for leaf in leaves:
                self.insert(leaf)

    def _set_node(self, level: int, position: int, node: int) -> None:
        row = self._nodes[level]
        if position < len(row):
            row[position] = node
        else:
            row.append(node)

    def has(self, leaf: int) -> bool:
        return leaf in self._nodes[0]

    def index_of(self, leaf: int) -> int:
        """Position of ``leaf``; raises LeafNotFound if it was never inserted."""
        try:
            return self._nodes[0].index(leaf)
        except ValueError:
            raise LeafNotFound(leaf) from None

    def generate_proof(self, index: int) -> LeanIMTProof:
        """Collect the existing siblings from ``index`` up to the root."""
        with self._lock:
            if not 0 <= index < self.size:
                raise ValidationError(
                    f"Leaf index {index} out of range for tree of size {self.size}",
                    field="index",
                    value=index,
                    expected=f"0..{self.size - 1}",
                )
            leaf = self._nodes[0][index]
            siblings: List[int] = []
            path_index = 0
            position = index
            for level in range(self.depth):
                is_right = position & 1
                sibling_position = position - 1 if is_right else position + 1
                row = self._nodes[level]
                if sibling_position < len(row):
                    path_index |= is_right << len(siblings)
                    siblings.append(row[sibling_position])
                position >>= 1
            return LeanIMTProof(self.root, leaf, path_index, siblings)

    def verify_proof(self, proof: LeanIMTProof) -> bool:
        """Verify a proof against this tree's current root."""
        return proof.root == self.root and proof.verify(self._hash)

    def prove_inclusion(self, index: int, target_depth: int) -> MerkleProof:
        """
        Circuit proof padded to ``target_depth`` levels.

        Args:
            index: Leaf position
            target_depth: Number of sibling slots the circuit expects

        Returns:
            MerkleProof whose slots past ``leaf_depth`` hold PROOF_PADDING_SENTINEL
        """
        proof = self.generate_proof(index)
        leaf_depth = len(proof.siblings)
        if leaf_depth > target_depth:
            raise ValidationError(
                f"Proof depth {leaf_depth} exceeds circuit depth {target_depth}",
                field="target_depth",
                value=target_depth,
                expected=f">= {leaf_depth}",
            )
        padding = target_depth - leaf_depth
        return MerkleProof(
            root=proof.root,
            siblings=proof.siblings + [PROOF_PADDING_SENTINEL] * padding,
            path=[(proof.index >> i) & 1 for i in range(target_depth)],
            leaf_depth=leaf_depth,
        )

    def export(self) -> str:
        """Serialize all levels as JSON (decimal strings)."""
        with self._lock:
            return json.dumps([[str(n) for n in row] for row in self._nodes])

    @classmethod
    def import_(cls, data: str, hash_fn: HashFunction = poseidon2) -> "LeanIMT":
        """Rebuild a tree from ``export`` output without rehashing."""
        rows = json.loads(data)
        tree = cls(hash_fn=hash_fn)
        tree._nodes = [[int(n) for n in row] for row in rows] or [[]]
        return tree

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"LeanIMT(size={self.size}, depth={self.depth})"
