"""
Sparse Merkle tree with Poseidon hashing.

Keys are walked least-significant bit first. A leaf sits at the shortest path
prefix that separates it from every other key, so the tree shape depends only
on the key set and never on insertion order. Leaf nodes hash as
``Poseidon(key, value, 1)``; internal nodes as ``Poseidon(left, right)``;
empty subtrees are 0.

A proof for an absent key leads either to an empty slot or to the leaf that
occupies the key's path prefix (the matching entry); callers tell membership
from absence by comparing the requested key with ``closest_leaf_key``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..errors import ValidationError
from .poseidon import poseidon, poseidon2

logger = logging.getLogger(__name__)

ZERO_NODE = 0
# Keys are field elements, so their paths never need more bits than this.
MAX_KEY_BITS = 256

Entry = Tuple[int, int]


def key_to_path(key: int, length: int = MAX_KEY_BITS) -> List[int]:
    return [(key >> i) & 1 for i in range(length)]


def hash_leaf(key: int, value: int) -> int:
    return poseidon([key, value, 1])


@dataclass(frozen=True)
class SMTProof:
    """Membership or non-membership proof; ``siblings`` run root to leaf."""

    root: int
    key: int
    siblings: List[int]
    membership: bool
    value: Optional[int] = None
    matching_entry: Optional[Entry] = None

    @property
    def closest_leaf_key(self) -> int:
        """
        Key of the leaf found on the path, or 0 for an empty slot.

        Sanctions leaf keys are never 0, so a zero here always means the slot is empty.
        """
        if self.matching_entry is not None:
            return self.matching_entry[0]
        if self.membership:
            return self.key
        return 0

    def circuit_siblings(self, levels: int) -> List[int]:
        """Siblings leaf-to-root, zero padded to ``levels``."""
        if len(self.siblings) > levels:
            raise ValidationError(
                f"Proof has {len(self.siblings)} siblings, circuit supports {levels}",
                field="siblings",
                value=len(self.siblings),
                expected=levels,
            )
        ordered = list(reversed(self.siblings))
        return ordered + [ZERO_NODE] * (levels - len(ordered))


class SparseMerkleTree:
    """Sparse Merkle tree keyed by field elements."""

    def __init__(self):
        self.root: int = ZERO_NODE
        # hash -> children: (left, right) for internal nodes, (key, value, 1) for leaves
        self.nodes: Dict[int, Tuple[int, ...]] = {}

    def _retrieve(self, key: int):
        """Walk the key's path; return (entry, matching_entry, siblings, path_nodes)."""
        path = key_to_path(key)
        siblings: List[int] = []
        path_nodes: List[int] = []
        node = self.root
        depth = 0
        while node != ZERO_NODE:
            children = self.nodes[node]
            path_nodes.append(node)
            if len(children) == 3:
                if children[0] == key:
                    return (children[0], children[1]), None, siblings, path_nodes
                return None, (children[0], children[1]), siblings, path_nodes
            direction = path[depth]
            node = children[direction]
            siblings.append(children[1 - direction])
            depth += 1
        return None, None, siblings, path_nodes

    def get(self, key: int) -> Optional[int]:
        entry, _, _, _ = self._retrieve(key)
        return entry[1] if entry else None

    def has(self, key: int) -> bool:
        return self.get(key) is not None

    def add(self, key: int, value: int = 1) -> int:
        """
        Insert a new key.

        Returns:
            The new root

        Raises:
            ValidationError: If the key is already present
        """
        entry, matching, siblings, path_nodes = self._retrieve(key)
        if entry is not None:
            raise ValidationError(
                f"Key {key} already exists", field="key", value=key
            )

        for stale in path_nodes:
            self.nodes.pop(stale, None)

        path = key_to_path(key)
        if matching is not None:
            matching_path = key_to_path(matching[0])
            i = len(siblings)
            while matching_path[i] == path[i]:
                siblings.append(ZERO_NODE)
                i += 1
            matching_node = hash_leaf(*matching)
            self.nodes[matching_node] = (matching[0], matching[1], 1)
            siblings.append(matching_node)

        node = hash_leaf(key, value)
        self.nodes[node] = (key, value, 1)
        for i in range(len(siblings) - 1, -1, -1):
            children = (siblings[i], node) if path[i] else (node, siblings[i])
            node = poseidon2(*children)
            self.nodes[node] = children
        self.root = node
        return self.root

    def create_proof(self, key: int) -> SMTProof:
        """Proof of membership, or of absence via the closest leaf."""
        entry, matching, siblings, _ = self._retrieve(key)
        return SMTProof(
            root=self.root,
            key=key,
            siblings=siblings,
            membership=entry is not None,
            value=entry[1] if entry else None,
            matching_entry=matching,
        )

    @staticmethod
    def _calculate_root(node: int, path: List[int], siblings: List[int]) -> int:
        for i in range(len(siblings) - 1, -1, -1):
            if path[i]:
                node = poseidon2(siblings[i], node)
            else:
                node = poseidon2(node, siblings[i])
        return node

    def verify_proof(self, proof: SMTProof) -> bool:
        """Check a proof against its own root; callers compare roots separately."""
        if proof.matching_entry is None:
            if proof.membership:
                node = hash_leaf(proof.key, proof.value)
            else:
                node = ZERO_NODE
            root = self._calculate_root(node, key_to_path(proof.key), proof.siblings)
            return root == proof.root

        matching_path = key_to_path(proof.matching_entry[0])
        node = hash_leaf(*proof.matching_entry)
        if self._calculate_root(node, matching_path, proof.siblings) != proof.root:
            return False
        path = key_to_path(proof.key)
        return all(path[i] == matching_path[i] for i in range(len(proof.siblings)))

    def reachable_nodes(self) -> Dict[int, Tuple[int, ...]]:
        """Nodes reachable from the current root."""
        reachable: Dict[int, Tuple[int, ...]] = {}
        stack = [self.root] if self.root != ZERO_NODE else []
        while stack:
            node = stack.pop()
            children = self.nodes[node]
            reachable[node] = children
            if len(children) == 2:
                stack.extend(c for c in children if c != ZERO_NODE)
        return reachable

    def export(self) -> str:
        """JSON with the root and every node needed to rebuild the tree."""
        nodes = [
            [str(h), [str(c) for c in children]]
            for h, children in sorted(self.reachable_nodes().items())
        ]
        return json.dumps({"root": str(self.root), "nodes": nodes})

    @classmethod
    def import_(cls, data: str) -> "SparseMerkleTree":
        """Rebuild a tree from ``export`` output without rehashing leaves."""
        payload = json.loads(data)
        tree = cls()
        tree.root = int(payload["root"])
        tree.nodes = {
            int(h): tuple(int(c) for c in children) for h, children in payload["nodes"]
        }
        if tree.root != ZERO_NODE and tree.root not in tree.nodes:
            raise ValidationError(
                "Exported tree does not contain its root node", field="root"
            )
        return tree

    def __len__(self) -> int:
        return sum(1 for c in self.reachable_nodes().values() if len(c) == 3)
