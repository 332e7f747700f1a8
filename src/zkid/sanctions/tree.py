"""
Sanctions screening trees.

Each document scheme screens against two sparse Merkle trees built from the
same sanctions list: one keyed by name and full date of birth, one by name and
year of birth. Trees are built in bulk and are read-only afterwards.
"""

import json
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional

from ..crypto.smt import SMTProof, SparseMerkleTree
from ..documents.schemes import DocumentScheme
from ..errors import InvalidProofLevel, ValidationError
from .leaves import DEFAULT_KEY_BITS, SanctionsEntry, name_dob_key, name_yob_key

logger = logging.getLogger(__name__)

OFAC_TREE_LEVELS = 64


class ProofLevel(IntEnum):
    """Granularity of a sanctions proof."""

    NAME_YOB = 1
    NAME_DOB = 2


def parse_proof_level(level: Any) -> ProofLevel:
    """Accept 1 or 2; anything else raises InvalidProofLevel."""
    try:
        return ProofLevel(level)
    except (ValueError, TypeError):
        raise InvalidProofLevel(level) from None


def key_for_level(
    name: str, dob: str, level: ProofLevel, key_bits: int = DEFAULT_KEY_BITS
) -> int:
    if level is ProofLevel.NAME_DOB:
        return name_dob_key(name, dob, key_bits)
    return name_yob_key(name, dob[:4], key_bits)


@dataclass(frozen=True)
class SMTCircuitInputs:
    """Sanctions proof in the shape the disclosure circuit takes."""

    root: int
    leaf_key: int
    siblings: List[int]
    membership: bool

    def to_signals(self, prefix: str) -> Dict[str, Any]:
        return {
            f"{prefix}_leaf_key": str(self.leaf_key),
            f"{prefix}_root": str(self.root),
            f"{prefix}_siblings": [str(s) for s in self.siblings],
        }


class SanctionsTree:
    """One sparse Merkle tree at a fixed proof level."""

    def __init__(
        self,
        level: ProofLevel,
        smt: Optional[SparseMerkleTree] = None,
        levels: int = OFAC_TREE_LEVELS,
    ):
        self.level = parse_proof_level(level)
        self.smt = smt or SparseMerkleTree()
        self.levels = levels

    @property
    def root(self) -> int:
        return self.smt.root

    @classmethod
    def build(
        cls,
        entries: Iterable[SanctionsEntry],
        level: ProofLevel,
        levels: int = OFAC_TREE_LEVELS,
    ) -> "SanctionsTree":
        """
        Build a tree from sanctions entries.

        Entries lacking the date precision the level needs are skipped, as are
        duplicate keys. Keys are inserted in sorted order; the root does not
        depend on it.
        """
        level = parse_proof_level(level)
        keys = set()
        skipped = 0
        for entry in entries:
            if level is ProofLevel.NAME_DOB:
                if not entry.has_full_dob:
                    skipped += 1
                    continue
                keys.add(name_dob_key(entry.full_name, entry.dob, levels))
            else:
                if not entry.yob:
                    skipped += 1
                    continue
                keys.add(name_yob_key(entry.full_name, entry.yob, levels))

        tree = cls(level, levels=levels)
        for key in sorted(keys):
            tree.smt.add(key, 1)

        logger.info(
            "built %s sanctions tree: %d leaves, %d entries skipped",
            level.name,
            len(keys),
            skipped,
        )
        return tree

    def key_for(self, name: str, dob: str) -> int:
        return key_for_level(name, dob, self.level, self.levels)

    def prove(self, name: str, dob: str) -> SMTProof:
        return self.smt.create_proof(self.key_for(name, dob))

    def contains(self, name: str, dob: str) -> bool:
        return self.smt.has(self.key_for(name, dob))

    def circuit_inputs(self, name: str, dob: str) -> SMTCircuitInputs:
        proof = self.prove(name, dob)
        return SMTCircuitInputs(
            root=proof.root,
            leaf_key=proof.closest_leaf_key,
            siblings=proof.circuit_siblings(self.levels),
            membership=proof.membership,
        )

    def export(self) -> str:
        """JSON with the root, level and full node set."""
        payload = json.loads(self.smt.export())
        payload["level"] = int(self.level)
        return json.dumps(payload)

    @classmethod
    def import_(cls, data: str, levels: int = OFAC_TREE_LEVELS) -> "SanctionsTree":
        payload = json.loads(data)
        if "level" not in payload:
            raise ValidationError("Exported sanctions tree has no level", field="level")
        smt = SparseMerkleTree.import_(data)
        return cls(payload["level"], smt=smt, levels=levels)


@dataclass
class SanctionsTreePair:
    """The name+DOB and name+YOB trees for one scheme."""

    scheme: DocumentScheme
    name_dob: SanctionsTree
    name_yob: SanctionsTree

    def tree_for(self, level: Any) -> SanctionsTree:
        level = parse_proof_level(level)
        return self.name_dob if level is ProofLevel.NAME_DOB else self.name_yob

    def prove(self, name: str, dob: str, level: Any) -> SMTProof:
        """Membership or absence proof at level 2 (name+DOB) or 1 (name+YOB)."""
        return self.tree_for(level).prove(name, dob)

    def circuit_inputs(self, name: str, dob: str, level: Any) -> SMTCircuitInputs:
        return self.tree_for(level).circuit_inputs(name, dob)

    def roots(self) -> Dict[str, str]:
        return {
            "name_dob": str(self.name_dob.root),
            "name_yob": str(self.name_yob.root),
        }


def build_sanctions_trees(
    entries: Iterable[SanctionsEntry],
    scheme: DocumentScheme,
    levels: int = OFAC_TREE_LEVELS,
) -> SanctionsTreePair:
    """Build both screening trees for one scheme from the same list."""
    entries = list(entries)
    return SanctionsTreePair(
        scheme=scheme,
        name_dob=SanctionsTree.build(entries, ProofLevel.NAME_DOB, levels),
        name_yob=SanctionsTree.build(entries, ProofLevel.NAME_YOB, levels),
    )
