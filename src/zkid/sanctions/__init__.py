"""Sanctions screening trees and their leaf keys."""

from .cache import SanctionsTreeCache
from .leaves import (
    SanctionsEntry,
    leaf_key,
    name_dob_key,
    name_yob_key,
    normalize_name,
)
from .tree import (
    OFAC_TREE_LEVELS,
    ProofLevel,
    SanctionsTree,
    SanctionsTreePair,
    SMTCircuitInputs,
    build_sanctions_trees,
    parse_proof_level,
)

__all__ = [
    "SanctionsEntry",
    "normalize_name",
    "leaf_key",
    "name_dob_key",
    "name_yob_key",
    "OFAC_TREE_LEVELS",
    "ProofLevel",
    "parse_proof_level",
    "SanctionsTree",
    "SanctionsTreePair",
    "SMTCircuitInputs",
    "build_sanctions_trees",
    "SanctionsTreeCache",
]
