"""
Cryptographic primitives for zkid.

Field arithmetic, Poseidon hashing, Baby Jubjub signatures, RSA partner
signatures and the two Merkle accumulators.
"""

from .babyjub import BASE8, GENERATOR, IDENTITY, ORDER, SUB_ORDER, Point
from .eddsa import EdDSASignature, EdDSASigner
from .field import FIELD_MODULUS, bigint_to_limbs, mod_inv, split_to_words
from .hashing import PoseidonHasher, custom_hash, pack_bytes, packed_hash
from .merkle import PROOF_PADDING_SENTINEL, LeanIMT, LeanIMTProof, MerkleProof
from .poseidon import poseidon, poseidon2, poseidon16
from .rsa import RSAKeyPair, RSASigner
from .signatures import ECDSASigner, EffectiveArgs, PrivateKey, PublicKey, Signature
from .smt import SMTProof, SparseMerkleTree

__all__ = [
    "FIELD_MODULUS",
    "mod_inv",
    "bigint_to_limbs",
    "split_to_words",
    "poseidon",
    "poseidon2",
    "poseidon16",
    "PoseidonHasher",
    "pack_bytes",
    "custom_hash",
    "packed_hash",
    "Point",
    "BASE8",
    "GENERATOR",
    "IDENTITY",
    "ORDER",
    "SUB_ORDER",
    "PrivateKey",
    "PublicKey",
    "Signature",
    "EffectiveArgs",
    "ECDSASigner",
    "EdDSASignature",
    "EdDSASigner",
    "RSAKeyPair",
    "RSASigner",
    "LeanIMT",
    "LeanIMTProof",
    "MerkleProof",
    "PROOF_PADDING_SENTINEL",
    "SparseMerkleTree",
    "SMTProof",
]
