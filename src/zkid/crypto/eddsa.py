"""
EdDSA with Poseidon over Baby Jubjub.

Follows the circomlib construction: the private key is expanded with a 512-bit
hash, the first half is pruned into the signing scalar, the second half seeds
the nonce, and the challenge is ``Poseidon(R8.x, R8.y, A.x, A.y, msg)``.
BLAKE2b-512 is used as the 512-bit expansion hash.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Union

from .babyjub import BASE8, SUB_ORDER, Point, add_point, in_curve, mul_point_scalar
from .field import FIELD_MODULUS
from .hashing import BytesLike, packed_hash
from .poseidon import poseidon

logger = logging.getLogger(__name__)

PRIVATE_KEY_SIZE = 32


@dataclass(frozen=True)
class EdDSASignature:
    """EdDSA signature ``(R8, S)``."""

    R8: Point
    S: int


def _expand(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=64).digest()


def _prune(buff: bytes) -> bytes:
    pruned = bytearray(buff)
    pruned[0] &= 0xF8
    pruned[31] &= 0x7F
    pruned[31] |= 0x40
    return bytes(pruned)


def _message_to_field(message: Union[int, BytesLike]) -> int:
    if isinstance(message, int):
        return message % FIELD_MODULUS
    return packed_hash(message)


class EdDSASigner:
    """EdDSA-Poseidon signing and verification."""

    @staticmethod
    def generate_private_key() -> bytes:
        return secrets.token_bytes(PRIVATE_KEY_SIZE)

    @staticmethod
    def _signing_scalar(private_key: bytes) -> int:
        return int.from_bytes(_prune(_expand(private_key)[:32]), "little")

    @staticmethod
    def derive_public_key(private_key: bytes) -> Point:
        """``A = (s >> 3) * Base8`` for the pruned scalar ``s``."""
        if len(private_key) != PRIVATE_KEY_SIZE:
            raise ValueError("EdDSA private key must be exactly 32 bytes")
        s = EdDSASigner._signing_scalar(private_key)
        return mul_point_scalar(BASE8, s >> 3)

    @staticmethod
    def sign(private_key: bytes, message: Union[int, BytesLike]) -> EdDSASignature:
        """
        Sign a field element, or a byte buffer hashed with PackedHash.

        Args:
            private_key: 32 random bytes
            message: Field element or bytes

        Returns:
            EdDSASignature with ``S = r + Poseidon(R8, A, msg) * s mod n``
        """
        if len(private_key) != PRIVATE_KEY_SIZE:
            raise ValueError("EdDSA private key must be exactly 32 bytes")
        msg = _message_to_field(message)
        expanded = _expand(private_key)
        s = int.from_bytes(_prune(expanded[:32]), "little")
        A = mul_point_scalar(BASE8, s >> 3)

        r_buff = _expand(expanded[32:64] + msg.to_bytes(32, "little"))
        r = int.from_bytes(r_buff, "little") % SUB_ORDER
        R8 = mul_point_scalar(BASE8, r)

        hm = poseidon([R8.x, R8.y, A.x, A.y, msg])
        S = (r + hm * s) % SUB_ORDER
        return EdDSASignature(R8, S)

    @staticmethod
    def verify(
        message: Union[int, BytesLike], signature: EdDSASignature, public_key: Point
    ) -> bool:
        """Check ``S * Base8 == R8 + (8 * hm) * A``."""
        if not 0 <= signature.S < SUB_ORDER:
            return False
        if not (in_curve(signature.R8) and in_curve(public_key)):
            return False

        msg = _message_to_field(message)
        hm = poseidon(
            [signature.R8.x, signature.R8.y, public_key.x, public_key.y, msg]
        )
        left = mul_point_scalar(BASE8, signature.S)
        right = add_point(signature.R8, mul_point_scalar(public_key, 8 * hm))
        return left == right
