"""
ECDSA over Baby Jubjub, with the circuit-efficient "effective" transform.

Nonces are derived deterministically as ``Poseidon(h, priv) mod n`` so that
re-running an input generator on the same document reproduces the same
witness. The effective form moves the modular inverse of ``r`` out of the
circuit: the generator supplies ``T = r^-1 * R`` and ``U = -(h * r^-1) * G``
and the circuit checks ``s*T + U == pub`` with point operations only.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import List, Tuple

from ..errors import ValidationError
from .babyjub import BASE8, SUB_ORDER, Point, add_point, in_curve, mul_point_scalar
from .field import bigint_to_limbs, mod_inv, modulus
from .hashing import BytesLike, packed_hash
from .poseidon import poseidon2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrivateKey:
    """Baby Jubjub private scalar."""

    scalar: int

    def __post_init__(self) -> None:
        if not 0 < self.scalar % SUB_ORDER:
            raise ValueError("Private key must be non-zero modulo the subgroup order")

    @classmethod
    def generate(cls) -> "PrivateKey":
        """Generate a new random private key."""
        return cls(secrets.randbelow(SUB_ORDER - 1) + 1)

    def get_public_key(self) -> "PublicKey":
        return PublicKey(mul_point_scalar(BASE8, self.scalar % SUB_ORDER))

    def __repr__(self) -> str:
        return "PrivateKey(<hidden>)"


@dataclass(frozen=True)
class PublicKey:
    """Baby Jubjub public point ``priv * Base8``."""

    point: Point

    def __post_init__(self) -> None:
        if not in_curve(self.point):
            raise ValueError("Public key is not on the curve")

    @property
    def x(self) -> int:
        return self.point.x

    @property
    def y(self) -> int:
        return self.point.y


@dataclass(frozen=True)
class Signature:
    """ECDSA signature ``(R, s)``; ``R`` is kept as a full point."""

    R: Point
    s: int


@dataclass(frozen=True)
class EffectiveArgs:
    """Precomputed points for the inverse-free verification equation."""

    T: Point
    U: Point


def hash_message(message: BytesLike) -> int:
    """Message digest used by ECDSA: PackedHash reduced modulo the subgroup order."""
    return packed_hash(message) % SUB_ORDER


class ECDSASigner:
    """ECDSA operations over Baby Jubjub."""

    @staticmethod
    def generate_keypair() -> Tuple[PrivateKey, PublicKey]:
        """Generate a new ECDSA key pair."""
        private_key = PrivateKey.generate()
        return private_key, private_key.get_public_key()

    @staticmethod
    def sign(private_key: PrivateKey, message: BytesLike) -> Signature:
        """
        Sign a message.

        Args:
            private_key: Signer's private key
            message: Raw bytes or byte values; hashed with PackedHash

        Returns:
            Signature with ``R = k * Base8`` and ``s = k^-1 (h + R.x * priv) mod n``
        """
        priv = private_key.scalar % SUB_ORDER
        h = hash_message(message)
        k = poseidon2(h, priv) % SUB_ORDER
        if k == 0:
            raise ValidationError("Derived nonce is zero", field="k")

        R = mul_point_scalar(BASE8, k)
        s = mod_inv(k, SUB_ORDER) * (h + R.x * priv) % SUB_ORDER
        if s == 0:
            raise ValidationError("Derived signature scalar is zero", field="s")
        return Signature(R, s)

    @staticmethod
    def verify(message: BytesLike, signature: Signature, public_key: PublicKey) -> bool:
        """Check ``u1 * Base8 + u2 * pub == R`` on both coordinates."""
        s = signature.s
        r = signature.R.x
        if not 0 < s < SUB_ORDER or r % SUB_ORDER == 0:
            return False
        if not in_curve(signature.R):
            return False

        h = hash_message(message)
        s_inv = mod_inv(s, SUB_ORDER)
        u1 = h * s_inv % SUB_ORDER
        u2 = r * s_inv % SUB_ORDER
        candidate = add_point(
            mul_point_scalar(BASE8, u1), mul_point_scalar(public_key.point, u2)
        )
        return candidate == signature.R

    @staticmethod
    def derive_effective_args(message: BytesLike, signature: Signature) -> EffectiveArgs:
        """Compute ``T = r^-1 * R`` and ``U = -(h * r^-1) * Base8``."""
        r_inv = mod_inv(signature.R.x, SUB_ORDER)
        h = hash_message(message)
        T = mul_point_scalar(signature.R, r_inv)
        U = mul_point_scalar(BASE8, modulus(-r_inv * h, SUB_ORDER))
        return EffectiveArgs(T, U)

    @staticmethod
    def verify_effective(s: int, T: Point, U: Point, public_key: PublicKey) -> bool:
        """Check ``s * T + U == pub`` on both coordinates."""
        if not 0 < s < SUB_ORDER:
            return False
        if not (in_curve(T) and in_curve(U)):
            return False
        candidate = add_point(mul_point_scalar(T, s), U)
        return candidate == public_key.point

    @staticmethod
    def negated_r_inverse_limbs(signature: Signature) -> List[int]:
        """``-r^-1 mod n`` as four little-endian 64-bit limbs."""
        r_inv = mod_inv(signature.R.x, SUB_ORDER)
        return bigint_to_limbs(modulus(-r_inv, SUB_ORDER), 64, 4)
