"""
Byte packing and Poseidon hashing helpers.

Poseidon operates on field elements, not bytes, so byte buffers are packed
into 31-byte little-endian chunks before hashing. Long element lists are
hashed in rounds of 16.
"""

import logging
from typing import List, Sequence, Union

from ..errors import ValidationError
from .poseidon import poseidon, poseidon16

logger = logging.getLogger(__name__)

PACK_CHUNK_SIZE = 31
HASH_ROUND_SIZE = 16
MAX_HASH_ROUNDS = 16

BytesLike = Union[bytes, bytearray, Sequence[int], str]


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return bytes(data)


class PoseidonHasher:
    """Poseidon hashing over byte buffers and element lists."""

    @staticmethod
    def pack_bytes(data: BytesLike, chunk_size: int = PACK_CHUNK_SIZE) -> List[int]:
        """
        Pack bytes into field elements.

        Args:
            data: Bytes, a list of byte values, or a UTF-8 string
            chunk_size: Bytes per element; 31 keeps every element below the modulus

        Returns:
            One integer per chunk; byte ``j`` of a chunk contributes ``b << 8j``
        """
        raw = _as_bytes(data)
        return [
            int.from_bytes(raw[i : i + chunk_size], "little")
            for i in range(0, len(raw), chunk_size)
        ]

    @staticmethod
    def custom_hash(elements: Sequence[int]) -> int:
        """
        Hash an arbitrary-length element list.

        Fewer than 16 elements are hashed directly. Longer lists are split
        into zero-padded rounds of 16, each round hashed, then the round
        digests hashed together.
        """
        elements = list(elements)
        if not elements:
            raise ValidationError("Cannot hash an empty element list", field="elements")
        if len(elements) < HASH_ROUND_SIZE:
            return poseidon(elements)

        rounds = -(-len(elements) // HASH_ROUND_SIZE)
        if rounds > MAX_HASH_ROUNDS:
            raise ValidationError(
                f"Input needs {rounds} hash rounds, maximum is {MAX_HASH_ROUNDS}",
                field="elements",
                value=len(elements),
                expected=MAX_HASH_ROUNDS * HASH_ROUND_SIZE,
            )

        digests = []
        for r in range(rounds):
            chunk = elements[r * HASH_ROUND_SIZE : (r + 1) * HASH_ROUND_SIZE]
            chunk += [0] * (HASH_ROUND_SIZE - len(chunk))
            digests.append(poseidon16(chunk))
        return poseidon(digests)

    @staticmethod
    def packed_hash(data: BytesLike) -> int:
        """Pack a byte buffer and hash it (``PackedHash``)."""
        return PoseidonHasher.custom_hash(PoseidonHasher.pack_bytes(data))


pack_bytes = PoseidonHasher.pack_bytes
custom_hash = PoseidonHasher.custom_hash
packed_hash = PoseidonHasher.packed_hash
