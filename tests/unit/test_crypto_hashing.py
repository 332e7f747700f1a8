"""
Unit tests for Poseidon and packed hashing.
"""

import pytest

from zkid.crypto.field import FIELD_MODULUS
from zkid.crypto.hashing import (
    MAX_HASH_ROUNDS,
    PoseidonHasher,
    custom_hash,
    pack_bytes,
    packed_hash,
)
from zkid.crypto.poseidon import MAX_INPUTS, poseidon, poseidon2, poseidon16
from zkid.errors import ValidationError


class TestPoseidon:
    """Test the Poseidon permutation-based hash."""

    def test_deterministic(self):
        """Test identical inputs give identical digests."""
        assert poseidon([1, 2, 3]) == poseidon([1, 2, 3])

    def test_output_in_field(self):
        """Test digests are field elements."""
        for n in (1, 2, 5):
            digest = poseidon(list(range(n)))
            assert 0 <= digest < FIELD_MODULUS

    def test_input_order_matters(self):
        """Test the hash is not symmetric."""
        assert poseidon2(1, 2) != poseidon2(2, 1)

    def test_arity_changes_digest(self):
        """Test a trailing zero is not ignored."""
        assert poseidon([1]) != poseidon([1, 0])

    def test_inputs_reduced(self):
        """Test inputs are reduced modulo the field."""
        assert poseidon([FIELD_MODULUS + 7]) == poseidon([7])

    def test_poseidon2_alias(self):
        """Test poseidon2 is the two-input hash."""
        assert poseidon2(5, 6) == poseidon([5, 6])

    def test_poseidon16(self):
        """Test poseidon16 takes exactly sixteen inputs."""
        inputs = list(range(16))
        assert poseidon16(inputs) == poseidon(inputs)
        with pytest.raises(ValidationError):
            poseidon16(inputs[:15])

    def test_input_count_bounds(self):
        """Test zero and too many inputs are rejected."""
        with pytest.raises(ValidationError):
            poseidon([])
        with pytest.raises(ValidationError):
            poseidon([0] * (MAX_INPUTS + 1))


class TestPacking:
    """Test byte packing."""

    def test_pack_little_endian(self):
        """Test bytes pack little-endian within a chunk."""
        assert pack_bytes(b"\x01\x02") == [0x0201]

    def test_pack_chunks_of_31(self):
        """Test 31-byte chunking."""
        packed = pack_bytes(bytes(range(1, 63)))
        assert len(packed) == 2
        assert all(p < FIELD_MODULUS for p in packed)

    def test_pack_accepts_strings_and_lists(self):
        """Test strings and byte lists pack like bytes."""
        assert pack_bytes("AB") == pack_bytes(b"AB") == pack_bytes([65, 66])


class TestCustomHash:
    """Test the round-based hash."""

    def test_short_list_is_plain_poseidon(self):
        """Test fewer than 16 elements hash directly."""
        assert custom_hash([1, 2, 3]) == poseidon([1, 2, 3])

    def test_long_list_uses_rounds(self):
        """Test 16 or more elements are hashed in rounds."""
        elements = list(range(20))
        first = poseidon16(elements[:16])
        second = poseidon16(elements[16:] + [0] * 12)
        assert custom_hash(elements) == poseidon([first, second])

    def test_empty_rejected(self):
        """Test an empty list is rejected."""
        with pytest.raises(ValidationError):
            custom_hash([])

    def test_too_many_rounds(self):
        """Test inputs needing more than the round limit are rejected."""
        with pytest.raises(ValidationError):
            custom_hash([1] * (16 * MAX_HASH_ROUNDS + 1))

    def test_packed_hash(self):
        """Test PackedHash is custom_hash over the packed bytes."""
        data = b"zkid" * 40
        assert packed_hash(data) == custom_hash(pack_bytes(data))
        assert PoseidonHasher.packed_hash(data) == packed_hash(data)

    def test_packed_hash_sensitive_to_bytes(self):
        """Test a single byte change alters the digest."""
        assert packed_hash(b"abc") != packed_hash(b"abd")
