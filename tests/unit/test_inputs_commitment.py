"""
Unit tests for commitments and nullifiers.
"""

import pytest

from zkid.crypto.babyjub import Point
from zkid.crypto.eddsa import EdDSASignature
from zkid.crypto.field import FIELD_MODULUS, split_to_words
from zkid.crypto.hashing import custom_hash, packed_hash
from zkid.crypto.poseidon import MAX_INPUTS, poseidon, poseidon2, poseidon16
from zkid.crypto.signatures import Signature
from zkid.documents import DocumentScheme, serialize
from zkid.errors import ValidationError
from zkid.inputs import commitment, nullifier, rsa_pubkey_commitment, signature_components
from zkid.inputs.mock import mock_record


class TestCommitment:
    """Test record commitments."""

    def test_definition(self):
        """Test commitment is Poseidon(secret, PackedHash(record))."""
        record = mock_record(DocumentScheme.KYC)
        expected = poseidon2(1234, packed_hash(serialize(record)))
        assert commitment("1234", record) == expected
        assert commitment(1234, record) == expected

    def test_serialized_input(self):
        """Test a pre-serialized buffer gives the same commitment."""
        record = mock_record(DocumentScheme.PERSONA)
        assert commitment("1234", serialize(record)) == commitment("1234", record)

    def test_secret_changes_commitment(self):
        """Test different secrets give different commitments."""
        record = mock_record(DocumentScheme.SELFPER)
        assert commitment("1234", record) != commitment("1235", record)

    def test_record_changes_commitment(self):
        """Test different records give different commitments."""
        clear = mock_record(DocumentScheme.SELFPER)
        listed = mock_record(DocumentScheme.SELFPER, sanctioned=True)
        assert commitment("1234", clear) != commitment("1234", listed)

    def test_secret_reduced_mod_p(self):
        """Test secrets are taken modulo the field."""
        record = mock_record(DocumentScheme.AADHAAR)
        assert commitment(FIELD_MODULUS + 7, record) == commitment(7, record)

    @pytest.mark.parametrize("secret", ["abc", None, -1])
    def test_invalid_secret(self, secret):
        """Test non-numeric or negative secrets are rejected."""
        with pytest.raises(ValidationError):
            commitment(secret, mock_record(DocumentScheme.KYC))


class TestNullifier:
    """Test scope-bound nullifiers."""

    def test_short_components(self):
        """Test small component lists are hashed with the scope directly."""
        assert nullifier([1, 2, 3], 9) == poseidon([1, 2, 3, 9])

    def test_scope_separation(self):
        """Test the same identity yields distinct nullifiers per scope."""
        components = [11, 22, 33]
        assert nullifier(components, "1") != nullifier(components, "2")
        assert nullifier(components, "1") == nullifier(components, 1)

    def test_long_components_fold_first(self):
        """Test component lists too long for one call are folded."""
        components = list(range(1, MAX_INPUTS + 1))
        assert nullifier(components, 5) == poseidon2(custom_hash(components), 5)

    def test_empty_components(self):
        """Test a nullifier needs components."""
        with pytest.raises(ValidationError):
            nullifier([], 1)


class TestSignatureComponents:
    """Test signature component extraction."""

    def test_ecdsa(self):
        """Test ECDSA signatures give [R.x, R.y, s]."""
        signature = Signature(R=Point(1, 2), s=3)
        assert signature_components(signature) == [1, 2, 3]

    def test_eddsa(self):
        """Test EdDSA signatures give [R8.x, R8.y, S]."""
        signature = EdDSASignature(R8=Point(4, 5), S=6)
        assert signature_components(signature) == [4, 5, 6]


class TestRSAPubkeyCommitment:
    """Test RSA modulus commitments."""

    def test_definition(self):
        """Test the 17 words are hashed as 16 then the last."""
        modulus = (1 << 2047) + 12345
        words = split_to_words(modulus, 121, 17)
        assert rsa_pubkey_commitment(modulus) == poseidon2(poseidon16(words[:16]), words[16])

    def test_wrong_word_count(self):
        """Test only the 17-word encoding is supported."""
        with pytest.raises(ValidationError):
            rsa_pubkey_commitment(12345, word_bits=128, word_count=16)
