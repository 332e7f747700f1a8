"""
Unit tests for circuit-input generation.
"""

import base64
import datetime
import json

import pytest

from zkid.config import ProofInputConfig
from zkid.crypto.merkle import LeanIMT
from zkid.crypto.rsa import RSASigner
from zkid.crypto.signatures import ECDSASigner, PrivateKey
from zkid.documents import DocumentScheme, serialize
from zkid.errors import (
    ConfigurationError,
    LeafNotFound,
    SignatureMismatch,
    ValidationError,
)
from zkid.inputs import (
    DiscloseInputGenerator,
    RegisterInputGenerator,
    SelfricaRSAInputGenerator,
    commitment,
    format_current_date,
    format_forbidden_countries,
    format_majority_age,
    sha256_pad,
)
from zkid.inputs.mock import mock_record, sample_sanctions_list
from zkid.logging import LogConfig, MemoryHandler, setup_logging, shutdown_logging
from zkid.sanctions import SanctionsTreeCache, build_sanctions_trees


@pytest.fixture(scope="module")
def trees():
    return build_sanctions_trees(sample_sanctions_list(), DocumentScheme.SELFPER)


@pytest.fixture(scope="module")
def rsa_key_pair():
    return RSASigner.generate_keypair()


@pytest.fixture
def config():
    return ProofInputConfig()


class TestSha256Pad:
    """Test SHA-256 message padding."""

    def test_short_message(self):
        """Test a short message pads to one block."""
        padded, length = sha256_pad(b"abc", 128)
        assert length == 64
        assert len(padded) == 128
        assert padded[:4] == b"abc\x80"
        assert padded[56:64] == (24).to_bytes(8, "big")
        assert padded[64:] == b"\x00" * 64

    def test_length_boundary(self):
        """Test 56 bytes need a second block."""
        _, length = sha256_pad(b"x" * 56, 128)
        assert length == 128

    def test_does_not_fit(self):
        """Test a message too long for the buffer."""
        with pytest.raises(ValidationError):
            sha256_pad(b"x" * 56, 64)

    def test_buffer_not_block_aligned(self):
        """Test the buffer size must be a multiple of 64."""
        with pytest.raises(ValidationError):
            sha256_pad(b"abc", 100)


class TestFormatting:
    """Test signal formatting helpers."""

    def test_current_date_from_string(self):
        """Test a date string becomes digit signals."""
        assert format_current_date("20250102") == list("20250102")

    def test_current_date_from_date(self):
        """Test a date object is formatted as YYYYMMDD."""
        assert format_current_date(datetime.date(2024, 12, 31)) == list("20241231")

    def test_current_date_default(self):
        """Test the default is today's date."""
        digits = format_current_date()
        assert len(digits) == 8
        assert all(d.isdigit() for d in digits)

    def test_current_date_invalid(self):
        """Test malformed dates are rejected."""
        with pytest.raises(ValidationError):
            format_current_date("2025-01-02")

    def test_majority_age(self):
        """Test ages become three ASCII digit codes."""
        assert format_majority_age(18) == ["48", "49", "56"]
        assert format_majority_age(None) == ["48", "48", "48"]

    def test_majority_age_out_of_range(self):
        """Test ages above three digits are rejected."""
        with pytest.raises(ValidationError):
            format_majority_age(1000)

    def test_forbidden_countries(self):
        """Test codes become ASCII signals padded with zeros."""
        signals = format_forbidden_countries(["irn", "PRK"])
        assert len(signals) == 120
        assert signals[:6] == ["73", "82", "78", "80", "82", "75"]
        assert signals[6:] == ["0"] * 114

    def test_forbidden_countries_empty(self):
        """Test no countries gives all zeros."""
        assert format_forbidden_countries(None) == ["0"] * 120

    def test_forbidden_countries_invalid(self):
        """Test non alpha-3 codes are rejected."""
        with pytest.raises(ValidationError):
            format_forbidden_countries(["US"])

    def test_too_many_forbidden_countries(self):
        """Test the list is capped at 40 countries."""
        with pytest.raises(ValidationError):
            format_forbidden_countries(["AAA"] * 41)


class TestDiscloseInputGenerator:
    """Test disclosure input generation."""

    def test_generate(self, config, trees):
        """Test the full signal mapping for a registered record."""
        record = mock_record(DocumentScheme.KYC)
        tree = LeanIMT([1, 2])
        tree.insert(commitment("1234", record))

        signals = DiscloseInputGenerator(config).generate(record, tree, sanctions=trees)

        assert len(signals["data_padded"]) == 332
        assert signals["merkle_root"] == str(tree.root)
        assert signals["leaf_depth"] == "1"
        assert len(signals["siblings"]) == config.commitment_tree_depth
        assert len(signals["path"]) == config.commitment_tree_depth
        assert signals["compressed_disclose_sel"] == ["0", "0"]
        assert signals["forbidden_countries_list"] == ["0"] * 120
        assert signals["selector_ofac"] == ["1"]
        assert signals["scope"] == "0"
        assert signals["secret"] == "1234"
        assert signals["attestation_id"] == "4"

    def test_protocol_defaults(self, config, trees):
        """Test user id, date and age default from the record."""
        record = mock_record(DocumentScheme.KYC)
        signals = DiscloseInputGenerator(config).generate(
            record, LeanIMT(), sanctions=trees, update_tree=True
        )
        assert signals["user_identifier"] == "1234567890"
        assert signals["current_date"] == list("20250101")
        assert signals["majority_age_ASCII"] == ["48", "50", "48"]

    def test_explicit_arguments(self, config, trees):
        """Test explicit arguments override the record's values."""
        record = mock_record(DocumentScheme.SELFPER)
        signals = DiscloseInputGenerator(config).generate(
            record,
            LeanIMT(),
            sanctions=trees,
            scope="42",
            user_identifier="7",
            fields_to_reveal=["COUNTRY"],
            forbidden_countries=["IRN"],
            minimum_age=18,
            ofac=False,
            current_date="20240229",
            update_tree=True,
        )
        assert signals["scope"] == "42"
        assert signals["user_identifier"] == "7"
        assert signals["compressed_disclose_sel"] == ["7", "0"]
        assert signals["forbidden_countries_list"][:3] == ["73", "82", "78"]
        assert signals["majority_age_ASCII"] == ["48", "49", "56"]
        assert signals["selector_ofac"] == ["0"]
        assert signals["current_date"] == list("20240229")

    def test_sanctions_signals(self, config, trees):
        """Test both sanctions proofs are included."""
        record = mock_record(DocumentScheme.SELFPER, sanctioned=True)
        signals = DiscloseInputGenerator(config).generate(
            record, LeanIMT(), sanctions=trees, update_tree=True
        )
        assert signals["ofac_name_dob_smt_root"] == str(trees.name_dob.root)
        assert signals["ofac_name_yob_smt_root"] == str(trees.name_yob.root)
        assert len(signals["ofac_name_dob_smt_siblings"]) == 64
        assert signals["ofac_name_dob_smt_leaf_key"] == str(
            trees.name_dob.key_for(record.full_name, record.dob)
        )

    def test_update_tree(self, config, trees):
        """Test update_tree inserts a missing commitment once."""
        record = mock_record(DocumentScheme.PERSONA)
        tree = LeanIMT()
        generator = DiscloseInputGenerator(config)
        generator.generate(record, tree, sanctions=trees, update_tree=True)
        generator.generate(record, tree, sanctions=trees, update_tree=True)
        assert len(tree) == 1
        assert tree.leaves == [commitment("1234", record)]

    def test_unregistered_record(self, config, trees):
        """Test an absent commitment raises LeafNotFound."""
        with pytest.raises(LeafNotFound):
            DiscloseInputGenerator(config).generate(
                mock_record(DocumentScheme.KYC), LeanIMT([1, 2]), sanctions=trees
            )

    def test_aadhaar_attestation_id(self, config, trees):
        """Test Aadhaar records default to their own attestation id."""
        signals = DiscloseInputGenerator(config).generate(
            mock_record(DocumentScheme.AADHAAR), LeanIMT(), sanctions=trees, update_tree=True
        )
        assert signals["attestation_id"] == "3"
        assert len(signals["data_padded"]) == 119

    def test_custom_secret(self, config, trees):
        """Test a custom secret changes the leaf used."""
        record = mock_record(DocumentScheme.KYC)
        tree = LeanIMT()
        signals = DiscloseInputGenerator(config).generate(
            record, tree, sanctions=trees, secret=99, update_tree=True
        )
        assert signals["secret"] == "99"
        assert tree.has(commitment(99, record))


class TestSanctionsResolution:
    """Test how generators find sanctions trees."""

    def test_cache_and_loader(self, config, trees):
        """Test trees are loaded once and then served from the cache."""
        calls = []

        def loader(scheme):
            calls.append(scheme)
            return trees

        cache = SanctionsTreeCache()
        generator = DiscloseInputGenerator(config, tree_cache=cache, sanctions_loader=loader)
        record = mock_record(DocumentScheme.KYC)
        tree = LeanIMT()
        generator.generate(record, tree, update_tree=True)
        generator.generate(record, tree)
        assert calls == [DocumentScheme.KYC]
        assert DocumentScheme.KYC in cache

    def test_cache_disabled_in_config(self, trees):
        """Test the config switch bypasses the cache."""
        calls = []

        def loader(scheme):
            calls.append(scheme)
            return trees

        generator = DiscloseInputGenerator(
            ProofInputConfig(enable_tree_cache=False),
            tree_cache=SanctionsTreeCache(),
            sanctions_loader=loader,
        )
        generator.resolve_sanctions(DocumentScheme.KYC)
        generator.resolve_sanctions(DocumentScheme.KYC)
        assert len(calls) == 2

    def test_explicit_trees_win(self, config, trees):
        """Test trees passed in are used as is."""
        generator = DiscloseInputGenerator(config)
        assert generator.resolve_sanctions(DocumentScheme.KYC, trees) is trees

    def test_tree_depth_mismatch(self, trees):
        """Test trees built for another circuit depth are rejected."""
        generator = DiscloseInputGenerator(ProofInputConfig(ofac_tree_levels=32))
        with pytest.raises(ConfigurationError):
            generator.resolve_sanctions(DocumentScheme.KYC, trees)

    def test_no_source(self, config):
        """Test a missing loader is a configuration error."""
        with pytest.raises(ConfigurationError):
            DiscloseInputGenerator(config).resolve_sanctions(DocumentScheme.KYC)


class TestAuditLogging:
    """Test the structured audit entry."""

    def setup_method(self):
        self.manager = setup_logging(LogConfig(handlers=["memory"]))
        self.handler = MemoryHandler()
        self.manager.add_handler("memory", self.handler)

    def teardown_method(self):
        shutdown_logging()

    def test_disclose_audit_entry(self, config, trees):
        """Test one entry with scheme, operation and attestation id."""
        record = mock_record(DocumentScheme.KYC)
        DiscloseInputGenerator(config).generate(
            record, LeanIMT(), sanctions=trees, update_tree=True
        )
        logs = [log for log in self.handler.get_logs() if log["logger_name"] == "zkid.inputs"]
        assert len(logs) == 1
        entry = logs[0]
        assert entry["message"] == "generated disclose inputs"
        assert entry["context"]["scheme"] == "kyc"
        assert entry["context"]["operation"] == "disclose"
        assert entry["context"]["attestation_id"] == "4"
        assert entry["extra"]["leaf_index"] == 0

    def test_record_not_logged(self, config, trees):
        """Test no record content reaches the audit entry."""
        record = mock_record(DocumentScheme.KYC)
        DiscloseInputGenerator(config).generate(
            record, LeanIMT(), sanctions=trees, update_tree=True
        )
        dumped = json.dumps(self.handler.get_logs(), default=str)
        assert record.full_name not in dumped


class TestRegisterInputGenerator:
    """Test registration input generation."""

    def test_generate(self, config):
        """Test the effective-ECDSA witness for a fixed key."""
        private_key = PrivateKey(0x1234567890ABCDEF)
        record = mock_record(DocumentScheme.KYC)
        signals = RegisterInputGenerator(config).generate(record, private_key=private_key)

        signature = ECDSASigner.sign(private_key, serialize(record))
        public_key = private_key.get_public_key()
        assert signals["s"] == str(signature.s)
        assert signals["pubKeyX"] == str(public_key.x)
        assert signals["pubKeyY"] == str(public_key.y)
        assert signals["r_inv"] == [
            str(limb) for limb in ECDSASigner.negated_r_inverse_limbs(signature)
        ]
        assert len(signals["data_padded"]) == 332
        assert signals["secret"] == "1234"
        assert signals["attestation_id"] == "4"

    def test_effective_point(self, config):
        """Test Tx, Ty match the derived effective arguments."""
        private_key = PrivateKey(0xABCDEF)
        record = mock_record(DocumentScheme.PERSONA)
        signals = RegisterInputGenerator(config).generate(record, private_key=private_key)
        data = serialize(record)
        effective = ECDSASigner.derive_effective_args(data, ECDSASigner.sign(private_key, data))
        assert (signals["Tx"], signals["Ty"]) == (str(effective.T.x), str(effective.T.y))

    def test_deterministic(self, config):
        """Test the same key and record give the same witness."""
        private_key = PrivateKey(0x42)
        record = mock_record(DocumentScheme.SELFPER)
        generator = RegisterInputGenerator(config)
        assert generator.generate(record, private_key) == generator.generate(record, private_key)

    def test_fresh_key(self, config):
        """Test a key is generated when none is given."""
        signals = RegisterInputGenerator(config).generate(mock_record(DocumentScheme.KYC))
        assert len(signals["r_inv"]) == 4
        assert all(int(limb) < 1 << 64 for limb in signals["r_inv"])

    def test_signature_mismatch(self, config, monkeypatch):
        """Test a failing self-check raises SignatureMismatch."""
        monkeypatch.setattr(ECDSASigner, "verify", staticmethod(lambda *args: False))
        with pytest.raises(SignatureMismatch):
            RegisterInputGenerator(config).generate(
                mock_record(DocumentScheme.KYC), private_key=PrivateKey(7)
            )


class TestSelfricaRSAInputGenerator:
    """Test Selfrica RSA input generation."""

    def test_generate(self, config, trees, rsa_key_pair):
        """Test padded record, key words and disclosure signals."""
        record = mock_record(DocumentScheme.SELFRICA)
        signals = SelfricaRSAInputGenerator(config).generate(
            record, key_pair=rsa_key_pair, sanctions=trees
        )
        padded = signals["SmileID_data_padded"]
        assert len(padded) == 320
        assert padded[:266] == [str(b) for b in serialize(record)]
        assert padded[266] == "128"
        assert signals["pubKey"] == [
            str(w) for w in RSASigner.to_words(rsa_key_pair.modulus)
        ]
        assert len(signals["msg_sig"]) == 17
        assert len(signals["id_num_sig"]) == 17
        assert signals["user_identifier"] == "1234567890"
        assert "ofac_name_yob_smt_root" in signals

    def test_signatures_verify(self, config, rsa_key_pair):
        """Test the ID number signature covers only the ID number bytes."""
        record = mock_record(DocumentScheme.SELFRICA)
        generator = SelfricaRSAInputGenerator(config)
        msg_sig, id_num_sig = generator.sign_record(record, rsa_key_pair)
        data = serialize(record)
        assert RSASigner.verify(rsa_key_pair.public_key, data, msg_sig)
        assert RSASigner.verify(rsa_key_pair.public_key, data[30:50], id_num_sig)

    def test_partner_signatures(self, config, trees, rsa_key_pair):
        """Test base64 partner material gives the same inputs."""
        record = mock_record(DocumentScheme.SELFRICA)
        generator = SelfricaRSAInputGenerator(config)
        msg_sig, id_num_sig = generator.sign_record(record, rsa_key_pair)
        modulus = rsa_key_pair.modulus.to_bytes(256, "big")

        from_partner = generator.generate_with_signatures(
            record,
            base64.b64encode(modulus).decode(),
            base64.b64encode(msg_sig).decode(),
            base64.b64encode(id_num_sig).decode(),
            sanctions=trees,
        )
        generated = generator.generate(record, key_pair=rsa_key_pair, sanctions=trees)
        assert from_partner == generated

    def test_wrong_scheme(self, config, trees, rsa_key_pair):
        """Test only Selfrica records are accepted."""
        with pytest.raises(ValidationError):
            SelfricaRSAInputGenerator(config).generate(
                mock_record(DocumentScheme.KYC), key_pair=rsa_key_pair, sanctions=trees
            )
