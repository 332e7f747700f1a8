"""Tests for the zkid error hierarchy."""

import pytest

from zkid.errors import (
    ConfigurationError,
    CryptographicError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    FieldTooLong,
    InvalidProofLevel,
    LeafNotFound,
    SignatureMismatch,
    ValidationError,
    ZkidError,
    create_validation_error,
)


class TestZkidError:
    """Test the base error."""

    def test_defaults(self):
        """Test default severity, category and retryability."""
        error = ZkidError("boom")
        assert error.message == "boom"
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.category == ErrorCategory.SYSTEM
        assert error.retryable is False
        assert isinstance(error.context, ErrorContext)

    def test_str_joins_parts(self):
        """Test string form lists code and non-default category."""
        error = ZkidError(
            "bad input", error_code="E1", category=ErrorCategory.VALIDATION
        )
        text = str(error)
        assert text.startswith("ZkidError: bad input")
        assert "Code: E1" in text
        assert "Category: validation" in text
        assert " | " in text

    def test_to_dict(self):
        """Test dictionary form."""
        cause = ValueError("inner")
        context = ErrorContext(scheme="kyc", operation="serialize")
        error = ZkidError("outer", context=context, cause=cause, metadata={"k": 1})
        data = error.to_dict()
        assert data["type"] == "ZkidError"
        assert data["cause"] == "inner"
        assert data["context"]["scheme"] == "kyc"
        assert data["context"]["operation"] == "serialize"
        assert data["metadata"] == {"k": 1}


class TestValidationErrors:
    """Test validation error subclasses."""

    def test_validation_error_fields(self):
        """Test field, value and expected are kept."""
        error = ValidationError("nope", field="dob", value="1990", expected="YYYYMMDD")
        assert error.category == ErrorCategory.VALIDATION
        data = error.to_dict()
        assert data["field"] == "dob"
        assert data["value"] == "1990"
        assert data["expected"] == "YYYYMMDD"

    def test_field_too_long(self):
        """Test FieldTooLong names the field and widths."""
        error = FieldTooLong("fullName", 70, 64)
        assert isinstance(error, ValidationError)
        assert error.field == "fullName"
        assert error.length == 70
        assert error.max_length == 64
        assert error.error_code == "FIELD_TOO_LONG"
        assert "fullName" in str(error)

    def test_create_validation_error(self):
        """Test the helper builds a message from its arguments."""
        error = create_validation_error("scope", -1, "non-negative")
        assert error.field == "scope"
        assert "non-negative" in error.message


class TestDomainErrors:
    """Test accumulator, sanctions and crypto errors."""

    def test_leaf_not_found(self):
        """Test LeafNotFound carries the leaf."""
        error = LeafNotFound(42)
        assert error.leaf == 42
        assert error.category == ErrorCategory.ACCUMULATOR
        assert error.to_dict()["leaf"] == "42"

    def test_invalid_proof_level(self):
        """Test InvalidProofLevel is a high severity sanctions error."""
        error = InvalidProofLevel(3)
        assert error.level == 3
        assert error.severity == ErrorSeverity.HIGH
        assert error.category == ErrorCategory.SANCTIONS

    def test_signature_mismatch(self):
        """Test SignatureMismatch is a cryptographic error."""
        error = SignatureMismatch("ecdsa")
        assert isinstance(error, CryptographicError)
        assert error.algorithm == "ecdsa"
        assert error.error_code == "SIGNATURE_MISMATCH"
        assert error.to_dict()["algorithm"] == "ecdsa"

    def test_configuration_error(self):
        """Test ConfigurationError keeps the key and value."""
        error = ConfigurationError("bad", config_key="ZKID_X", config_value="y")
        assert error.category == ErrorCategory.CONFIGURATION
        assert error.to_dict()["config_key"] == "ZKID_X"

    def test_errors_are_raisable(self):
        """Test every error can be raised and caught as ZkidError."""
        for error in (
            ValidationError("v"),
            FieldTooLong("f", 2, 1),
            LeafNotFound(1),
            InvalidProofLevel(0),
            SignatureMismatch("rsa"),
            ConfigurationError("c"),
        ):
            with pytest.raises(ZkidError):
                raise error
