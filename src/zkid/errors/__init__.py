"""zkid error handling.

Structured exceptions shared by every zkid component.
"""

from .exceptions import (
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

__all__ = [
    "ZkidError",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    "ValidationError",
    "FieldTooLong",
    "LeafNotFound",
    "InvalidProofLevel",
    "CryptographicError",
    "SignatureMismatch",
    "ConfigurationError",
    "create_validation_error",
]
