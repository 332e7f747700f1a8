"""Exception hierarchy for zkid.

Every failure raised by the proof-input core is a ``ZkidError``. The
subclasses let callers tell an invalid record from a commitment that was never
registered and from a broken signature, since each calls for a different
remediation. None of them is retryable: the core is deterministic, so the only
meaningful retry is to refetch tree state and recompute.
"""

import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    VALIDATION = "validation"
    CRYPTOGRAPHIC = "cryptographic"
    ACCUMULATOR = "accumulator"
    SANCTIONS = "sanctions"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for an error."""

    timestamp: float = field(default_factory=time.time)
    scheme: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    request_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "timestamp": self.timestamp,
            "scheme": self.scheme,
            "component": self.component,
            "operation": self.operation,
            "request_id": self.request_id,
            "metadata": self.metadata,
        }


class ZkidError(Exception):
    """Base exception for all zkid errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        retryable: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context or ErrorContext()
        self.cause = cause
        self.retryable = retryable
        self.metadata = metadata or {}
        self.timestamp = time.time()
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "retryable": self.retryable,
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.severity != ErrorSeverity.MEDIUM:
            parts.append(f"Severity: {self.severity.value}")

        if self.category != ErrorCategory.SYSTEM:
            parts.append(f"Category: {self.category.value}")

        if self.retryable:
            parts.append("Retryable: Yes")

        return " | ".join(parts)


class ValidationError(ZkidError):
    """Input failed validation."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.VALIDATION)
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        """Convert validation error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "field": self.field,
                "value": str(self.value) if self.value is not None else None,
                "expected": str(self.expected) if self.expected is not None else None,
            }
        )
        return data


class FieldTooLong(ValidationError):
    """A record field does not fit in its scheme width."""

    def __init__(
        self,
        field: str,
        length: int,
        max_length: int,
        message: Optional[str] = None,
        **kwargs,
    ):
        if message is None:
            message = (
                f"Field '{field}' is {length} bytes, exceeds maximum of {max_length}"
            )
        super().__init__(
            message,
            field=field,
            value=length,
            expected=max_length,
            error_code="FIELD_TOO_LONG",
            **kwargs,
        )
        self.length = length
        self.max_length = max_length


class LeafNotFound(ZkidError):
    """A proof was requested for a leaf that is not in the accumulator."""

    def __init__(self, leaf: Any, message: Optional[str] = None, **kwargs):
        if message is None:
            message = f"Leaf {leaf} not found in commitment tree"
        super().__init__(
            message,
            error_code="LEAF_NOT_FOUND",
            category=ErrorCategory.ACCUMULATOR,
            **kwargs,
        )
        self.leaf = leaf

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["leaf"] = str(self.leaf)
        return data


class InvalidProofLevel(ZkidError):
    """A sanctions proof was requested at an unknown granularity."""

    def __init__(self, level: Any, message: Optional[str] = None, **kwargs):
        if message is None:
            message = f"Invalid proof level {level!r}: expected 1 (name+YOB) or 2 (name+DOB)"
        super().__init__(
            message,
            error_code="INVALID_PROOF_LEVEL",
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.SANCTIONS,
            **kwargs,
        )
        self.level = level


class CryptographicError(ZkidError):
    """Cryptographic error."""

    def __init__(
        self,
        message: str,
        algorithm: Optional[str] = None,
        key_type: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(
            message,
            category=ErrorCategory.CRYPTOGRAPHIC,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.algorithm = algorithm
        self.key_type = key_type

    def to_dict(self) -> Dict[str, Any]:
        """Convert cryptographic error to dictionary."""
        data = super().to_dict()
        data.update({"algorithm": self.algorithm, "key_type": self.key_type})
        return data


class SignatureMismatch(CryptographicError):
    """A signature that was expected to verify did not."""

    def __init__(
        self, algorithm: str, message: Optional[str] = None, **kwargs
    ):
        if message is None:
            message = f"{algorithm} signature failed verification"
        super().__init__(
            message, algorithm=algorithm, error_code="SIGNATURE_MISMATCH", **kwargs
        )


class ConfigurationError(ZkidError):
    """Configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.config_key = config_key
        self.config_value = config_value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "config_key": self.config_key,
                "config_value": str(self.config_value)
                if self.config_value is not None
                else None,
            }
        )
        return data


def create_validation_error(
    field: str, value: Any, expected: Any, message: Optional[str] = None
) -> ValidationError:
    """Create a validation error."""
    if message is None:
        message = f"Invalid value for field '{field}': expected {expected}, got {value}"

    return ValidationError(message=message, field=field, value=value, expected=expected)
