"""
Fixed-width record codecs.

Each scheme has exactly one codec. ``serialize`` concatenates the record's
fields in layout order, upper-casing where the layout says so and NUL-padding
each value to its width. Values are never truncated: a value wider than its
field raises FieldTooLong naming that field.
"""

import dataclasses
import logging
from abc import ABC
from typing import Dict, List, Type

from ..errors import FieldTooLong, ValidationError
from .records import (
    AadhaarRecord,
    DocumentRecord,
    KycRecord,
    PersonaRecord,
    SelfperRecord,
    SelfricaRecord,
)
from .schemes import DocumentScheme, FieldSpec, SchemeLayout, get_layout

logger = logging.getLogger(__name__)

NUL = b"\x00"


class RecordCodec(ABC):
    """Serializer for one document scheme."""

    scheme: DocumentScheme
    record_type: Type

    @property
    def layout(self) -> SchemeLayout:
        return get_layout(self.scheme)

    @property
    def max_length(self) -> int:
        return self.layout.max_length

    def _check_type(self, record) -> None:
        if not isinstance(record, self.record_type):
            raise ValidationError(
                f"{type(record).__name__} cannot be encoded as {self.scheme.value}",
                field="record",
                expected=self.record_type.__name__,
            )

    def _field_value(self, record, spec: FieldSpec) -> str:
        if spec.placeholder:
            return ""
        value = getattr(record, spec.attr)
        value = "" if value is None else str(value)
        return value.upper() if spec.upper else value

    def encode_fields(self, record) -> List[bytes]:
        """Encoded (unpadded) value of every field, checked against its width."""
        self._check_type(record)
        encoded = []
        for spec in self.layout:
            raw = self._field_value(record, spec).encode("utf-8")
            if len(raw) > spec.length:
                raise FieldTooLong(spec.name, len(raw), spec.length)
            encoded.append(raw)
        return encoded

    def validate_and_pad(self, record):
        """
        Return a copy of ``record`` with every field NUL-padded to its width.

        Raises:
            FieldTooLong: For the first field whose value exceeds its width
        """
        encoded = self.encode_fields(record)
        changes = {}
        for spec, raw in zip(self.layout, encoded):
            if spec.placeholder:
                continue
            changes[spec.attr] = raw.ljust(spec.length, NUL).decode("utf-8")
        return dataclasses.replace(record, **changes)

    def serialize(self, record) -> bytes:
        """Record as a ``max_length`` byte buffer."""
        encoded = self.encode_fields(record)
        data = b"".join(
            raw.ljust(spec.length, NUL) for spec, raw in zip(self.layout, encoded)
        )
        if len(data) != self.max_length:
            raise ValidationError(
                f"Serialized length {len(data)} does not match {self.max_length}",
                field="record",
                value=len(data),
                expected=self.max_length,
            )
        return data

    def extract_field(self, data: bytes, name: str) -> str:
        """Read one field back out of a serialized buffer, without its padding."""
        if len(data) < self.max_length:
            raise ValidationError(
                f"Buffer of {len(data)} bytes is shorter than {self.max_length}",
                field="data",
                value=len(data),
                expected=self.max_length,
            )
        spec = self.layout.require_field(name)
        return data[spec.offset : spec.end].rstrip(NUL).decode("utf-8", errors="replace")

    def deserialize(self, data: bytes):
        """Rebuild a record from a serialized buffer."""
        values: Dict[str, str] = {}
        for spec in self.layout:
            if not spec.placeholder:
                values[spec.attr] = self.extract_field(data, spec.name)
        return self.record_type(**values)


class SelfperCodec(RecordCodec):
    scheme = DocumentScheme.SELFPER
    record_type = SelfperRecord


class KycCodec(RecordCodec):
    scheme = DocumentScheme.KYC
    record_type = KycRecord


class SelfricaCodec(RecordCodec):
    scheme = DocumentScheme.SELFRICA
    record_type = SelfricaRecord


class PersonaCodec(RecordCodec):
    scheme = DocumentScheme.PERSONA
    record_type = PersonaRecord


class AadhaarCodec(RecordCodec):
    """Aadhaar reveal layout; trailing photo-hash and sanctions flags stay NUL."""

    scheme = DocumentScheme.AADHAAR
    record_type = AadhaarRecord


_CODECS: Dict[DocumentScheme, RecordCodec] = {
    codec.scheme: codec
    for codec in (
        SelfperCodec(),
        KycCodec(),
        SelfricaCodec(),
        PersonaCodec(),
        AadhaarCodec(),
    )
}

_missing = set(DocumentScheme) - set(_CODECS)
if _missing:
    raise ImportError(f"No codec registered for schemes: {sorted(s.value for s in _missing)}")


def get_codec(scheme: DocumentScheme) -> RecordCodec:
    return _CODECS[scheme]


def serialize(record: DocumentRecord) -> bytes:
    """Serialize any record with its scheme's codec."""
    return get_codec(record.scheme).serialize(record)


def validate_and_pad(record: DocumentRecord) -> DocumentRecord:
    return get_codec(record.scheme).validate_and_pad(record)


def to_byte_list(data: bytes) -> List[int]:
    """Byte buffer as the list of byte values circuits take."""
    return list(data)
