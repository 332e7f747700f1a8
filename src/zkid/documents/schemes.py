"""
Document encoding schemes and their fixed byte layouts.

Every scheme serializes to a fixed-width buffer. Each field owns a contiguous
byte range at a fixed offset; the selector bitmap uses the same ranges.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Sequence, Tuple

from ..errors import ValidationError


class DocumentScheme(Enum):
    """Closed set of supported document encodings."""

    KYC = "kyc"
    SELFPER = "selfper"
    SELFRICA = "selfrica"
    PERSONA = "persona"
    AADHAAR = "aadhaar"


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z0-9])|(?<=[0-9])(?=[A-Z])")


@dataclass(frozen=True)
class FieldSpec:
    """One field of a layout."""

    name: str
    offset: int
    length: int
    upper: bool = False
    # Slot the circuit fills; the codec writes NUL here.
    placeholder: bool = False

    @property
    def attr(self) -> str:
        """Record attribute name, e.g. ``full_name``."""
        return _CAMEL_BOUNDARY.sub("_", self.name).lower()

    @property
    def selector(self) -> str:
        """Selector name, e.g. ``FULL_NAME``."""
        return self.attr.upper()

    @property
    def end(self) -> int:
        return self.offset + self.length

    def span(self) -> range:
        return range(self.offset, self.end)


@dataclass(frozen=True)
class SchemeLayout:
    """Ordered field layout for one scheme."""

    scheme: DocumentScheme
    fields: Tuple[FieldSpec, ...]
    # Selector names accepted but mapped to no bits.
    virtual_fields: Tuple[str, ...] = ()

    @property
    def max_length(self) -> int:
        return self.fields[-1].end if self.fields else 0

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def get_field(self, name: str) -> Optional[FieldSpec]:
        """Look a field up by wire name, attribute name or selector name."""
        for spec in self.fields:
            if name in (spec.name, spec.attr, spec.selector):
                return spec
        return None

    def require_field(self, name: str) -> FieldSpec:
        spec = self.get_field(name)
        if spec is None:
            raise ValidationError(
                f"Unknown field '{name}' for scheme {self.scheme.value}",
                field=name,
                expected=[f.selector for f in self.fields],
            )
        return spec

    def is_virtual(self, name: str) -> bool:
        return name in self.virtual_fields


def _build_layout(
    scheme: DocumentScheme,
    entries: Sequence[Tuple],
    virtual_fields: Tuple[str, ...] = (),
) -> SchemeLayout:
    fields = []
    offset = 0
    for entry in entries:
        name, length = entry[0], entry[1]
        options = entry[2] if len(entry) > 2 else {}
        fields.append(FieldSpec(name, offset, length, **options))
        offset += length
    return SchemeLayout(scheme, tuple(fields), virtual_fields)


_UPPER = {"upper": True}
_PLACEHOLDER = {"placeholder": True}


def _identity_entries(id_number: int, full_name: int, document: int):
    return [
        ("country", 3, _UPPER),
        ("idType", 27, _UPPER),
        ("idNumber", id_number),
        ("issuanceDate", 8),
        ("expiryDate", 8),
        ("fullName", full_name),
        ("dob", 8),
        ("photoHash", 32),
        ("phoneNumber", 12),
        ("document", document),
        ("gender", 6),
        ("address", 100),
    ]


SELFPER_LAYOUT = _build_layout(DocumentScheme.SELFPER, _identity_entries(32, 64, 32))

# KYC records share the Selfper widths.
KYC_LAYOUT = _build_layout(DocumentScheme.KYC, _identity_entries(32, 64, 32))

SELFRICA_LAYOUT = _build_layout(DocumentScheme.SELFRICA, _identity_entries(20, 40, 2))

PERSONA_LAYOUT = _build_layout(
    DocumentScheme.PERSONA,
    [
        ("country", 3, _UPPER),
        ("idType", 8, _UPPER),
        ("idNumber", 32),
        ("documentNumber", 32),
        ("issuanceDate", 8),
        ("expiryDate", 8),
        ("fullName", 64),
        ("dob", 8),
        ("addressSubdivision", 24),
        ("addressPostalCode", 12),
        ("photoHash", 32),
        ("phoneNumber", 12),
        ("gender", 1),
    ],
)

AADHAAR_LAYOUT = _build_layout(
    DocumentScheme.AADHAAR,
    [
        ("gender", 1),
        ("yearOfBirth", 4),
        ("monthOfBirth", 2),
        ("dayOfBirth", 2),
        ("name", 62),
        ("aadhaarLast4Digits", 4),
        ("pincode", 6),
        ("state", 31),
        ("phoneLast4Digits", 4),
        ("photoHash", 1, _PLACEHOLDER),
        ("ofacNameDobCheck", 1, _PLACEHOLDER),
        ("ofacNameYobCheck", 1, _PLACEHOLDER),
    ],
    virtual_fields=("MINIMUM_AGE_VALID",),
)

LAYOUTS: Dict[DocumentScheme, SchemeLayout] = {
    DocumentScheme.KYC: KYC_LAYOUT,
    DocumentScheme.SELFPER: SELFPER_LAYOUT,
    DocumentScheme.SELFRICA: SELFRICA_LAYOUT,
    DocumentScheme.PERSONA: PERSONA_LAYOUT,
    DocumentScheme.AADHAAR: AADHAAR_LAYOUT,
}


def get_layout(scheme: DocumentScheme) -> SchemeLayout:
    return LAYOUTS[scheme]


def is_document_inactive(scheme: DocumentScheme, has_expiration_date: Optional[bool]) -> bool:
    """
    Whether a stored document should be treated as inactive.

    Aadhaar records carry no expiry field of their own, so one stored without
    an expiration flag is treated as inactive. Other schemes are never marked
    inactive by this check.
    """
    if scheme is DocumentScheme.AADHAAR:
        return not has_expiration_date
    return False
