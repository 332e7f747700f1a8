"""
Typed document records, one per encoding scheme.

Records are immutable: they are created once at registration from parsed
document data. Protocol values that travel with a record but are never
serialized live in ``ProtocolFields``.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from .schemes import DocumentScheme


@dataclass(frozen=True)
class ProtocolFields:
    """Per-request values used by disclosure circuits."""

    user_identifier: str = ""
    current_date: str = ""
    minimum_age: Optional[int] = None
    selector_older_than: bool = False


@dataclass(frozen=True)
class IdentityRecord:
    """Field set shared by the Selfper, KYC and Selfrica encodings."""

    scheme: ClassVar[DocumentScheme] = DocumentScheme.SELFPER

    country: str
    id_type: str
    id_number: str
    issuance_date: str
    expiry_date: str
    full_name: str
    dob: str
    photo_hash: str = ""
    phone_number: str = ""
    document: str = ""
    gender: str = ""
    address: str = ""
    protocol: ProtocolFields = field(default_factory=ProtocolFields, compare=False)

    @property
    def year_of_birth(self) -> str:
        return self.dob[:4]


@dataclass(frozen=True)
class SelfperRecord(IdentityRecord):
    scheme: ClassVar[DocumentScheme] = DocumentScheme.SELFPER


@dataclass(frozen=True)
class KycRecord(IdentityRecord):
    scheme: ClassVar[DocumentScheme] = DocumentScheme.KYC


@dataclass(frozen=True)
class SelfricaRecord(IdentityRecord):
    scheme: ClassVar[DocumentScheme] = DocumentScheme.SELFRICA


@dataclass(frozen=True)
class PersonaRecord:
    """Persona partner-KYC record."""

    scheme: ClassVar[DocumentScheme] = DocumentScheme.PERSONA

    country: str
    id_type: str
    id_number: str
    document_number: str
    issuance_date: str
    expiry_date: str
    full_name: str
    dob: str
    address_subdivision: str = ""
    address_postal_code: str = ""
    photo_hash: str = ""
    phone_number: str = ""
    gender: str = ""
    protocol: ProtocolFields = field(default_factory=ProtocolFields, compare=False)

    @property
    def year_of_birth(self) -> str:
        return self.dob[:4]


@dataclass(frozen=True)
class AadhaarRecord:
    """Aadhaar reveal data, as extracted from the signed QR payload."""

    scheme: ClassVar[DocumentScheme] = DocumentScheme.AADHAAR

    gender: str
    year_of_birth: str
    month_of_birth: str
    day_of_birth: str
    name: str
    aadhaar_last_4_digits: str = ""
    pincode: str = ""
    state: str = ""
    phone_last_4_digits: str = ""
    protocol: ProtocolFields = field(default_factory=ProtocolFields, compare=False)

    @property
    def full_name(self) -> str:
        return self.name

    @property
    def dob(self) -> str:
        return f"{self.year_of_birth}{self.month_of_birth}{self.day_of_birth}"


DocumentRecord = Union[
    SelfperRecord, KycRecord, SelfricaRecord, PersonaRecord, AadhaarRecord
]
