"""
Dummy records for tests and demos.

For every scheme there is a record whose holder is on the sample sanctions
list and one whose holder is not.
"""

from typing import List

from ..documents.records import (
    AadhaarRecord,
    DocumentRecord,
    KycRecord,
    PersonaRecord,
    ProtocolFields,
    SelfperRecord,
    SelfricaRecord,
)
from ..documents.schemes import DocumentScheme
from ..sanctions.leaves import SanctionsEntry

SANCTIONED_NAME = "ABBAS ABU"
SANCTIONED_DOB = "19481210"
CLEAR_NAME = "John Doe"
CLEAR_DOB = "19900101"

_PROTOCOL = ProtocolFields(
    user_identifier="1234567890",
    current_date="20250101",
    minimum_age=20,
    selector_older_than=True,
)


def _identity_kwargs(sanctioned: bool, id_number: str) -> dict:
    return dict(
        country="KEN",
        id_type="NATIONAL ID",
        id_number=id_number,
        issuance_date="20200101",
        expiry_date="20290101",
        full_name=SANCTIONED_NAME if sanctioned else CLEAR_NAME,
        dob=SANCTIONED_DOB if sanctioned else CLEAR_DOB,
        photo_hash="1234567890",
        phone_number="1234567890",
        document="ID",
        gender="Male",
        address="1234567890",
        protocol=_PROTOCOL,
    )


def mock_record(scheme: DocumentScheme, sanctioned: bool = False) -> DocumentRecord:
    """Dummy record for ``scheme``; ``sanctioned`` picks the listed holder."""
    if scheme is DocumentScheme.SELFPER:
        return SelfperRecord(**_identity_kwargs(sanctioned, "1" * 32))
    if scheme is DocumentScheme.KYC:
        return KycRecord(**_identity_kwargs(sanctioned, "1" * 32))
    if scheme is DocumentScheme.SELFRICA:
        return SelfricaRecord(**_identity_kwargs(sanctioned, "1234567890"))
    if scheme is DocumentScheme.PERSONA:
        return PersonaRecord(
            country="USA",
            id_type="tribalid",
            id_number="Y123ABC",
            document_number="585225",
            issuance_date="20200728",
            expiry_date="20300101",
            full_name=SANCTIONED_NAME if sanctioned else CLEAR_NAME,
            dob=SANCTIONED_DOB if sanctioned else CLEAR_DOB,
            address_subdivision="CA",
            address_postal_code="94105",
            photo_hash="1234567890abcdef123",
            phone_number="+12345678901",
            gender="M",
            protocol=_PROTOCOL,
        )
    if scheme is DocumentScheme.AADHAAR:
        dob = SANCTIONED_DOB if sanctioned else CLEAR_DOB
        return AadhaarRecord(
            gender="M",
            year_of_birth=dob[:4],
            month_of_birth=dob[4:6],
            day_of_birth=dob[6:],
            name=SANCTIONED_NAME if sanctioned else CLEAR_NAME,
            aadhaar_last_4_digits="1234",
            pincode="110051",
            state="Delhi",
            phone_last_4_digits="1234",
            protocol=_PROTOCOL,
        )
    raise ValueError(f"No mock record for scheme {scheme!r}")


def sample_sanctions_list() -> List[SanctionsEntry]:
    """Small sanctions list containing the sanctioned mock holder."""
    return [
        SanctionsEntry(full_name=SANCTIONED_NAME, dob=SANCTIONED_DOB),
        SanctionsEntry(full_name="HASSAN NASRALLAH", dob="19600831"),
        SanctionsEntry(full_name="Ivan Petrov", year_of_birth="1971"),
        SanctionsEntry(full_name="MARIA  GONZALEZ", dob="19751102"),
        SanctionsEntry(full_name="Kim Yong Chol", dob="19460501"),
    ]
