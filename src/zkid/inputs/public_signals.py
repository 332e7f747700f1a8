"""
Decoding of disclosure-circuit public signals.

Circuits output revealed bytes packed 31 per field element. Each scheme family
places its outputs at fixed indices; ``decode_public_signals`` reads them back
into a typed result and extracts revealed fields with the codec layout.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from ..crypto.hashing import PACK_CHUNK_SIZE
from ..documents.schemes import DocumentScheme, get_layout
from ..errors import ValidationError

logger = logging.getLogger(__name__)

# Bytes after the record in the revealed output: older-than flag and sanctions results.
OLDER_THAN_LENGTH = 2
OFAC_RESULTS_LENGTH = 3

Signal = Union[int, str]


@dataclass(frozen=True)
class PublicSignalLayout:
    """Indices of a disclosure circuit's public outputs."""

    attestation_id: int
    revealed_data: int
    revealed_data_length: int
    forbidden_countries: int
    forbidden_countries_length: int
    nullifier: int
    scope: int
    user_identifier: int
    current_date: int
    current_date_length: int
    ofac_name_dob_smt_root: int
    ofac_name_yob_smt_root: int
    identity_commitment: Optional[int] = None
    pubkey: Optional[int] = None
    pubkey_length: int = 0

    @property
    def size(self) -> int:
        return max(self.ofac_name_dob_smt_root, self.ofac_name_yob_smt_root) + 1


SELFPER_SIGNALS = PublicSignalLayout(
    attestation_id=0,
    revealed_data=1,
    revealed_data_length=9,
    forbidden_countries=10,
    forbidden_countries_length=4,
    nullifier=14,
    scope=15,
    user_identifier=16,
    current_date=17,
    current_date_length=8,
    ofac_name_dob_smt_root=25,
    ofac_name_yob_smt_root=26,
)

# The RSA circuit also outputs the identity commitment and the partner modulus.
SELFRICA_SIGNALS = PublicSignalLayout(
    attestation_id=0,
    revealed_data=1,
    revealed_data_length=9,
    forbidden_countries=10,
    forbidden_countries_length=4,
    identity_commitment=14,
    nullifier=15,
    pubkey=16,
    pubkey_length=17,
    scope=33,
    user_identifier=34,
    current_date=35,
    current_date_length=8,
    ofac_name_dob_smt_root=43,
    ofac_name_yob_smt_root=44,
)

SIGNAL_LAYOUTS: Dict[DocumentScheme, PublicSignalLayout] = {
    DocumentScheme.SELFPER: SELFPER_SIGNALS,
    DocumentScheme.KYC: SELFPER_SIGNALS,
    DocumentScheme.PERSONA: SELFPER_SIGNALS,
    DocumentScheme.SELFRICA: SELFRICA_SIGNALS,
}


@dataclass(frozen=True)
class DecodedPublicSignals:
    """Public outputs of one disclosure proof."""

    scheme: DocumentScheme
    attestation_id: str
    revealed_data: bytes
    revealed_fields: Dict[str, str]
    forbidden_countries: List[str]
    nullifier: str
    scope: str
    user_identifier: str
    current_date: str
    ofac_name_dob_smt_root: str
    ofac_name_yob_smt_root: str
    older_than: str = ""
    ofac_results: List[int] = field(default_factory=list)
    identity_commitment: Optional[str] = None
    pubkey: Optional[List[str]] = None


def unpack_reveal(packed: Sequence[Signal], chunk_size: int = PACK_CHUNK_SIZE) -> bytes:
    """Expand each packed element into ``chunk_size`` little-endian bytes."""
    out = bytearray()
    for element in packed:
        value = int(element)
        if value < 0 or value >> (8 * chunk_size):
            raise ValidationError(
                f"Packed element does not fit in {chunk_size} bytes",
                field="packed",
                value=element,
            )
        out += value.to_bytes(chunk_size, "little")
    return bytes(out)


def _country_codes(data: bytes) -> List[str]:
    codes = []
    for i in range(0, len(data) - len(data) % 3, 3):
        chunk = data[i : i + 3]
        if any(chunk):
            codes.append(chunk.decode("ascii", errors="replace"))
    return codes


def _revealed_fields(scheme: DocumentScheme, data: bytes) -> Dict[str, str]:
    """Non-empty fields that lie entirely inside the revealed bytes."""
    fields = {}
    for spec in get_layout(scheme):
        if spec.placeholder or spec.end > len(data):
            continue
        value = data[spec.offset : spec.end].rstrip(b"\x00")
        if value:
            fields[spec.selector] = value.decode("utf-8", errors="replace")
    return fields


def decode_public_signals(
    scheme: DocumentScheme, signals: Sequence[Signal]
) -> DecodedPublicSignals:
    """
    Decode a disclosure proof's public signals.

    Args:
        scheme: Scheme of the proven record; selects the index table
        signals: Public signals in circuit order, as ints or decimal strings

    Returns:
        DecodedPublicSignals with revealed fields keyed by selector name

    Raises:
        ValidationError: For an unsupported scheme or too few signals
    """
    layout = SIGNAL_LAYOUTS.get(scheme)
    if layout is None:
        raise ValidationError(
            f"No public signal layout for scheme {scheme.value}",
            field="scheme",
            value=scheme.value,
            expected=[s.value for s in SIGNAL_LAYOUTS],
        )
    if len(signals) < layout.size:
        raise ValidationError(
            f"Expected at least {layout.size} public signals, got {len(signals)}",
            field="signals",
            value=len(signals),
            expected=layout.size,
        )

    def one(index: int) -> str:
        return str(signals[index])

    def span(start: int, length: int) -> List[Signal]:
        return list(signals[start : start + length])

    record_length = get_layout(scheme).max_length
    unpacked = unpack_reveal(span(layout.revealed_data, layout.revealed_data_length))
    revealed = unpacked[: record_length + OLDER_THAN_LENGTH + OFAC_RESULTS_LENGTH]
    older_than = revealed[record_length : record_length + OLDER_THAN_LENGTH]
    ofac_results = revealed[record_length + OLDER_THAN_LENGTH :]

    countries = unpack_reveal(
        span(layout.forbidden_countries, layout.forbidden_countries_length)
    )
    current_date = "".join(
        str(int(d)) for d in span(layout.current_date, layout.current_date_length)
    )

    decoded = DecodedPublicSignals(
        scheme=scheme,
        attestation_id=one(layout.attestation_id),
        revealed_data=revealed,
        revealed_fields=_revealed_fields(scheme, revealed),
        forbidden_countries=_country_codes(countries),
        nullifier=one(layout.nullifier),
        scope=one(layout.scope),
        user_identifier=one(layout.user_identifier),
        current_date=current_date,
        ofac_name_dob_smt_root=one(layout.ofac_name_dob_smt_root),
        ofac_name_yob_smt_root=one(layout.ofac_name_yob_smt_root),
        older_than=older_than.rstrip(b"\x00").decode("ascii", errors="replace"),
        ofac_results=list(ofac_results),
        identity_commitment=(
            one(layout.identity_commitment)
            if layout.identity_commitment is not None
            else None
        ),
        pubkey=(
            [str(s) for s in span(layout.pubkey, layout.pubkey_length)]
            if layout.pubkey is not None
            else None
        ),
    )
    logger.debug(
        "decoded %s public signals: %d fields revealed",
        scheme.value,
        len(decoded.revealed_fields),
    )
    return decoded
