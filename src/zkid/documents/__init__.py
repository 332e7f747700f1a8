"""Document records, fixed-width codecs and disclosure selectors."""

from .codec import (
    AadhaarCodec,
    KycCodec,
    PersonaCodec,
    RecordCodec,
    SelfperCodec,
    SelfricaCodec,
    get_codec,
    serialize,
    to_byte_list,
    validate_and_pad,
)
from .records import (
    AadhaarRecord,
    DocumentRecord,
    IdentityRecord,
    KycRecord,
    PersonaRecord,
    ProtocolFields,
    SelfperRecord,
    SelfricaRecord,
)
from .schemes import (
    DocumentScheme,
    FieldSpec,
    SchemeLayout,
    get_layout,
    is_document_inactive,
)
from .selector import (
    SelectorBitmap,
    build_selector,
    compress,
    create_disclose_selector,
    decompress,
)

__all__ = [
    "DocumentScheme",
    "FieldSpec",
    "SchemeLayout",
    "get_layout",
    "is_document_inactive",
    "ProtocolFields",
    "IdentityRecord",
    "SelfperRecord",
    "KycRecord",
    "SelfricaRecord",
    "PersonaRecord",
    "AadhaarRecord",
    "DocumentRecord",
    "RecordCodec",
    "SelfperCodec",
    "KycCodec",
    "SelfricaCodec",
    "PersonaCodec",
    "AadhaarCodec",
    "get_codec",
    "serialize",
    "validate_and_pad",
    "to_byte_list",
    "SelectorBitmap",
    "build_selector",
    "compress",
    "decompress",
    "create_disclose_selector",
]
