"""Circuit-input generation: commitments, signal assembly and decoding."""

from .commitment import commitment, nullifier, rsa_pubkey_commitment, signature_components
from .generator import (
    DiscloseInputGenerator,
    RegisterInputGenerator,
    SelfricaRSAInputGenerator,
    format_current_date,
    format_forbidden_countries,
    format_majority_age,
    sha256_pad,
)
from .mock import mock_record, sample_sanctions_list
from .public_signals import (
    SELFPER_SIGNALS,
    SELFRICA_SIGNALS,
    DecodedPublicSignals,
    PublicSignalLayout,
    decode_public_signals,
    unpack_reveal,
)

__all__ = [
    "commitment",
    "nullifier",
    "signature_components",
    "rsa_pubkey_commitment",
    "DiscloseInputGenerator",
    "RegisterInputGenerator",
    "SelfricaRSAInputGenerator",
    "sha256_pad",
    "format_current_date",
    "format_forbidden_countries",
    "format_majority_age",
    "mock_record",
    "sample_sanctions_list",
    "PublicSignalLayout",
    "SELFPER_SIGNALS",
    "SELFRICA_SIGNALS",
    "DecodedPublicSignals",
    "unpack_reveal",
    "decode_public_signals",
]
