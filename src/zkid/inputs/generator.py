"""
Circuit-input assembly.

Generators turn a document record plus accumulator state into the signal
mapping a circuit consumes. Every signal value is a decimal string, or a list
of decimal strings, so the mapping can be written out as witness JSON as is.
Each generated object produces one structured audit entry; the record itself
is never logged.
"""

import base64
import datetime
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..config import ProofInputConfig, get_default_config
from ..crypto.merkle import LeanIMT
from ..crypto.rsa import RSAKeyPair, RSASigner
from ..crypto.signatures import ECDSASigner, PrivateKey
from ..documents.codec import get_codec, serialize
from ..documents.records import DocumentRecord, SelfricaRecord
from ..documents.schemes import DocumentScheme
from ..documents.selector import create_disclose_selector
from ..errors import ConfigurationError, SignatureMismatch, ValidationError
from ..logging import LogContext, get_logger
from ..sanctions.cache import SanctionsTreeCache
from ..sanctions.tree import ProofLevel, SanctionsTreePair
from .commitment import commitment

logger = logging.getLogger(__name__)
AUDIT_LOGGER = "zkid.inputs"

SignalMap = Dict[str, Any]
SanctionsLoader = Callable[[DocumentScheme], SanctionsTreePair]
DateLike = Union[str, datetime.date, None]


def sha256_pad(message: bytes, max_length: int) -> Tuple[bytes, int]:
    """
    Apply SHA-256 message padding, then zero-fill to ``max_length``.

    Args:
        message: Message to pad
        max_length: Size of the circuit buffer, a multiple of 64

    Returns:
        Tuple of the padded buffer and the length of the SHA-256 padded part

    Raises:
        ValidationError: If the padded message does not fit
    """
    if max_length % 64:
        raise ValidationError(
            "SHA-256 buffer length must be a multiple of 64",
            field="max_length",
            value=max_length,
        )
    bit_length = len(message) * 8
    padded = bytes(message) + b"\x80"
    padded += b"\x00" * ((56 - len(padded)) % 64)
    padded += bit_length.to_bytes(8, "big")
    if len(padded) > max_length:
        raise ValidationError(
            f"Padded message of {len(padded)} bytes exceeds {max_length}",
            field="message",
            value=len(message),
            expected=f"<= {max_length - 9} bytes",
        )
    return padded + b"\x00" * (max_length - len(padded)), len(padded)


def format_current_date(current_date: DateLike = None) -> List[str]:
    """The date as eight decimal digit signals; today (UTC) by default."""
    if current_date is None:
        current_date = datetime.datetime.now(datetime.timezone.utc).date()
    if isinstance(current_date, datetime.date):
        current_date = current_date.strftime("%Y%m%d")
    if len(current_date) != 8 or not current_date.isdigit():
        raise ValidationError(
            "Current date must be YYYYMMDD",
            field="current_date",
            value=current_date,
            expected="YYYYMMDD",
        )
    return list(current_date)


def format_majority_age(minimum_age: Optional[int] = None) -> List[str]:
    """Three ASCII digit codes as decimal strings; ``000`` disables the check."""
    age = 0 if minimum_age is None else int(minimum_age)
    if not 0 <= age <= 999:
        raise ValidationError(
            "Minimum age must fit in three digits",
            field="minimum_age",
            value=minimum_age,
            expected="0..999",
        )
    return [str(ord(c)) for c in str(age).zfill(3)]


def format_forbidden_countries(
    countries: Optional[Iterable[str]], length: int = 120
) -> List[str]:
    """
    Forbidden country codes as ``length`` byte signals.

    Each ISO alpha-3 code contributes its three ASCII codes; unused slots are
    ``"0"``.
    """
    signals: List[str] = []
    for code in countries or ():
        code = code.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValidationError(
                f"Invalid country code '{code}'", field="forbidden_countries", value=code
            )
        signals.extend(str(ord(c)) for c in code)
    if len(signals) > length:
        raise ValidationError(
            f"At most {length // 3} forbidden countries are supported",
            field="forbidden_countries",
            value=len(signals) // 3,
            expected=length // 3,
        )
    return signals + ["0"] * (length - len(signals))


def _strings(values: Iterable[int]) -> List[str]:
    return [str(v) for v in values]


class _InputGenerator:
    """Shared plumbing: configuration, sanctions tree lookup and audit entries."""

    operation = "generate"

    def __init__(
        self,
        config: Optional[ProofInputConfig] = None,
        tree_cache: Optional[SanctionsTreeCache] = None,
        sanctions_loader: Optional[SanctionsLoader] = None,
    ):
        self.config = config or get_default_config()
        self.tree_cache = tree_cache
        self.sanctions_loader = sanctions_loader

    def default_attestation_id(self, scheme: DocumentScheme) -> str:
        if scheme is DocumentScheme.AADHAAR:
            return self.config.aadhaar_attestation_id
        return self.config.attestation_id

    def resolve_sanctions(
        self, scheme: DocumentScheme, sanctions: Optional[SanctionsTreePair] = None
    ) -> SanctionsTreePair:
        """Use the trees passed in, else the cache, else the loader."""
        if sanctions is None:
            if self.sanctions_loader is None:
                raise ConfigurationError(
                    "No sanctions trees given and no loader configured",
                    config_key="sanctions_loader",
                )
            if self.tree_cache is not None and self.config.enable_tree_cache:
                sanctions = self.tree_cache.get_or_build(scheme, self.sanctions_loader)
            else:
                logger.debug("loading sanctions trees for %s without cache", scheme.value)
                sanctions = self.sanctions_loader(scheme)

        for tree in (sanctions.name_dob, sanctions.name_yob):
            if tree.levels != self.config.ofac_tree_levels:
                raise ConfigurationError(
                    f"Sanctions tree has {tree.levels} levels, circuit expects "
                    f"{self.config.ofac_tree_levels}",
                    config_key="ofac_tree_levels",
                    config_value=tree.levels,
                )
        return sanctions

    def sanctions_signals(
        self, record: DocumentRecord, sanctions: SanctionsTreePair
    ) -> SignalMap:
        """Name+DOB (level 2) and name+YOB (level 1) proof signals."""
        name, dob = record.full_name, record.dob
        signals: SignalMap = {}
        signals.update(
            sanctions.circuit_inputs(name, dob, ProofLevel.NAME_DOB).to_signals(
                "ofac_name_dob_smt"
            )
        )
        signals.update(
            sanctions.circuit_inputs(name, dob, ProofLevel.NAME_YOB).to_signals(
                "ofac_name_yob_smt"
            )
        )
        return signals

    def disclosure_signals(
        self,
        record: DocumentRecord,
        sanctions: SanctionsTreePair,
        scope: Union[int, str],
        user_identifier: Optional[str],
        fields_to_reveal: Optional[Sequence[str]],
        custom_bits: Optional[Dict[str, Sequence[int]]],
        forbidden_countries: Optional[Iterable[str]],
        minimum_age: Optional[int],
        ofac: bool,
        current_date: DateLike,
    ) -> SignalMap:
        """Signals every disclosure circuit takes besides the record and proofs."""
        protocol = record.protocol
        if user_identifier is None:
            user_identifier = protocol.user_identifier or "0"
        if minimum_age is None:
            minimum_age = protocol.minimum_age
        if current_date is None and protocol.current_date:
            current_date = protocol.current_date

        signals: SignalMap = {
            "compressed_disclose_sel": create_disclose_selector(
                record.scheme, fields_to_reveal or (), custom_bits
            ),
            "forbidden_countries_list": format_forbidden_countries(
                forbidden_countries, self.config.forbidden_countries_length
            ),
        }
        signals.update(self.sanctions_signals(record, sanctions))
        signals.update(
            {
                "selector_ofac": ["1" if ofac else "0"],
                "scope": str(scope),
                "user_identifier": str(user_identifier),
                "current_date": format_current_date(current_date),
                "majority_age_ASCII": format_majority_age(minimum_age),
            }
        )
        return signals

    def audit(self, record: DocumentRecord, attestation_id: str, **extra: Any) -> None:
        get_logger(AUDIT_LOGGER).info(
            f"generated {self.operation} inputs",
            context=LogContext(
                scheme=record.scheme.value,
                operation=self.operation,
                attestation_id=attestation_id,
            ),
            extra=extra,
        )


class DiscloseInputGenerator(_InputGenerator):
    """Inputs for the commitment-based disclosure circuits."""

    operation = "disclose"

    def generate(
        self,
        record: DocumentRecord,
        identity_tree: LeanIMT,
        sanctions: Optional[SanctionsTreePair] = None,
        scope: Union[int, str] = "0",
        user_identifier: Optional[str] = None,
        fields_to_reveal: Optional[Sequence[str]] = None,
        custom_bits: Optional[Dict[str, Sequence[int]]] = None,
        forbidden_countries: Optional[Iterable[str]] = None,
        minimum_age: Optional[int] = None,
        ofac: bool = True,
        secret: Optional[Union[int, str]] = None,
        attestation_id: Optional[str] = None,
        current_date: DateLike = None,
        update_tree: bool = False,
    ) -> SignalMap:
        """
        Build the disclosure signal mapping for a registered record.

        Args:
            record: Document record; serialized with its scheme's codec
            identity_tree: Commitment accumulator holding the record's commitment
            sanctions: Sanctions trees for the scheme, or None to resolve them
                through the cache and loader
            scope: Verifier scope the nullifier is bound to
            user_identifier: Defaults to the record's protocol value
            fields_to_reveal: Selector names of fields to disclose
            custom_bits: Extra per-field selector bits
            forbidden_countries: ISO alpha-3 codes the holder must not match
            minimum_age: Minimum age to prove; None disables the check
            ofac: Whether the circuit enforces the sanctions checks
            secret: User secret; defaults to the configured default secret
            attestation_id: Defaults to the configured id for the scheme
            current_date: ``YYYYMMDD`` or a date; defaults to today
            update_tree: Insert the commitment first if it is not present

        Returns:
            Mapping of circuit signal name to value

        Raises:
            FieldTooLong: If the record does not fit its scheme
            LeafNotFound: If the commitment is not in ``identity_tree``
        """
        secret = str(self.config.default_secret if secret is None else secret)
        attestation_id = attestation_id or self.default_attestation_id(record.scheme)
        data = serialize(record)

        leaf = commitment(secret, data)
        if update_tree and not identity_tree.has(leaf):
            identity_tree.insert(leaf)
        index = identity_tree.index_of(leaf)
        proof = identity_tree.prove_inclusion(index, self.config.commitment_tree_depth)

        sanctions = self.resolve_sanctions(record.scheme, sanctions)

        signals: SignalMap = {
            "data_padded": _strings(data),
            "merkle_root": str(proof.root),
            "leaf_depth": str(proof.leaf_depth),
            "path": _strings(proof.path),
            "siblings": _strings(proof.siblings),
        }
        signals.update(
            self.disclosure_signals(
                record,
                sanctions,
                scope,
                user_identifier,
                fields_to_reveal,
                custom_bits,
                forbidden_countries,
                minimum_age,
                ofac,
                current_date,
            )
        )
        signals["secret"] = secret
        signals["attestation_id"] = attestation_id

        self.audit(record, attestation_id, leaf_index=index, leaf_depth=proof.leaf_depth, ofac=ofac)
        return signals


class RegisterInputGenerator(_InputGenerator):
    """Inputs for the ECDSA registration circuits."""

    operation = "register"

    def generate(
        self,
        record: DocumentRecord,
        private_key: Optional[PrivateKey] = None,
        secret: Optional[Union[int, str]] = None,
        attestation_id: Optional[str] = None,
    ) -> SignalMap:
        """
        Sign the serialized record and emit the effective-ECDSA witness.

        A fresh key is generated when none is given, which is what tests and
        demos want. ``r_inv`` is ``-r^-1 mod n`` as four 64-bit limbs.

        Raises:
            SignatureMismatch: If the signature fails plain or effective verification
        """
        secret = str(self.config.default_secret if secret is None else secret)
        attestation_id = attestation_id or self.default_attestation_id(record.scheme)
        if private_key is None:
            private_key = PrivateKey.generate()
        public_key = private_key.get_public_key()

        data = serialize(record)
        signature = ECDSASigner.sign(private_key, data)
        if not ECDSASigner.verify(data, signature, public_key):
            raise SignatureMismatch("ecdsa")
        effective = ECDSASigner.derive_effective_args(data, signature)
        if not ECDSASigner.verify_effective(signature.s, effective.T, effective.U, public_key):
            raise SignatureMismatch("ecdsa-effective")

        signals: SignalMap = {
            "data_padded": _strings(data),
            "s": str(signature.s),
            "Tx": str(effective.T.x),
            "Ty": str(effective.T.y),
            "pubKeyX": str(public_key.x),
            "pubKeyY": str(public_key.y),
            "r_inv": _strings(ECDSASigner.negated_r_inverse_limbs(signature)),
            "secret": secret,
            "attestation_id": attestation_id,
        }
        self.audit(record, attestation_id, signature_scheme="ecdsa")
        return signals


class SelfricaRSAInputGenerator(_InputGenerator):
    """
    Inputs for the Selfrica circuit that checks the partner's RSA signatures.

    The partner signs the serialized record and, separately, the ID-number
    bytes; the circuit derives the nullifier from the second signature.
    """

    operation = "selfrica_disclose"

    def _id_number_bytes(self, data: bytes) -> bytes:
        spec = get_codec(DocumentScheme.SELFRICA).layout.require_field("ID_NUMBER")
        return data[spec.offset : spec.end]

    def _words(self, value: int) -> List[str]:
        return _strings(
            RSASigner.to_words(value, self.config.rsa_word_bits, self.config.rsa_word_count)
        )

    def sign_record(self, record: SelfricaRecord, key_pair: RSAKeyPair) -> Tuple[bytes, bytes]:
        """Sign the record and its ID number the way the partner does."""
        data = serialize(record)
        id_number = self._id_number_bytes(data)
        msg_sig = RSASigner.sign(key_pair.private_key, data)
        id_num_sig = RSASigner.sign(key_pair.private_key, id_number)
        if not RSASigner.verify(key_pair.public_key, data, msg_sig):
            raise SignatureMismatch("rsa")
        if not RSASigner.verify(key_pair.public_key, id_number, id_num_sig):
            raise SignatureMismatch("rsa", message="ID number signature does not verify")
        return msg_sig, id_num_sig

    def generate(
        self,
        record: SelfricaRecord,
        key_pair: Optional[RSAKeyPair] = None,
        sanctions: Optional[SanctionsTreePair] = None,
        scope: Union[int, str] = "0",
        user_identifier: Optional[str] = None,
        fields_to_reveal: Optional[Sequence[str]] = None,
        custom_bits: Optional[Dict[str, Sequence[int]]] = None,
        forbidden_countries: Optional[Iterable[str]] = None,
        minimum_age: Optional[int] = None,
        ofac: bool = True,
        current_date: DateLike = None,
    ) -> SignalMap:
        """
        Sign ``record`` with ``key_pair`` (a fresh 2048-bit key by default)
        and build the circuit inputs.

        Raises:
            SignatureMismatch: If either RSA signature fails to verify
        """
        if key_pair is None:
            key_pair = RSASigner.generate_keypair()
        msg_sig, id_num_sig = self.sign_record(record, key_pair)
        return self._build(
            record,
            modulus=key_pair.modulus,
            msg_sig=RSASigner.signature_to_int(msg_sig),
            id_num_sig=RSASigner.signature_to_int(id_num_sig),
            sanctions=sanctions,
            scope=scope,
            user_identifier=user_identifier,
            fields_to_reveal=fields_to_reveal,
            custom_bits=custom_bits,
            forbidden_countries=forbidden_countries,
            minimum_age=minimum_age,
            ofac=ofac,
            current_date=current_date,
        )

    def generate_with_signatures(
        self,
        record: SelfricaRecord,
        pubkey_b64: str,
        msg_sig_b64: str,
        id_num_sig_b64: str,
        **kwargs: Any,
    ) -> SignalMap:
        """
        Build inputs from signatures a partner already issued.

        The public key is the partner's raw big-endian modulus and the two
        signatures are raw RSA signatures, all base64-encoded. Signatures are
        not checked here; the circuit checks them.
        """
        return self._build(
            record,
            modulus=int.from_bytes(base64.b64decode(pubkey_b64), "big"),
            msg_sig=int.from_bytes(base64.b64decode(msg_sig_b64), "big"),
            id_num_sig=int.from_bytes(base64.b64decode(id_num_sig_b64), "big"),
            **kwargs,
        )

    def _build(
        self,
        record: SelfricaRecord,
        modulus: int,
        msg_sig: int,
        id_num_sig: int,
        sanctions: Optional[SanctionsTreePair] = None,
        scope: Union[int, str] = "0",
        user_identifier: Optional[str] = None,
        fields_to_reveal: Optional[Sequence[str]] = None,
        custom_bits: Optional[Dict[str, Sequence[int]]] = None,
        forbidden_countries: Optional[Iterable[str]] = None,
        minimum_age: Optional[int] = None,
        ofac: bool = True,
        current_date: DateLike = None,
    ) -> SignalMap:
        if record.scheme is not DocumentScheme.SELFRICA:
            raise ValidationError(
                f"RSA inputs need a Selfrica record, got {record.scheme.value}",
                field="record",
                expected=DocumentScheme.SELFRICA.value,
            )
        data = serialize(record)
        padded, _ = sha256_pad(data, self.config.selfrica_padded_length)
        sanctions = self.resolve_sanctions(record.scheme, sanctions)

        signals: SignalMap = {
            "SmileID_data_padded": _strings(padded),
            "pubKey": self._words(modulus),
            "msg_sig": self._words(msg_sig),
            "id_num_sig": self._words(id_num_sig),
        }
        signals.update(
            self.disclosure_signals(
                record,
                sanctions,
                scope,
                user_identifier,
                fields_to_reveal,
                custom_bits,
                forbidden_countries,
                minimum_age,
                ofac,
                current_date,
            )
        )

        self.audit(record, self.config.attestation_id, ofac=ofac, padded_length=len(padded))
        return signals
