"""
Commitment and nullifier derivation.

A commitment binds a user secret to a serialized record and is the leaf
inserted into the commitment accumulator at registration. A nullifier binds
identity components to a verifier scope, so the same identity yields
unrelated nullifiers for different verifiers and a repeated one within a scope.
"""

import logging
from typing import List, Sequence, Union

from ..crypto.eddsa import EdDSASignature
from ..crypto.field import FIELD_MODULUS, split_to_words
from ..crypto.hashing import BytesLike, custom_hash, packed_hash
from ..crypto.poseidon import MAX_INPUTS, poseidon, poseidon2, poseidon16
from ..crypto.signatures import Signature
from ..documents.codec import serialize
from ..documents.records import DocumentRecord
from ..errors import ValidationError

logger = logging.getLogger(__name__)


def _to_int(value: Union[int, str], name: str) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"{name} must be an integer or decimal string", field=name, value=value
        ) from None
    if result < 0:
        raise ValidationError(f"{name} cannot be negative", field=name, value=value)
    return result % FIELD_MODULUS


def commitment(secret: Union[int, str], record: Union[DocumentRecord, BytesLike]) -> int:
    """
    ``Poseidon(secret, PackedHash(serialize(record)))``.

    Args:
        secret: User secret as an int or decimal string
        record: A document record, or an already serialized buffer
    """
    if isinstance(record, (bytes, bytearray, list, tuple, str)):
        data = record
    else:
        data = serialize(record)
    return poseidon2(_to_int(secret, "secret"), packed_hash(data))


def nullifier(components: Sequence[Union[int, str]], scope: Union[int, str]) -> int:
    """
    ``Poseidon(components..., scope)``.

    Component lists that do not fit a single Poseidon call are first folded
    with the round-based hash: ``Poseidon(custom_hash(components), scope)``.
    """
    values = [_to_int(c, "component") for c in components]
    if not values:
        raise ValidationError("Nullifier needs at least one component", field="components")
    scope_value = _to_int(scope, "scope")
    if len(values) + 1 <= MAX_INPUTS:
        return poseidon(values + [scope_value])
    return poseidon2(custom_hash(values), scope_value)


def signature_components(signature: Union[Signature, EdDSASignature]) -> List[int]:
    """Field components of a signature, in nullifier order ``[R.x, R.y, s]``."""
    if isinstance(signature, EdDSASignature):
        return [signature.R8.x, signature.R8.y, signature.S]
    return [signature.R.x, signature.R.y, signature.s]


def rsa_pubkey_commitment(modulus: int, word_bits: int = 121, word_count: int = 17) -> int:
    """Poseidon commitment to an RSA modulus split into circuit words."""
    words = split_to_words(modulus, word_bits, word_count)
    if len(words) != 17:
        raise ValidationError(
            "RSA modulus commitment expects 17 words",
            field="word_count",
            value=word_count,
            expected=17,
        )
    return poseidon2(poseidon16(words[:16]), words[16])
