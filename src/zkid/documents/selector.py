"""
Selective-disclosure selector bitmaps.

A bitmap has one bit per serialized byte; a set bit reveals that byte. The
circuit takes the bitmap as two integers: bits ``[0, mid)`` and ``[mid, len)``
with ``mid = len // 2``, each encoded little-endian.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import ValidationError
from .schemes import DocumentScheme, get_layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectorBitmap:
    """Per-byte disclosure bits for one scheme."""

    bits: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.bits)

    def compress(self) -> Tuple[int, int]:
        return compress(self.bits)

    def to_int(self) -> int:
        """Whole bitmap as a single little-endian integer."""
        return _bits_to_int(self.bits)

    def revealed_positions(self) -> List[int]:
        return [i for i, bit in enumerate(self.bits) if bit]


def _bits_to_int(bits: Sequence[int]) -> int:
    value = 0
    for i, bit in enumerate(bits):
        if bit:
            value |= 1 << i
    return value


def _int_to_bits(value: int, length: int) -> List[int]:
    if value < 0 or value >> length:
        raise ValidationError(
            f"Value does not fit in {length} bits",
            field="value",
            value=value,
            expected=f"< 2**{length}",
        )
    return [(value >> i) & 1 for i in range(length)]


def build_selector(
    scheme: DocumentScheme,
    fields_to_reveal: Iterable[str],
    custom_bits: Optional[Dict[str, Sequence[int]]] = None,
) -> SelectorBitmap:
    """
    Build the disclosure bitmap for a set of fields.

    Args:
        scheme: Document scheme whose layout defines the byte ranges
        fields_to_reveal: Field names (selector, wire or attribute form)
        custom_bits: Optional per-field bit lists placed from the field's
            offset and OR-ed in; entries past the field's width are ignored

    Returns:
        SelectorBitmap of the scheme's max length
    """
    layout = get_layout(scheme)
    bits = [0] * layout.max_length

    for name in fields_to_reveal:
        if layout.is_virtual(name):
            continue
        spec = layout.require_field(name)
        for i in spec.span():
            bits[i] = 1

    for name, extra in (custom_bits or {}).items():
        spec = layout.require_field(name)
        for i, bit in enumerate(extra[: spec.length]):
            if bit:
                bits[spec.offset + i] = 1

    return SelectorBitmap(tuple(bits))


def compress(bits: Sequence[int]) -> Tuple[int, int]:
    """Split at ``len // 2`` and encode each half little-endian."""
    mid = len(bits) // 2
    return _bits_to_int(bits[:mid]), _bits_to_int(bits[mid:])


def decompress(low: int, high: int, length: int) -> SelectorBitmap:
    """Exact inverse of ``compress`` for a bitmap of ``length`` bits."""
    mid = length // 2
    return SelectorBitmap(tuple(_int_to_bits(low, mid) + _int_to_bits(high, length - mid)))


def create_disclose_selector(
    scheme: DocumentScheme,
    fields_to_reveal: Iterable[str],
    custom_bits: Optional[Dict[str, Sequence[int]]] = None,
) -> List[str]:
    """Compressed selector as the two decimal strings circuits consume."""
    low, high = build_selector(scheme, fields_to_reveal, custom_bits).compress()
    return [str(low), str(high)]
