"""
BN254 scalar field helpers.

Every value handed to a circuit is an element of this field. Helpers here are
plain functions over Python ints.
"""

from typing import List

from ..errors import ValidationError

FIELD_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)


def modulus(a: int, m: int) -> int:
    """Reduce ``a`` into ``[0, m)``, including for negative ``a``."""
    return a % m


def mod_inv(a: int, m: int) -> int:
    """Modular inverse of ``a`` modulo ``m``."""
    a = a % m
    if a == 0:
        raise ValidationError(
            "Zero has no modular inverse", field="a", value=a, expected="non-zero"
        )
    return pow(a, -1, m)


def to_field(value: int) -> int:
    return value % FIELD_MODULUS


def bigint_to_limbs(value: int, bits: int = 64, count: int = 4) -> List[int]:
    """Split ``value`` into ``count`` little-endian limbs of ``bits`` bits."""
    if value < 0 or value >> (bits * count):
        raise ValidationError(
            f"Value does not fit in {count} limbs of {bits} bits",
            field="value",
            value=value,
        )
    mask = (1 << bits) - 1
    return [(value >> (bits * i)) & mask for i in range(count)]


def limbs_to_bigint(limbs: List[int], bits: int = 64) -> int:
    result = 0
    for i, limb in enumerate(limbs):
        result |= limb << (bits * i)
    return result


def split_to_words(value: int, word_bits: int, word_count: int) -> List[int]:
    """
    Split a big integer into little-endian words.

    Args:
        value: Non-negative integer to split
        word_bits: Width of each word in bits
        word_count: Number of words to produce

    Returns:
        ``word_count`` integers, least significant word first

    Raises:
        ValidationError: If the value needs more than ``word_bits * word_count`` bits
    """
    if value < 0 or value.bit_length() > word_bits * word_count:
        raise ValidationError(
            f"Value needs {value.bit_length()} bits, only {word_bits * word_count} available",
            field="value",
            expected=word_bits * word_count,
        )
    mask = (1 << word_bits) - 1
    return [(value >> (word_bits * i)) & mask for i in range(word_count)]
