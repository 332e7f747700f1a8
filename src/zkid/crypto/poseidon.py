"""
Poseidon hash over the BN254 scalar field.

Implements the circomlib instantiation: x^5 S-box, 8 full rounds, a width
dependent number of partial rounds, state initialised to ``[0, *inputs]`` and
``state[0]`` as output. Round constants and the MDS matrix are derived with
the Grain LFSR procedure from the Poseidon reference parameter script and are
cached per state width.
"""

import logging
from functools import lru_cache
from typing import List, Sequence, Tuple

from ..errors import ValidationError
from .field import FIELD_MODULUS

logger = logging.getLogger(__name__)

FULL_ROUNDS = 8
# Indexed by t - 2, for t = 2..17.
PARTIAL_ROUNDS = [56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68]
MAX_INPUTS = len(PARTIAL_ROUNDS)

_FIELD_BITS = 254


class GrainLFSR:
    """Self-shrinking 80-bit Grain LFSR used to derive Poseidon parameters."""

    _SIZE = 80

    def __init__(self, t: int, full_rounds: int, partial_rounds: int):
        bits: List[int] = []
        for value, width in (
            (1, 2),  # prime field
            (0, 4),  # x^alpha S-box
            (_FIELD_BITS, 12),
            (t, 12),
            (full_rounds, 10),
            (partial_rounds, 10),
        ):
            bits.extend(int(b) for b in format(value, f"0{width}b"))
        bits.extend([1] * 30)

        self._buf = bits
        self._head = 0
        for _ in range(160):
            self._step()

    def _step(self) -> int:
        buf, h, size = self._buf, self._head, self._SIZE
        new_bit = (
            buf[(h + 62) % size]
            ^ buf[(h + 51) % size]
            ^ buf[(h + 38) % size]
            ^ buf[(h + 23) % size]
            ^ buf[(h + 13) % size]
            ^ buf[h]
        )
        buf[h] = new_bit
        self._head = (h + 1) % size
        return new_bit

    def random_bit(self) -> int:
        bit = self._step()
        while bit == 0:
            self._step()
            bit = self._step()
        return self._step()

    def random_int(self, num_bits: int = _FIELD_BITS) -> int:
        """Next ``num_bits`` output bits as a big-endian integer."""
        value = 0
        for _ in range(num_bits):
            value = (value << 1) | self.random_bit()
        return value

    def field_element(self) -> int:
        """Rejection-sample an element below the field modulus."""
        value = self.random_int()
        while value >= FIELD_MODULUS:
            value = self.random_int()
        return value


@lru_cache(maxsize=None)
def get_parameters(t: int) -> Tuple[Tuple[int, ...], Tuple[Tuple[int, ...], ...]]:
    """
    Round constants and MDS matrix for state width ``t``.

    Returns:
        ``(constants, mds)`` where ``constants`` holds ``(R_F + R_P) * t``
        values in round-major order and ``mds`` is a ``t x t`` Cauchy matrix
    """
    if not 2 <= t <= MAX_INPUTS + 1:
        raise ValidationError(
            f"Unsupported Poseidon width {t}", field="t", value=t, expected="2..17"
        )
    partial_rounds = PARTIAL_ROUNDS[t - 2]
    grain = GrainLFSR(t, FULL_ROUNDS, partial_rounds)

    constants = tuple(
        grain.field_element() for _ in range((FULL_ROUNDS + partial_rounds) * t)
    )

    while True:
        draws = [grain.random_int() % FIELD_MODULUS for _ in range(2 * t)]
        if len(set(draws)) != len(draws):
            continue
        xs, ys = draws[:t], draws[t:]
        if any((x + y) % FIELD_MODULUS == 0 for x in xs for y in ys):
            continue
        mds = tuple(
            tuple(pow(x + y, -1, FIELD_MODULUS) for y in ys) for x in xs
        )
        break

    logger.debug("derived Poseidon parameters for t=%d (R_P=%d)", t, partial_rounds)
    return constants, mds


def _sbox(x: int) -> int:
    return pow(x, 5, FIELD_MODULUS)


def poseidon(inputs: Sequence[int]) -> int:
    """
    Hash 1 to 16 field elements.

    Args:
        inputs: Integers; each is reduced modulo the field first

    Returns:
        The Poseidon digest as an int in ``[0, FIELD_MODULUS)``
    """
    n = len(inputs)
    if not 1 <= n <= MAX_INPUTS:
        raise ValidationError(
            f"Poseidon takes 1 to {MAX_INPUTS} inputs, got {n}",
            field="inputs",
            value=n,
            expected=f"1..{MAX_INPUTS}",
        )

    t = n + 1
    constants, mds = get_parameters(t)
    partial_rounds = PARTIAL_ROUNDS[t - 2]
    half_full = FULL_ROUNDS // 2
    total_rounds = FULL_ROUNDS + partial_rounds
    p = FIELD_MODULUS

    state = [0] + [int(x) % p for x in inputs]
    for r in range(total_rounds):
        offset = r * t
        state = [(s + constants[offset + i]) % p for i, s in enumerate(state)]
        if r < half_full or r >= half_full + partial_rounds:
            state = [_sbox(s) for s in state]
        else:
            state[0] = _sbox(state[0])
        state = [sum(m * s for m, s in zip(row, state)) % p for row in mds]

    return state[0]


def poseidon2(a: int, b: int) -> int:
    return poseidon([a, b])


def poseidon16(inputs: Sequence[int]) -> int:
    if len(inputs) != 16:
        raise ValidationError(
            "poseidon16 takes exactly 16 inputs",
            field="inputs",
            value=len(inputs),
            expected=16,
        )
    return poseidon(inputs)
