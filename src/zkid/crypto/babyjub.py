"""
Baby Jubjub twisted Edwards curve.

The curve is defined over the BN254 scalar field, so its points can be
manipulated cheaply inside circuits. Equation: ``a*x^2 + y^2 = 1 + d*x^2*y^2``.
"""

from dataclasses import dataclass

from .field import FIELD_MODULUS

A = 168700
D = 168696

ORDER = 21888242871839275222246405745257275088614511777268538073601725287587578984328
SUB_ORDER = ORDER >> 3


@dataclass(frozen=True)
class Point:
    """Affine curve point."""

    x: int
    y: int

    def __iter__(self):
        yield self.x
        yield self.y

    def to_strings(self):
        return [str(self.x), str(self.y)]


IDENTITY = Point(0, 1)

GENERATOR = Point(
    995203441582195749578291179787384436505546430278305826713579947235728471134,
    5472060717959818805561601436314318772137091100104008585924551046643952123905,
)

BASE8 = Point(
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)


def add_point(p1: Point, p2: Point) -> Point:
    """Add two points with the complete twisted Edwards formula."""
    p = FIELD_MODULUS
    x1, y1 = p1.x, p1.y
    x2, y2 = p2.x, p2.y
    beta = x1 * y2 % p
    gamma = y1 * x2 % p
    delta = (y1 - A * x1) * (x2 + y2) % p
    tau = beta * gamma % p
    dtau = D * tau % p

    x3 = (beta + gamma) * pow(1 + dtau, -1, p) % p
    y3 = (delta + A * beta - gamma) * pow(1 - dtau, -1, p) % p
    return Point(x3, y3)


def negate_point(point: Point) -> Point:
    return Point((-point.x) % FIELD_MODULUS, point.y)


def mul_point_scalar(point: Point, scalar: int) -> Point:
    """Double-and-add scalar multiplication."""
    result = IDENTITY
    addend = point
    k = scalar
    if k < 0:
        k = -k
        addend = negate_point(addend)
    while k:
        if k & 1:
            result = add_point(result, addend)
        addend = add_point(addend, addend)
        k >>= 1
    return result


def in_curve(point: Point) -> bool:
    p = FIELD_MODULUS
    x2 = point.x * point.x % p
    y2 = point.y * point.y % p
    return (A * x2 + y2) % p == (1 + D * x2 * y2) % p


def in_subgroup(point: Point) -> bool:
    return in_curve(point) and mul_point_scalar(point, SUB_ORDER) == IDENTITY
