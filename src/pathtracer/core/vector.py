"""Host-side tagged 3D vectors.

`Vec3` carries three float components plus an advisory `VectorType` tag that
records whether the value is a spatial vector, a point or a color. The tag
travels with the left (or only) operand of every arithmetic operation,
including the cross product, and participates in equality. Nothing checks
that a tag is physically meaningful.

These vectors are used wherever geometry is prepared on the Python side
(camera basis, scene construction). Kernels work on plain `taichi.math.vec3`
values instead, see `src.pathtracer.core.ray`.

Example:
    >>> from src.pathtracer.core.vector import Vec3, VectorType
    >>> a = Vec3(1.0, 2.0, 3.0, VectorType.POINT)
    >>> b = a + Vec3(1.0, 1.0, 1.0)
    >>> b.tag is VectorType.POINT
    True
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

# Absolute tolerance used by Vec3.__eq__
EQUALITY_EPSILON = 1e-4

# Components smaller than this are treated as zero by near_zero()
NEAR_ZERO_EPSILON = 1e-8


class VectorType(IntEnum):
    """Semantic tag attached to a Vec3."""

    VECTOR = 0
    POINT = 1
    COLOR = 2


def fuzzy_equal(lhs: float, rhs: float) -> bool:
    """Compare two floats with the absolute tolerance EQUALITY_EPSILON."""
    return abs(lhs - rhs) < EQUALITY_EPSILON


@dataclass(frozen=True, eq=False)
class Vec3:
    """Immutable three-component vector with a semantic tag.

    Attributes:
        x: First component (red for colors).
        y: Second component (green for colors).
        z: Third component (blue for colors).
        tag: Advisory semantic tag, preserved from the left operand.
    """

    x: float
    y: float
    z: float
    tag: VectorType = VectorType.VECTOR

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z, self.tag)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z, self.tag)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z, self.tag)

    def __mul__(self, other: Vec3 | float) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(self.x * other.x, self.y * other.y, self.z * other.z, self.tag)
        return Vec3(self.x * other, self.y * other, self.z * other, self.tag)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3(self.x * other, self.y * other, self.z * other, self.tag)

    def __truediv__(self, other: Vec3 | float) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3(self.x / other.x, self.y / other.y, self.z / other.z, self.tag)
        return Vec3(self.x / other, self.y / other, self.z / other, self.tag)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return (
            fuzzy_equal(self.x, other.x)
            and fuzzy_equal(self.y, other.y)
            and fuzzy_equal(self.z, other.z)
            and self.tag == other.tag
        )

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def dot(self, other: Vec3) -> float:
        """Dot product of two vectors."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        """Cross product; the result keeps this vector's tag."""
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
            self.tag,
        )

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def unit_vector(self) -> Vec3:
        """Return this vector scaled to unit length.

        The vector must have non-zero length. A zero vector raises
        ZeroDivisionError, which is a bug in the caller.
        """
        return self / self.length()

    def near_zero(self) -> bool:
        """Return True if every component is within NEAR_ZERO_EPSILON of zero."""
        return (
            abs(self.x) < NEAR_ZERO_EPSILON
            and abs(self.y) < NEAR_ZERO_EPSILON
            and abs(self.z) < NEAR_ZERO_EPSILON
        )

    def with_tag(self, tag: VectorType) -> Vec3:
        """Return the same components carrying a different tag."""
        return Vec3(self.x, self.y, self.z, tag)

    def to_tuple(self) -> tuple[float, float, float]:
        return (float(self.x), float(self.y), float(self.z))

    # -------------------------------------------------------------------------
    # Random sampling
    # -------------------------------------------------------------------------

    @staticmethod
    def random(rng: np.random.Generator, low: float = 0.0, high: float = 1.0) -> Vec3:
        """Vector with components drawn independently from [low, high)."""
        x, y, z = rng.uniform(low, high, size=3)
        return Vec3(float(x), float(y), float(z), VectorType.VECTOR)

    @staticmethod
    def random_in_unit_sphere(rng: np.random.Generator) -> Vec3:
        """Uniform point strictly inside the unit ball, by rejection sampling."""
        while True:
            p = Vec3.random(rng, -1.0, 1.0)
            if p.length_squared() < 1.0:
                return p

    @staticmethod
    def random_unit_vector(rng: np.random.Generator) -> Vec3:
        return Vec3.random_in_unit_sphere(rng).unit_vector()

    @staticmethod
    def random_in_hemisphere(normal: Vec3, rng: np.random.Generator) -> Vec3:
        """Point in the unit ball flipped into the hemisphere around normal."""
        in_unit_sphere = Vec3.random_in_unit_sphere(rng)
        if in_unit_sphere.dot(normal) > 0.0:
            return in_unit_sphere
        return -in_unit_sphere

    @staticmethod
    def random_in_unit_disk(rng: np.random.Generator) -> Vec3:
        """Uniform point inside the unit disk in the xy-plane (z = 0)."""
        while True:
            x, y = rng.uniform(-1.0, 1.0, size=2)
            p = Vec3(float(x), float(y), 0.0, VectorType.POINT)
            if p.length_squared() < 1.0:
                return p


def vector(x: float, y: float, z: float) -> Vec3:
    return Vec3(x, y, z, VectorType.VECTOR)


def point(x: float, y: float, z: float) -> Vec3:
    return Vec3(x, y, z, VectorType.POINT)


def color(r: float, g: float, b: float) -> Vec3:
    return Vec3(r, g, b, VectorType.COLOR)
