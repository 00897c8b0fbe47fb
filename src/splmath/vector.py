"""Two, three and four component vectors.

Vectors are value types generic over a scalar kind:

    >>> from splmath.types import ScalarKind
    >>> Vector3f = Vector3[ScalarKind.IEEE32]
    >>> v = Vector3f(1.0, 2.0, 3.0)
    >>> v[0] == v.x
    True

Constructing from a vector of another dimension keeps the overlapping
prefix: ``Vector3(Vector4(1, 2, 3, 4))`` drops ``w`` and
``Vector4(Vector3(1, 2, 3))`` appends ``w = 0``.

Naming follows Python conventions; ``get_normalized`` and
``cross_product`` correspond to the classic ``getNormalized`` and
``crossProduct`` operations.
"""

from __future__ import annotations

import math
from typing import Any, Self

import numpy as np

from splmath.base import FixedTuple
from splmath.config import get_config
from splmath.errors import ContractError, ScalarKindError
from splmath.types import ScalarKind


class VectorBase(FixedTuple):
    """Operations shared by all vector dimensions."""

    __slots__ = ()

    @classmethod
    def _accepts(cls, src: FixedTuple) -> bool:
        return isinstance(src, VectorBase)

    def dot(self, other: VectorBase) -> np.generic:
        """Sum of component products, in this vector's kind.

        Integer kinds wrap on overflow; upcast with ``astype`` first when
        the extra range matters.
        """
        if not self._same_family(other):
            raise TypeError(f"{type(self).__name__}: cannot dot with {type(other).__name__}")
        self._check_kind(other)
        return (self._data * other._data).sum(dtype=self._data.dtype)

    def __mul__(self, other: Any):
        if isinstance(other, VectorBase):
            if not self._same_family(other):
                return NotImplemented
            return self.dot(other)
        return super().__mul__(other)

    __matmul__ = dot

    def square(self) -> float:
        """Sum of squared components, always computed in float64."""
        wide = self._data.astype(np.float64)
        return float(np.sum(wide * wide))

    def length(self) -> float:
        """Euclidean length in float64.

        Equal to ``sqrt(square())``, but computed with ``math.hypot`` so it
        stays finite and non-zero wherever the true length is.
        """
        result = math.hypot(*self._data.astype(np.float64).tolist())
        if not result >= 0.0:
            raise ContractError(f"{type(self).__name__}: length is {result}, expected >= 0")
        return result

    def normalize(self, length: float = 1.0) -> Self:
        """Rescale in place to ``length``.

        The zero vector has no direction; normalizing it leaves it
        unchanged and is not an error.

        :param length: Target length, must be positive
        :returns: self
        :raises ScalarKindError: For integer kinds, where unit length is not representable
        :raises ContractError: If ``length <= 0`` or the result misses the target
        """
        if not self.kind.is_float:
            raise ScalarKindError(
                f"{type(self).__name__}: normalize requires a float kind, got {self.kind.name}"
            )
        target = float(length)
        if not target > 0.0:
            raise ContractError(
                f"{type(self).__name__}: normalize target must be > 0, got {target}"
            )

        current = self.length()
        if current == 0.0:
            return self

        # Divide first so huge components cannot overflow on the way
        candidate = (self._data.astype(np.float64) / current * target).astype(self._data.dtype)
        achieved = math.hypot(*candidate.astype(np.float64).tolist())
        tolerance = get_config().eps * max(1.0, target)
        if not abs(achieved - target) < tolerance:
            raise ContractError(
                f"{type(self).__name__}: normalized length {achieved} differs from {target}"
            )
        self._data[...] = candidate
        return self

    def get_normalized(self, length: float = 1.0) -> Self:
        """Normalized copy; see ``normalize``."""
        return self.copy().normalize(length)

    def get_round_int(self) -> VectorBase:
        """Components rounded to the nearest integer (ties to even) as INT32."""
        return self._to_int32(np.rint(self._data))

    def get_floor_int(self) -> VectorBase:
        """Components floored to INT32."""
        return self._to_int32(np.floor(self._data))

    def get_ceil_int(self) -> VectorBase:
        """Components ceiled to INT32."""
        return self._to_int32(np.ceil(self._data))

    def _to_int32(self, values: np.ndarray) -> VectorBase:
        return self._from_array(values.astype(ScalarKind.INT32.dtype, casting="unsafe"))


class Vector2(VectorBase):
    """Vector with components ``x, y``."""

    __slots__ = ()
    _shape = (2,)
    _names = ("x", "y")


class Vector3(VectorBase):
    """Vector with components ``x, y, z``."""

    __slots__ = ()
    _shape = (3,)
    _names = ("x", "y", "z")

    def cross_product(self, other: Vector3) -> Self:
        """Right-handed cross product ``self x other``."""
        if not isinstance(other, Vector3):
            raise TypeError(f"cross_product needs a Vector3, got {type(other).__name__}")
        self._check_kind(other)
        a, b = self._data, other._data
        # x = ay*bz - az*by, y = az*bx - ax*bz, z = ax*by - ay*bx
        return self._from_array(a[[1, 2, 0]] * b[[2, 0, 1]] - a[[2, 0, 1]] * b[[1, 2, 0]])


class Vector4(VectorBase):
    """Vector with components ``x, y, z, w``."""

    __slots__ = ()
    _shape = (4,)
    _names = ("x", "y", "z", "w")

    @classmethod
    def from_vector3(cls, v: Vector3, w: Any = 0) -> Vector4:
        """Widen a Vector3 with an explicit ``w`` (1 for points, 0 for directions)."""
        out = cls(v)
        out.w = w
        return out


_VECTORS_BY_SIZE: dict[int, type[VectorBase]] = {2: Vector2, 3: Vector3, 4: Vector4}


def vector_class(size: int) -> type[VectorBase]:
    """Return the vector class with ``size`` components."""
    try:
        return _VECTORS_BY_SIZE[size]
    except KeyError:
        raise ValueError(f"No vector type with {size} components") from None


Vector2i = Vector2[ScalarKind.INT32]
Vector2f = Vector2[ScalarKind.IEEE32]
Vector2d = Vector2[ScalarKind.IEEE64]
Vector3i = Vector3[ScalarKind.INT32]
Vector3f = Vector3[ScalarKind.IEEE32]
Vector3d = Vector3[ScalarKind.IEEE64]
Vector4i = Vector4[ScalarKind.INT32]
Vector4f = Vector4[ScalarKind.IEEE32]
Vector4d = Vector4[ScalarKind.IEEE64]
