"""Scalar kinds and type aliases for splmath.

Every vector, matrix and color component is stored as one of the closed
set of scalar kinds below. Each kind maps onto a NumPy dtype, which is
what actually holds the data.

Note: ``IEEE128`` maps to ``numpy.longdouble``. Its real precision is
whatever the platform's ``long double`` is (80-bit extended on x86 Linux,
plain 64-bit on Windows and Apple silicon).
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias

import numpy as np

from splmath.errors import ScalarKindError

if TYPE_CHECKING:
    from splmath.registry import ScalarTypeId


class ScalarKind(Enum):
    """Closed set of component storage kinds."""

    UINT8 = "uint8"
    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT32 = "uint32"
    INT32 = "int32"
    UINT64 = "uint64"
    INT64 = "int64"
    IEEE32 = "ieee32"
    IEEE64 = "ieee64"
    IEEE128 = "ieee128"
    VOIDP = "voidp"

    @property
    def dtype(self) -> np.dtype:
        return _KIND_DTYPES[self]

    @property
    def bits(self) -> int:
        return self.dtype.itemsize * 8

    @property
    def is_float(self) -> bool:
        return self in _FLOAT_KINDS

    @property
    def is_integer(self) -> bool:
        return not self.is_float and self is not ScalarKind.VOIDP

    @property
    def is_signed(self) -> bool:
        return self.is_float or self.value.startswith("int")

    @property
    def is_numeric(self) -> bool:
        """False only for the opaque pointer kind."""
        return self is not ScalarKind.VOIDP

    @property
    def type_id(self) -> ScalarTypeId:
        from splmath.registry import ScalarTypeId

        return ScalarTypeId.for_kind(self)

    def cast(self, value) -> np.generic:
        """Convert a scalar to this kind with C-style (unsafe) conversion.

        Floats headed for an integer kind truncate toward zero and
        out-of-range integers wrap, the same as an explicit C cast.
        """
        return np.asarray(value).astype(self.dtype, casting="unsafe")[()]

    @classmethod
    def from_dtype(cls, obj) -> ScalarKind:
        """Resolve a kind from a dtype, NumPy scalar type, Python type or kind name.

        :param obj: ``ScalarKind``, kind name (``"ieee32"``), NumPy dtype or
            scalar type, or the Python ``int``/``float`` types
        :returns: Matching ScalarKind
        :raises ScalarKindError: If no kind matches
        """
        if isinstance(obj, ScalarKind):
            return obj
        if obj is int:
            return cls.INT64
        if obj is float:
            return cls.IEEE64
        if isinstance(obj, str):
            try:
                return cls(obj.lower())
            except ValueError:
                pass
        try:
            dtype = np.dtype(obj)
        except TypeError as exc:
            raise ScalarKindError(f"Not a scalar kind: {obj!r}") from exc
        for kind, kind_dtype in _KIND_DTYPES.items():
            if kind is not ScalarKind.VOIDP and kind_dtype == dtype:
                return kind
        raise ScalarKindError(f"No scalar kind for dtype {dtype}")


_KIND_DTYPES: dict[ScalarKind, np.dtype] = {
    ScalarKind.UINT8: np.dtype(np.uint8),
    ScalarKind.INT8: np.dtype(np.int8),
    ScalarKind.UINT16: np.dtype(np.uint16),
    ScalarKind.INT16: np.dtype(np.int16),
    ScalarKind.UINT32: np.dtype(np.uint32),
    ScalarKind.INT32: np.dtype(np.int32),
    ScalarKind.UINT64: np.dtype(np.uint64),
    ScalarKind.INT64: np.dtype(np.int64),
    ScalarKind.IEEE32: np.dtype(np.float32),
    ScalarKind.IEEE64: np.dtype(np.float64),
    ScalarKind.IEEE128: np.dtype(np.longdouble),
    ScalarKind.VOIDP: np.dtype(np.uintp),
}

_FLOAT_KINDS = frozenset({ScalarKind.IEEE32, ScalarKind.IEEE64, ScalarKind.IEEE128})

# Index, enumerator and size values are 32-bit signed integers
INDEX_KIND = ScalarKind.INT32
ENUM_KIND = ScalarKind.INT32
SIZEI_KIND = ScalarKind.INT32

NUMERIC_KINDS: tuple[ScalarKind, ...] = tuple(k for k in ScalarKind if k.is_numeric)
FLOAT_KINDS: tuple[ScalarKind, ...] = tuple(k for k in ScalarKind if k.is_float)
INTEGER_KINDS: tuple[ScalarKind, ...] = tuple(k for k in ScalarKind if k.is_integer)

# Anything accepted where a kind is expected
KindLike: TypeAlias = ScalarKind | str | np.dtype | type

# Component sequences accepted by the tuple constructors
ArrayLike: TypeAlias = Sequence[float] | np.ndarray

Scalar: TypeAlias = int | float | np.number


def require_numeric(kind: ScalarKind, owner: str) -> ScalarKind:
    """Reject the opaque pointer kind for arithmetic tuples."""
    if not kind.is_numeric:
        raise ScalarKindError(f"{owner}: {kind.name} is opaque and cannot hold components")
    return kind
