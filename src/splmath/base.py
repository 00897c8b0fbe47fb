"""Shared machinery for the fixed-size value types.

``KindGeneric`` turns a class into a family of per-kind subclasses:
``Vector3[ScalarKind.IEEE32]`` is a cached subclass of ``Vector3`` whose
instances always store float32 components. It also carries the
component-wise arithmetic shared by vectors, colors and matrices.

``FixedTuple`` is the common base of vectors and colors. Its only storage
is a NumPy array of exactly N components; the named accessors (``x``,
``y``, ``r``, ``g`` ...) are properties over array slots, so reading a
component by name or by position always yields the same value.

Every mutating operator computes its result first and writes it back in
one assignment, so an operator that raises leaves the receiver untouched.
"""

from __future__ import annotations

import logging
import operator
from typing import Any, ClassVar, Self

import numpy as np

from splmath.config import get_config
from splmath.errors import ComponentIndexError, ScalarKindError, ZeroDivisorError
from splmath.types import KindLike, ScalarKind, require_numeric

logger = logging.getLogger(__name__)

_SPECIALIZED: dict[tuple[type, ScalarKind], type] = {}


class KindGeneric:
    """Base of every value type: ``Cls[kind]`` specialization plus arithmetic.

    The class that declares ``_shape`` is the generic root of a family.
    Specialized subclasses set ``_kind``; the root leaves it ``None``.
    Subclasses store their components in ``self._data``.
    """

    __slots__ = ("_data",)

    _shape: ClassVar[tuple[int, ...]]
    _root: ClassVar[type]
    _kind: ClassVar[ScalarKind | None] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "_shape" in cls.__dict__:
            cls._root = cls
            cls._kind = None

    def __class_getitem__(cls, kind: KindLike) -> type[Self]:
        root = cls._root
        kind = require_numeric(ScalarKind.from_dtype(kind), root.__name__)
        key = (root, kind)
        if key not in _SPECIALIZED:
            _SPECIALIZED[key] = type(
                f"{root.__name__}[{kind.name}]",
                (root,),
                {"__slots__": (), "_kind": kind, "__module__": root.__module__},
            )
        return _SPECIALIZED[key]

    @classmethod
    def _resolve_kind(cls, kind: KindLike | None, source_kind: ScalarKind | None) -> ScalarKind:
        """Pick the storage kind: explicit > class > source > configured default."""
        if kind is not None:
            resolved = ScalarKind.from_dtype(kind)
        elif cls._kind is not None:
            resolved = cls._kind
        elif source_kind is not None:
            resolved = source_kind
        else:
            resolved = get_config().kind
        return require_numeric(resolved, cls._root.__name__)

    @classmethod
    def _from_array(cls, data: np.ndarray) -> Self:
        """Wrap ``data`` without copying it (the new object aliases the array)."""
        kind = ScalarKind.from_dtype(data.dtype)
        obj = object.__new__(cls._root[kind])
        obj._data = data
        return obj

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.from_dtype(self._data.dtype)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def astype(self, kind: KindLike) -> Self:
        """Copy converted to ``kind`` (C-style conversion, may narrow)."""
        target = require_numeric(ScalarKind.from_dtype(kind), self._root.__name__)
        return self._from_array(self._data.astype(target.dtype, casting="unsafe"))

    def copy(self) -> Self:
        return self._from_array(self._data.copy())

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the components as a NumPy array."""
        return self._data.copy()

    __copy__ = copy

    def __deepcopy__(self, memo) -> Self:
        return self.copy()

    def __reduce__(self):
        return (_rebuild, (self._root, self.kind.value, self._data.copy()))

    __hash__ = None

    # Keep NumPy scalars from broadcasting over us; ``s * v`` reaches __rmul__
    __array_ufunc__ = None

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        data = self.to_numpy()
        return data.astype(dtype) if dtype is not None else data

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _same_family(self, other: Any) -> bool:
        return isinstance(other, KindGeneric) and other._root is self._root

    def _check_kind(self, other: KindGeneric) -> None:
        if other._data.dtype != self._data.dtype:
            raise ScalarKindError(
                f"{type(self).__name__}: cannot combine {self.kind.name} with "
                f"{other.kind.name} components; convert with astype() first"
            )

    def _scalar(self, s: Any) -> np.generic:
        if isinstance(s, KindGeneric):
            raise TypeError(f"{type(self).__name__}: expected a scalar, got {type(s).__name__}")
        return self.kind.cast(s)

    def _divided(self, s: Any) -> np.ndarray:
        """Component-wise quotient. Integer kinds truncate toward zero."""
        s = self._scalar(s)
        if s == 0:
            raise ZeroDivisorError(f"{type(self).__name__}: division by zero")
        data = self._data
        if self.kind.is_float:
            return data / s
        # Truncate toward zero; fmod takes the sign of the dividend
        return (data - np.fmod(data, s)) // s

    # ------------------------------------------------------------------
    # Equality, additive group and scalar scaling
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not self._same_family(other):
            return NotImplemented
        # The kind is part of the value
        if other._data.dtype != self._data.dtype:
            return False
        return bool(np.array_equal(self._data, other._data))

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __neg__(self) -> Self:
        return self._from_array(-self._data)

    def __pos__(self) -> Self:
        return self.copy()

    def __add__(self, other: Any) -> Self:
        if not self._same_family(other):
            return NotImplemented
        self._check_kind(other)
        return self._from_array(self._data + other._data)

    def __sub__(self, other: Any) -> Self:
        if not self._same_family(other):
            return NotImplemented
        self._check_kind(other)
        return self._from_array(self._data - other._data)

    def __iadd__(self, other: Any) -> Self:
        if not self._same_family(other):
            return NotImplemented
        self._check_kind(other)
        self._data[...] = self._data + other._data
        return self

    def __isub__(self, other: Any) -> Self:
        if not self._same_family(other):
            return NotImplemented
        self._check_kind(other)
        self._data[...] = self._data - other._data
        return self

    def __mul__(self, s: Any):
        if isinstance(s, KindGeneric):
            return NotImplemented
        return self._from_array(self._data * self._scalar(s))

    def __rmul__(self, s: Any) -> Self:
        if isinstance(s, KindGeneric):
            return NotImplemented
        return self._from_array(self._scalar(s) * self._data)

    def __imul__(self, s: Any) -> Self:
        if isinstance(s, KindGeneric):
            return NotImplemented
        self._data[...] = self._data * self._scalar(s)
        return self

    def __truediv__(self, s: Any) -> Self:
        if isinstance(s, KindGeneric):
            return NotImplemented
        return self._from_array(self._divided(s))

    def __itruediv__(self, s: Any) -> Self:
        if isinstance(s, KindGeneric):
            return NotImplemented
        self._data[...] = self._divided(s)
        return self

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def print(self) -> None:
        """Dump the components at DEBUG level when ``config.debug`` is set."""
        if not get_config().debug:
            return
        rows = np.atleast_2d(self.to_numpy())
        logger.debug("[%s]", type(self).__name__)
        for row in rows:
            logger.debug("%s", " ".join(f"{float(v):10.9f}" for v in row))


def _rebuild(root: type, kind_name: str, data: np.ndarray) -> KindGeneric:
    return root._from_array(np.asarray(data, dtype=ScalarKind(kind_name).dtype))


class FixedTuple(KindGeneric):
    """N scalar components stored in a single NumPy array.

    Subclasses declare ``_shape = (N,)`` and ``_names`` (one accessor
    name per slot).
    """

    __slots__ = ()

    _names: ClassVar[tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "_names" in cls.__dict__:
            for slot, name in enumerate(cls._names):
                setattr(cls, name, _component_property(slot, name))

    def __new__(cls, *args, kind: KindLike | None = None) -> Self:
        if len(args) == 1 and isinstance(args[0], FixedTuple):
            src = args[0]
            if not cls._accepts(src):
                raise TypeError(f"{cls._root.__name__}: cannot convert from {type(src).__name__}")
            target = cls._resolve_kind(kind, src.kind)
            values = cls._resize(src._data)
        elif len(args) == 1 and _is_array_like(args[0]):
            arr = np.asarray(args[0])
            if arr.ndim != 1 or arr.shape[0] == 0:
                raise ValueError(
                    f"{cls._root.__name__} expects a flat sequence of components, "
                    f"got shape {arr.shape}"
                )
            target = cls._resolve_kind(kind, _array_kind(args[0]))
            values = cls._components(tuple(arr), target)
        else:
            target = cls._resolve_kind(kind, None)
            values = cls._components(args, target)

        obj = object.__new__(cls._root[target])
        obj._data = values.astype(target.dtype, casting="unsafe")
        return obj

    @classmethod
    def _accepts(cls, src: FixedTuple) -> bool:
        return src._root is cls._root

    @classmethod
    def _resize(cls, data: np.ndarray) -> np.ndarray:
        """Copy the overlapping prefix of ``data``; zero-fill the rest."""
        size = cls._shape[0]
        out = np.zeros(size, dtype=data.dtype)
        n = min(size, data.shape[0])
        out[:n] = data[:n]
        return out

    @classmethod
    def _components(cls, values: tuple, kind: ScalarKind) -> np.ndarray:
        """Build the storage array from explicit component values."""
        size = cls._shape[0]
        if len(values) == 0:
            return np.zeros(size, dtype=kind.dtype)
        if len(values) != size:
            raise TypeError(
                f"{cls._root.__name__} expects 0 or {size} components, got {len(values)}"
            )
        return np.array([kind.cast(v) for v in values], dtype=kind.dtype)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def _slot(self, i: Any) -> int:
        i = operator.index(i)
        if not 0 <= i < self._shape[0]:
            raise ComponentIndexError(i, self._shape[0], type(self).__name__)
        return i

    def __getitem__(self, i: int) -> np.generic:
        return self._data[self._slot(i)]

    def __setitem__(self, i: int, value: Any) -> None:
        slot = self._slot(i)
        self._data[slot] = self._scalar(value)

    def __len__(self) -> int:
        return self._shape[0]

    def __iter__(self):
        return iter(list(self._data))

    def __repr__(self) -> str:
        body = ", ".join(repr(v) for v in self._data.tolist())
        return f"{type(self).__name__}({body})"


def _is_array_like(obj: Any) -> bool:
    return isinstance(obj, np.ndarray | list | tuple)


def _array_kind(obj: Any) -> ScalarKind | None:
    """Kind carried by a NumPy array; plain sequences carry none."""
    if not isinstance(obj, np.ndarray) or obj.dtype.kind not in "iuf":
        return None
    try:
        return ScalarKind.from_dtype(obj.dtype)
    except ScalarKindError:
        return None


def _component_property(slot: int, name: str) -> property:
    def getter(self) -> np.generic:
        return self._data[slot]

    def setter(self, value: Any) -> None:
        self._data[slot] = self._scalar(value)

    return property(getter, setter, doc=f"Component {slot} ({name}).")
