"""3x3 and 4x4 matrices built from column vectors.

Column convention
-----------------
A matrix is N column vectors. ``m[c]`` (also ``m.x``, ``m.y``, ``m.z``,
``m.w``) is column ``c`` and ``m[c][r]`` is the element in row ``r``.
Storage is an ``(N, N)`` array indexed ``[column, row]``; the column
vectors returned by indexing alias that storage, so ``m.x.y = 2`` writes
into the matrix.

Matrix times vector is the usual linear map, expanded per row::

    out.x = m.x.x * v.x + m.y.x * v.y + m.z.x * v.z
    out.y = m.x.y * v.x + m.y.y * v.y + m.z.y * v.z
    out.z = m.x.z * v.x + m.y.z * v.y + m.z.z * v.z

``to_numpy`` / ``from_numpy`` use the conventional row-major layout
``a[row, col]``, so ``m.to_numpy() @ v.to_numpy()`` equals ``m * v``.

Camera matrices (model-view, orthographic, frustum, viewport) are plain
``Matrix4`` values; ``CameraMatrix`` tags only say which one a camera holds.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable
from typing import Any, ClassVar, Self

import numpy as np

from splmath.base import KindGeneric
from splmath.errors import ComponentIndexError, ContractError, ScalarKindError
from splmath.registry import CameraMatrix
from splmath.rotation import (
    axis_angle_to_quaternion,
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
)
from splmath.types import KindLike, ScalarKind
from splmath.vector import Vector3, VectorBase, vector_class


def _column_property(col: int, name: str) -> property:
    def getter(self) -> VectorBase:
        return self._column(col)

    def setter(self, column: Any) -> None:
        self[col] = column

    return property(getter, setter, doc=f"Column {col} ({name}).")


class MatrixBase(KindGeneric):
    """Square matrix of ``N`` column vectors."""

    __slots__ = ()

    _names: ClassVar[tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "_names" in cls.__dict__:
            for col, name in enumerate(cls._names):
                setattr(cls, name, _column_property(col, name))

    def __new__(cls, *columns, kind: KindLike | None = None) -> Self:
        n = cls._shape[0]
        if len(columns) == 1 and isinstance(columns[0], MatrixBase):
            src = columns[0]
            target = cls._resolve_kind(kind, src.kind)
            data = cls._resize(src._data)
        elif len(columns) == 0:
            target = cls._resolve_kind(kind, None)
            data = np.zeros((n, n), dtype=target.dtype)
        elif len(columns) == n:
            first = columns[0]
            source_kind = first.kind if isinstance(first, VectorBase) else None
            target = cls._resolve_kind(kind, source_kind)
            data = np.stack([cls._column_values(c, target) for c in columns])
        else:
            raise TypeError(
                f"{cls._root.__name__} expects 0 or {n} columns or one matrix, got {len(columns)}"
            )

        obj = object.__new__(cls._root[target])
        obj._data = data.astype(target.dtype, casting="unsafe")
        return obj

    @classmethod
    def _column_values(cls, column: Any, kind: ScalarKind) -> np.ndarray:
        n = cls._shape[0]
        if isinstance(column, VectorBase):
            values = column._data
        else:
            values = np.asarray(column)
        if values.shape != (n,):
            raise ValueError(
                f"{cls._root.__name__} columns need {n} components, got {values.shape}"
            )
        return values.astype(kind.dtype, casting="unsafe")

    @classmethod
    def _resize(cls, data: np.ndarray) -> np.ndarray:
        """Keep the upper-left block; pad to the identity when widening."""
        n = cls._shape[0]
        out = np.eye(n, dtype=data.dtype)
        m = min(n, data.shape[0])
        out[:m, :m] = data[:m, :m]
        return out

    # ------------------------------------------------------------------
    # Alternative constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls, kind: KindLike | None = None) -> Self:
        target = cls._resolve_kind(kind, None)
        return cls._from_array(np.eye(cls._shape[0], dtype=target.dtype))

    @classmethod
    def from_numpy(cls, array: np.ndarray, kind: KindLike | None = None) -> Self:
        """Build from a row-major array ``a[row, col]``.

        The array's dtype picks the kind when it is a supported one and
        ``kind`` is not given.
        """
        array = np.asarray(array)
        n = cls._shape[0]
        if array.shape != (n, n):
            raise ValueError(f"{cls._root.__name__} needs a {n}x{n} array, got {array.shape}")
        source_kind = None
        if array.dtype.kind in "iuf":
            try:
                source_kind = ScalarKind.from_dtype(array.dtype)
            except ScalarKindError:
                source_kind = None
        target = cls._resolve_kind(kind, source_kind)
        return cls._from_array(array.T.astype(target.dtype, casting="unsafe"))

    @classmethod
    def from_rows(cls, *rows: Any, kind: KindLike | None = None) -> Self:
        """Build from N row sequences."""
        return cls.from_numpy(np.array([np.asarray(r) for r in rows]), kind=kind)

    def to_numpy(self) -> np.ndarray:
        """Row-major copy, ``a[row, col]``."""
        return self._data.T.copy()

    def transpose(self) -> Self:
        return self._from_array(self._data.T.copy())

    @property
    def T(self) -> Self:
        return self.transpose()

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def _column(self, c: Any) -> VectorBase:
        n = self._shape[0]
        c = operator.index(c)
        if not 0 <= c < n:
            raise ComponentIndexError(c, n, type(self).__name__)
        return vector_class(n)._from_array(self._data[c])

    def __getitem__(self, c: int) -> VectorBase:
        return self._column(c)

    def __setitem__(self, c: int, column: Any) -> None:
        target = self._column(c)
        if isinstance(column, VectorBase):
            self._check_kind(column)
        target._data[...] = self._column_values(column, self.kind)

    def __len__(self) -> int:
        return self._shape[0]

    def __iter__(self):
        return (self._column(c) for c in range(self._shape[0]))

    def __repr__(self) -> str:
        cols = ", ".join(repr(tuple(col)) for col in self._data.tolist())
        return f"{type(self).__name__}({cols})"

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def _apply(self, v: np.ndarray) -> np.ndarray:
        """``out[r] = sum_c self[c][r] * v[c]``, accumulated column by column."""
        k = v.shape[0]
        cols = self._data[:k, :k]
        out = cols[0] * v[0]
        for c in range(1, k):
            out = out + cols[c] * v[c]
        return out

    def __mul__(self, other: Any):
        if isinstance(other, VectorBase):
            return self.transform(other)
        if isinstance(other, MatrixBase):
            if not self._same_family(other):
                return NotImplemented
            self._check_kind(other)
            return self._from_array(np.stack([self._apply(col) for col in other._data]))
        return super().__mul__(other)

    def __matmul__(self, other: Any):
        if isinstance(other, VectorBase | MatrixBase):
            return self.__mul__(other)
        return NotImplemented

    def transform(self, v: VectorBase) -> VectorBase:
        """Apply the linear map to ``v``.

        A vector with fewer components than the matrix uses the matching
        upper-left block, so ``Matrix4 * Vector3`` ignores translation.
        """
        n = self._shape[0]
        if len(v) > n or len(v) < 3:
            raise TypeError(f"{type(self).__name__} cannot transform a {type(v).__name__}")
        self._check_kind(v)
        return v._from_array(self._apply(v._data))


class Matrix3(MatrixBase):
    """3x3 matrix with columns ``x, y, z``."""

    __slots__ = ()
    _shape = (3, 3)
    _names = ("x", "y", "z")

    @classmethod
    def rotation(cls, axis: Any, angle: float, kind: KindLike | None = None) -> Self:
        """Rotation by ``angle`` radians about ``axis`` (right-handed).

        A zero axis has no direction and yields the identity.
        """
        q = axis_angle_to_quaternion(np.asarray(axis, dtype=np.float64), angle)
        return _float_matrix(cls, quaternion_to_rotation_matrix(q), kind)

    @classmethod
    def from_quaternion(cls, q: Any, kind: KindLike | None = None) -> Self:
        """Rotation matrix from a (w, x, y, z) quaternion."""
        return _float_matrix(cls, quaternion_to_rotation_matrix(np.asarray(q)), kind)

    def to_quaternion(self) -> np.ndarray:
        """Unit (w, x, y, z) quaternion of a rotation matrix."""
        return rotation_matrix_to_quaternion(self.to_numpy().astype(np.float64))


class Matrix4(MatrixBase):
    """4x4 matrix with columns ``x, y, z, w``.

    The ``w`` column holds the translation of an affine transform.
    """

    __slots__ = ()
    _shape = (4, 4)
    _names = ("x", "y", "z", "w")

    @classmethod
    def translation(cls, tx: float, ty: float, tz: float, kind: KindLike | None = None) -> Self:
        m = np.eye(4)
        m[:3, 3] = (tx, ty, tz)
        return _float_matrix(cls, m, kind)

    @classmethod
    def scaling(cls, sx: float, sy: float, sz: float, kind: KindLike | None = None) -> Self:
        return _float_matrix(cls, np.diag([sx, sy, sz, 1.0]), kind)

    @classmethod
    def rotation(cls, axis: Any, angle: float, kind: KindLike | None = None) -> Self:
        """Rotation by ``angle`` radians about ``axis``; see ``Matrix3.rotation``."""
        m = np.eye(4)
        q = axis_angle_to_quaternion(np.asarray(axis, dtype=np.float64), angle)
        m[:3, :3] = quaternion_to_rotation_matrix(q)
        return _float_matrix(cls, m, kind)

    @classmethod
    def look_at(cls, eye: Any, center: Any, up: Any, kind: KindLike | None = None) -> Self:
        """Model-view matrix looking from ``eye`` toward ``center``.

        :raises ContractError: If ``eye == center`` or ``up`` is parallel
            to the viewing direction
        """
        eye, center, up = (Vector3(p, kind=ScalarKind.IEEE64) for p in (eye, center, up))
        forward = (center - eye).get_normalized()
        side = forward.cross_product(up).get_normalized()
        if forward.square() == 0.0 or side.square() == 0.0:
            raise ContractError("look_at: eye, center and up do not define a view direction")
        upward = side.cross_product(forward)

        m = np.eye(4)
        m[0, :3], m[0, 3] = side.to_numpy(), -(side * eye)
        m[1, :3], m[1, 3] = upward.to_numpy(), -(upward * eye)
        m[2, :3], m[2, 3] = (-forward).to_numpy(), forward * eye
        return _float_matrix(cls, m, kind)

    @classmethod
    def ortho(
        cls,
        left: float,
        right: float,
        bottom: float,
        top: float,
        near: float,
        far: float,
        kind: KindLike | None = None,
    ) -> Self:
        """Orthographic projection onto the [-1, 1] cube."""
        _require_extent(left, right, bottom, top, near, far)
        m = np.eye(4)
        m[0, 0] = 2.0 / (right - left)
        m[1, 1] = 2.0 / (top - bottom)
        m[2, 2] = -2.0 / (far - near)
        m[0, 3] = -(right + left) / (right - left)
        m[1, 3] = -(top + bottom) / (top - bottom)
        m[2, 3] = -(far + near) / (far - near)
        return _float_matrix(cls, m, kind)

    @classmethod
    def frustum(
        cls,
        left: float,
        right: float,
        bottom: float,
        top: float,
        near: float,
        far: float,
        kind: KindLike | None = None,
    ) -> Self:
        """Perspective projection of the given view frustum.

        :raises ContractError: Unless ``0 < near < far`` and the extents are non-empty
        """
        _require_extent(left, right, bottom, top, near, far)
        if not 0.0 < near < far:
            raise ContractError(f"frustum: need 0 < near < far, got near={near}, far={far}")
        m = np.zeros((4, 4))
        m[0, 0] = 2.0 * near / (right - left)
        m[1, 1] = 2.0 * near / (top - bottom)
        m[0, 2] = (right + left) / (right - left)
        m[1, 2] = (top + bottom) / (top - bottom)
        m[2, 2] = -(far + near) / (far - near)
        m[3, 2] = -1.0
        m[2, 3] = -2.0 * far * near / (far - near)
        return _float_matrix(cls, m, kind)

    @classmethod
    def perspective(
        cls, fov_y: float, aspect: float, near: float, far: float, kind: KindLike | None = None
    ) -> Self:
        """Symmetric frustum from a vertical field of view in radians."""
        if not 0.0 < fov_y < math.pi or not aspect > 0.0:
            raise ContractError(f"perspective: invalid fov_y={fov_y} or aspect={aspect}")
        top = near * math.tan(fov_y / 2)
        right = top * aspect
        return cls.frustum(-right, right, -top, top, near, far, kind=kind)

    @classmethod
    def viewport(
        cls,
        x: float,
        y: float,
        width: float,
        height: float,
        near: float = 0.0,
        far: float = 1.0,
        kind: KindLike | None = None,
    ) -> Self:
        """Map normalized device coordinates to window coordinates."""
        if not width > 0 or not height > 0:
            raise ContractError(f"viewport: size must be positive, got {width}x{height}")
        m = np.eye(4)
        m[0, 0], m[0, 3] = width / 2.0, x + width / 2.0
        m[1, 1], m[1, 3] = height / 2.0, y + height / 2.0
        m[2, 2], m[2, 3] = (far - near) / 2.0, (far + near) / 2.0
        return _float_matrix(cls, m, kind)


_CAMERA_BUILDERS: dict[CameraMatrix, Callable[..., Matrix4]] = {
    CameraMatrix.MODELVIEW: Matrix4.look_at,
    CameraMatrix.ORTHO: Matrix4.ortho,
    CameraMatrix.FRUSTUM: Matrix4.frustum,
    CameraMatrix.VIEWPORT: Matrix4.viewport,
}


def camera_matrix(role: CameraMatrix, *args, **kwargs) -> Matrix4:
    """Build the matrix for a camera role.

    Example:
        >>> camera_matrix(CameraMatrix.VIEWPORT, 0, 0, 640, 480)
    """
    try:
        builder = _CAMERA_BUILDERS[CameraMatrix(role)]
    except ValueError:
        raise ValueError(f"Not a camera matrix role: {role!r}") from None
    return builder(*args, **kwargs)


def _float_matrix(cls: type[MatrixBase], rows: np.ndarray, kind: KindLike | None) -> Any:
    target = cls._resolve_kind(kind, None)
    if not target.is_float:
        raise ScalarKindError(
            f"{cls._root.__name__}: builder needs a float kind, got {target.name}"
        )
    return cls.from_numpy(rows, kind=target)


def _require_extent(left, right, bottom, top, near, far) -> None:
    if left == right or bottom == top or near == far:
        raise ContractError(
            f"empty view volume: left={left}, right={right}, bottom={bottom}, "
            f"top={top}, near={near}, far={far}"
        )


Matrix3i = Matrix3[ScalarKind.INT32]
Matrix3f = Matrix3[ScalarKind.IEEE32]
Matrix3d = Matrix3[ScalarKind.IEEE64]
Matrix4i = Matrix4[ScalarKind.INT32]
Matrix4f = Matrix4[ScalarKind.IEEE32]
Matrix4d = Matrix4[ScalarKind.IEEE64]
