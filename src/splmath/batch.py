"""Batched vector operations for CPU and GPU.

The scalar value types in ``splmath.vector`` handle one tuple at a time.
The functions here apply the same operations to ``[N, K]`` stacks of
components. All functions auto-detect the input type:

- NumPy arrays run the parallel Numba kernels in ``splmath.kernels``
  (``longdouble`` data, which Numba cannot compile, uses vectorised NumPy)
- PyTorch tensors stay on their device and use torch ops

Semantics match the scalar types: integer results wrap in the input kind,
``square`` is always float64, normalization leaves zero rows unchanged and
matrices follow the column convention of ``MatrixBase``.

Example:
    >>> import numpy as np
    >>> from splmath.batch import cross_batch
    >>> a = np.array([[1.0, 0.0, 0.0]])
    >>> b = np.array([[0.0, 1.0, 0.0]])
    >>> cross_batch(a, b)
    array([[0., 0., 1.]])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from splmath.errors import ContractError, ScalarKindError
from splmath.kernels import cross_numba, dot_numba, matvec_numba, normalize_numba, square_numba
from splmath.matrix import MatrixBase

if TYPE_CHECKING:
    import torch

logger = logging.getLogger(__name__)

# Numba has no long double support
_NUMBA_DTYPES = frozenset(np.dtype(t) for t in "u1 i1 u2 i2 u4 i4 u8 i8 f4 f8".split())


# ============================================================================
# Input checks
# ============================================================================


def _as_rows(v: np.ndarray, name: str) -> tuple[np.ndarray, bool]:
    """Promote a single vector [K] to [1, K]; returns (rows, was_1d)."""
    if v.ndim == 1:
        return v[np.newaxis, :], True
    if v.ndim != 2 or v.shape[1] == 0:
        raise ValueError(f"{name} must be [K] or [N, K], got shape {tuple(v.shape)}")
    return v, False


def _check_pair(a, b) -> None:
    if tuple(a.shape) != tuple(b.shape):
        raise ValueError(f"Shape mismatch: {tuple(a.shape)} vs {tuple(b.shape)}")
    if a.dtype != b.dtype:
        raise ScalarKindError(f"Cannot combine {a.dtype} with {b.dtype}; convert one side first")


def _check_target(length: float) -> float:
    target = float(length)
    if not target > 0.0:
        raise ContractError(f"normalize target must be > 0, got {target}")
    return target


def _matrix_rows(m: Any) -> np.ndarray:
    """Row-major array of a matrix value or array."""
    if isinstance(m, MatrixBase):
        return m.to_numpy()
    rows = np.asarray(m)
    if rows.ndim != 2 or rows.shape[0] != rows.shape[1]:
        raise ValueError(f"Matrix must be square [M, M], got shape {rows.shape}")
    return rows


# ============================================================================
# NumPy/CPU Implementation
# ============================================================================


def _square_numpy(v: np.ndarray) -> np.ndarray:
    rows, single = _as_rows(v, "v")
    if rows.dtype in _NUMBA_DTYPES:
        out = np.empty(rows.shape[0], dtype=np.float64)
        square_numba(np.ascontiguousarray(rows), out)
    else:
        wide = rows.astype(np.float64)
        out = np.sum(wide * wide, axis=1)
    return out[0] if single else out


def _dot_numpy(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    _check_pair(a, b)
    rows_a, single = _as_rows(a, "a")
    rows_b, _ = _as_rows(b, "b")
    if rows_a.dtype in _NUMBA_DTYPES:
        out = np.empty(rows_a.shape[0], dtype=rows_a.dtype)
        dot_numba(np.ascontiguousarray(rows_a), np.ascontiguousarray(rows_b), out)
    else:
        out = (rows_a * rows_b).sum(axis=1, dtype=rows_a.dtype)
    return out[0] if single else out


def _cross_numpy(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    _check_pair(a, b)
    rows_a, single = _as_rows(a, "a")
    rows_b, _ = _as_rows(b, "b")
    if rows_a.shape[1] != 3:
        raise ValueError(f"cross product needs 3 components, got {rows_a.shape[1]}")
    if rows_a.dtype in _NUMBA_DTYPES:
        out = np.empty_like(rows_a)
        cross_numba(np.ascontiguousarray(rows_a), np.ascontiguousarray(rows_b), out)
    else:
        out = (
            rows_a[:, [1, 2, 0]] * rows_b[:, [2, 0, 1]]
            - rows_a[:, [2, 0, 1]] * rows_b[:, [1, 2, 0]]
        )
    return out[0] if single else out


def _normalize_numpy(v: np.ndarray, target: float, out: np.ndarray | None) -> np.ndarray:
    rows, _ = _as_rows(v, "v")
    if rows.dtype.kind != "f":
        raise ScalarKindError(f"normalize requires a float dtype, got {rows.dtype}")
    result = np.empty_like(v) if out is None else out
    if result.shape != v.shape or result.dtype != v.dtype:
        raise ValueError(f"out must be {v.shape} {v.dtype}, got {result.shape} {result.dtype}")
    out_rows = result if result.ndim == 2 else result[np.newaxis, :]

    if rows.dtype in _NUMBA_DTYPES:
        normalize_numba(np.ascontiguousarray(rows), target, out_rows)
    else:
        length = np.sqrt(np.sum(rows * rows, axis=1, keepdims=True))
        safe = np.where(length == 0, 1, length)
        out_rows[:] = np.where(length == 0, rows, rows * (target / safe))
    return result


def _transform_numpy(m: np.ndarray, v: np.ndarray) -> np.ndarray:
    rows, single = _as_rows(v, "v")
    k = rows.shape[1]
    if not 3 <= k <= m.shape[0]:
        raise ValueError(f"A {m.shape[0]}x{m.shape[0]} matrix cannot transform {k}-vectors")
    block = np.ascontiguousarray(m[:k, :k].astype(rows.dtype, casting="unsafe"))
    if rows.dtype in _NUMBA_DTYPES:
        out = np.empty_like(rows)
        matvec_numba(block, np.ascontiguousarray(rows), out)
    else:
        out = rows @ block.T
    return out[0] if single else out


# ============================================================================
# PyTorch/GPU Implementation
# ============================================================================


def _square_torch(v: torch.Tensor) -> torch.Tensor:
    import torch

    wide = v.to(torch.float64)
    return (wide * wide).sum(dim=-1)


def _dot_torch(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    _check_pair(a, b)
    return (a * b).sum(dim=-1).to(a.dtype)


def _cross_torch(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    _check_pair(a, b)
    if a.shape[-1] != 3:
        raise ValueError(f"cross product needs 3 components, got {a.shape[-1]}")
    return a[..., [1, 2, 0]] * b[..., [2, 0, 1]] - a[..., [2, 0, 1]] * b[..., [1, 2, 0]]


def _normalize_torch(v: torch.Tensor, target: float) -> torch.Tensor:
    import torch

    if not v.is_floating_point():
        raise ScalarKindError(f"normalize requires a float dtype, got {v.dtype}")
    wide = v.to(torch.float64)
    length = torch.linalg.vector_norm(wide, dim=-1, keepdim=True)
    zero = length == 0
    scale = torch.where(zero, torch.ones_like(length), target / torch.where(zero, 1.0, length))
    return (wide * scale).to(v.dtype)


def _transform_torch(m: np.ndarray, v: torch.Tensor) -> torch.Tensor:
    import torch

    k = v.shape[-1]
    if not 3 <= k <= m.shape[0]:
        raise ValueError(f"A {m.shape[0]}x{m.shape[0]} matrix cannot transform {k}-vectors")
    block = torch.as_tensor(np.ascontiguousarray(m[:k, :k]), device=v.device).to(v.dtype)
    return v @ block.T


# ============================================================================
# Public API - Auto-dispatching functions
# ============================================================================


def _is_torch_tensor(x) -> bool:
    """Check if input is a PyTorch tensor without importing torch."""
    return type(x).__module__.startswith("torch")


def square_batch(v):
    """Squared length of each row, in float64.

    :param v: Vectors [N, K] or [K]
    :returns: [N] (or a scalar for [K] input)
    """
    if _is_torch_tensor(v):
        return _square_torch(v)
    return _square_numpy(np.asarray(v))


def dot_batch(a, b):
    """Row-wise dot product in the input dtype.

    :param a: Vectors [N, K]
    :param b: Vectors [N, K], same dtype as ``a``
    :returns: [N]
    :raises ScalarKindError: If the dtypes differ
    """
    if _is_torch_tensor(a):
        return _dot_torch(a, b)
    return _dot_numpy(np.asarray(a), np.asarray(b))


def cross_batch(a, b):
    """Row-wise right-handed cross product.

    :param a: Vectors [N, 3]
    :param b: Vectors [N, 3], same dtype as ``a``
    :returns: [N, 3]
    """
    if _is_torch_tensor(a):
        return _cross_torch(a, b)
    return _cross_numpy(np.asarray(a), np.asarray(b))


def normalize_batch(v, length: float = 1.0, out=None):
    """Rescale every row to ``length``; zero rows are returned unchanged.

    :param v: Float vectors [N, K]
    :param length: Target length, must be positive
    :param out: Optional output buffer (NumPy only, may be ``v`` itself)
    :returns: Normalized vectors, same dtype as ``v``
    :raises ScalarKindError: For integer input
    :raises ContractError: If ``length <= 0``
    """
    target = _check_target(length)
    if _is_torch_tensor(v):
        return _normalize_torch(v, target)
    return _normalize_numpy(np.asarray(v), target, out)


def transform_batch(m, v):
    """Apply one matrix to many vectors.

    :param m: ``Matrix3``/``Matrix4`` or a row-major [M, M] array
    :param v: Vectors [N, K] with ``3 <= K <= M``; smaller K uses the
        upper-left block, as ``Matrix4 * Vector3`` does
    :returns: Transformed vectors [N, K] in the dtype of ``v``

    Example:
        >>> from splmath import Matrix4
        >>> pts = np.zeros((1000, 4))
        >>> pts[:, 3] = 1.0
        >>> moved = transform_batch(Matrix4.translation(1, 2, 3), pts)
    """
    rows = _matrix_rows(m)
    if not _is_torch_tensor(v):
        v = np.asarray(v)
    logger.debug("[batch] transform %s by %dx%d matrix", tuple(v.shape), *rows.shape)
    if _is_torch_tensor(v):
        return _transform_torch(rows, v)
    return _transform_numpy(rows, v)
