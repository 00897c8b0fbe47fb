"""
Numba-optimized kernels for batched vector operations.

Every kernel works on row-stacked components, ``[N, K]``, writes into a
caller-provided output buffer and runs its rows in parallel. Matrices are
row-major ``[K, K]`` (as returned by ``MatrixBase.to_numpy``).

Results are stored in the output buffer's dtype, so integer outputs wrap
exactly like the scalar operators do.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray


@njit(parallel=True, cache=True, nogil=True)
def square_numba(v: NDArray, out: NDArray[np.float64]) -> None:
    """
    Sum of squared components per row, accumulated in float64.

    Args:
        v: Vectors [N, K]
        out: Output [N] (modified in-place)
    """
    n, k = v.shape

    for i in prange(n):
        acc = 0.0
        for j in range(k):
            x = float(v[i, j])
            acc += x * x
        out[i] = acc


@njit(parallel=True, cache=True, nogil=True)
def dot_numba(a: NDArray, b: NDArray, out: NDArray) -> None:
    """
    Row-wise dot product.

    Args:
        a: Vectors [N, K]
        b: Vectors [N, K]
        out: Output [N] (modified in-place)
    """
    n, k = a.shape

    for i in prange(n):
        acc = a[i, 0] * b[i, 0]
        for j in range(1, k):
            acc += a[i, j] * b[i, j]
        out[i] = acc


@njit(parallel=True, cache=True, nogil=True)
def cross_numba(a: NDArray, b: NDArray, out: NDArray) -> None:
    """
    Row-wise right-handed cross product.

    Args:
        a: Vectors [N, 3]
        b: Vectors [N, 3]
        out: Output [N, 3] (modified in-place)
    """
    n = a.shape[0]

    for i in prange(n):
        out[i, 0] = a[i, 1] * b[i, 2] - a[i, 2] * b[i, 1]
        out[i, 1] = a[i, 2] * b[i, 0] - a[i, 0] * b[i, 2]
        out[i, 2] = a[i, 0] * b[i, 1] - a[i, 1] * b[i, 0]


@njit(parallel=True, cache=True, nogil=True)
def normalize_numba(v: NDArray, target: float, out: NDArray) -> None:
    """
    Rescale each row to length ``target``.

    Zero rows are copied unchanged.

    Args:
        v: Vectors [N, K] (float)
        target: Target length, positive
        out: Output [N, K] (modified in-place, may alias ``v``)
    """
    n, k = v.shape

    for i in prange(n):
        acc = 0.0
        for j in range(k):
            x = float(v[i, j])
            acc += x * x

        if acc == 0.0:
            for j in range(k):
                out[i, j] = v[i, j]
        else:
            scale = target / math.sqrt(acc)
            for j in range(k):
                out[i, j] = float(v[i, j]) * scale


@njit(parallel=True, cache=True, nogil=True)
def matvec_numba(m: NDArray, v: NDArray, out: NDArray) -> None:
    """
    Apply one matrix to many vectors, ``out[i] = m @ v[i]``.

    Vectors shorter than the matrix use its upper-left block.

    Args:
        m: Row-major matrix [M, M], M >= K
        v: Vectors [N, K]
        out: Output [N, K] (modified in-place)
    """
    n, k = v.shape

    for i in prange(n):
        for r in range(k):
            acc = m[r, 0] * v[i, 0]
            for c in range(1, k):
                acc += m[r, c] * v[i, c]
            out[i, r] = acc
