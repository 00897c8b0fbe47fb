"""Backend verification utilities for CPU/GPU equivalence testing.

This module provides utilities for verifying that the NumPy (Numba) and
PyTorch paths of ``splmath.batch`` produce equivalent results.

Example:
    >>> from splmath.batch import normalize_batch
    >>> from splmath.verification import BackendVerifier
    >>>
    >>> cpu = normalize_batch(points)
    >>> gpu = normalize_batch(torch.from_numpy(points).cuda())
    >>> BackendVerifier.assert_equivalent(cpu, gpu)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from splmath.base import KindGeneric

if TYPE_CHECKING:
    import torch

logger = logging.getLogger(__name__)


class BackendVerifier:
    """Utilities for verifying result equivalence between CPU and GPU."""

    @staticmethod
    def backend(data: Any) -> str:
        """Name the backend holding ``data``: ``"torch"`` or ``"numpy"``.

        :param data: NumPy array, torch tensor or splmath value
        :return: Backend name
        """
        if type(data).__module__.startswith("torch"):
            return "torch"
        return "numpy"

    @staticmethod
    def to_numpy(data: np.ndarray | torch.Tensor | KindGeneric) -> np.ndarray:
        """Bring a result onto the host as a NumPy array.

        :param data: NumPy array, torch tensor (any device) or splmath value
        :return: NumPy array
        """
        if isinstance(data, KindGeneric):
            return data.to_numpy()
        if BackendVerifier.backend(data) == "torch":
            return data.detach().cpu().numpy()
        return np.asarray(data)

    @staticmethod
    def assert_same_dtype(cpu_result: Any, gpu_result: Any) -> None:
        """Assert both results store the same element type.

        :raises AssertionError: If the dtypes differ
        """
        cpu_dtype = BackendVerifier.to_numpy(cpu_result).dtype
        gpu_dtype = BackendVerifier.to_numpy(gpu_result).dtype
        if cpu_dtype != gpu_dtype:
            raise AssertionError(
                f"Dtype mismatch: CPU={cpu_dtype}, GPU={gpu_dtype}. "
                f"Both backends must keep the input kind."
            )

    @staticmethod
    def assert_equivalent(
        cpu_result: Any,
        gpu_result: Any,
        rtol: float = 1e-5,
        atol: float = 1e-6,
        check_dtype: bool = True,
    ) -> None:
        """Assert CPU and GPU results are equivalent.

        Integer results are compared exactly; floats within tolerance.

        :param cpu_result: NumPy result (array or splmath value)
        :param gpu_result: PyTorch result (tensor on any device)
        :param rtol: Relative tolerance for float comparison
        :param atol: Absolute tolerance for float comparison
        :param check_dtype: If True, verify dtypes match first
        :raises AssertionError: If results are not equivalent

        Example:
            >>> BackendVerifier.assert_equivalent(
            ...     cpu_result, gpu_result,
            ...     rtol=1e-5, atol=1e-6
            ... )
        """
        if check_dtype:
            BackendVerifier.assert_same_dtype(cpu_result, gpu_result)

        cpu = BackendVerifier.to_numpy(cpu_result)
        gpu = BackendVerifier.to_numpy(gpu_result)

        if cpu.shape != gpu.shape:
            raise AssertionError(f"Shape mismatch: CPU={cpu.shape}, GPU={gpu.shape}")

        if cpu.dtype.kind in "iu" and gpu.dtype.kind in "iu":
            np.testing.assert_array_equal(
                cpu, gpu, err_msg="Integer results differ between CPU and GPU"
            )
        else:
            np.testing.assert_allclose(
                cpu.astype(np.float64),
                gpu.astype(np.float64),
                rtol=rtol,
                atol=atol,
                err_msg="Results differ between CPU and GPU",
            )

        logger.debug(
            "[BackendVerifier] Equivalence verified: shape=%s, dtype=%s", cpu.shape, cpu.dtype
        )

    @staticmethod
    def summary(data: Any) -> str:
        """Get a string summary of a result.

        Example:
            >>> BackendVerifier.summary(np.zeros((10, 3)))
            'backend=numpy, shape=(10, 3), dtype=float64'
        """
        arr = BackendVerifier.to_numpy(data)
        return f"backend={BackendVerifier.backend(data)}, shape={arr.shape}, dtype={arr.dtype}"
