"""Tests for the PyTorch path of splmath.batch."""

import pytest

# Skip all tests if PyTorch is not available
pytest.importorskip("torch")

import numpy as np  # noqa: E402
import torch  # noqa: E402

from splmath import (  # noqa: E402
    BackendVerifier,
    ContractError,
    Matrix4,
    ScalarKindError,
    cross_batch,
    dot_batch,
    normalize_batch,
    square_batch,
    transform_batch,
)


@pytest.fixture
def device():
    """Use CUDA when present."""
    return "cuda" if torch.cuda.is_available() else "cpu"


@pytest.fixture
def sample_points():
    """Random float32 points [1000, 3] with one zero row."""
    np.random.seed(42)
    points = np.random.randn(1000, 3).astype(np.float32)
    points[7] = 0.0
    return points


@pytest.fixture
def sample_tensor(sample_points, device):
    return torch.from_numpy(sample_points).to(device)


class TestTorchDispatch:
    """Results stay on the input device and keep its dtype."""

    def test_stays_on_device(self, sample_tensor, device):
        result = normalize_batch(sample_tensor)
        assert isinstance(result, torch.Tensor)
        assert result.device.type == device
        assert result.dtype == torch.float32

    def test_square_is_float64(self, sample_tensor):
        assert square_batch(sample_tensor).dtype == torch.float64

    def test_integer_dot_keeps_dtype(self, device):
        a = torch.tensor([[1, 2, 3]], dtype=torch.int32, device=device)
        result = dot_batch(a, a)
        assert result.dtype == torch.int32
        assert int(result[0]) == 14

    def test_normalize_rejects_integers(self, device):
        with pytest.raises(ScalarKindError):
            normalize_batch(torch.ones((2, 3), dtype=torch.int32, device=device))

    def test_normalize_rejects_non_positive_target(self, sample_tensor):
        with pytest.raises(ContractError):
            normalize_batch(sample_tensor, length=-1.0)

    def test_zero_row_unchanged(self, sample_tensor):
        result = normalize_batch(sample_tensor)
        assert torch.count_nonzero(result[7]) == 0


class TestEquivalence:
    """NumPy and PyTorch paths agree."""

    def test_square(self, sample_points, sample_tensor):
        BackendVerifier.assert_equivalent(square_batch(sample_points), square_batch(sample_tensor))

    def test_dot(self, sample_points, sample_tensor):
        BackendVerifier.assert_equivalent(
            dot_batch(sample_points, sample_points[::-1].copy()),
            dot_batch(sample_tensor, sample_tensor.flip(0)),
            rtol=1e-5,
            atol=1e-5,
        )

    def test_cross(self, sample_points, sample_tensor):
        BackendVerifier.assert_equivalent(
            cross_batch(sample_points, sample_points[::-1].copy()),
            cross_batch(sample_tensor, sample_tensor.flip(0)),
            atol=1e-5,
        )

    def test_normalize(self, sample_points, sample_tensor):
        BackendVerifier.assert_equivalent(
            normalize_batch(sample_points), normalize_batch(sample_tensor)
        )

    def test_transform(self, sample_points, sample_tensor):
        m = Matrix4.rotation((0, 0, 1), 0.5)
        BackendVerifier.assert_equivalent(
            transform_batch(m, sample_points),
            transform_batch(m, sample_tensor),
            atol=1e-5,
        )


class TestBackendVerifier:
    """Test the verifier itself."""

    def test_backend_names(self, sample_points, sample_tensor):
        assert BackendVerifier.backend(sample_points) == "numpy"
        assert BackendVerifier.backend(sample_tensor) == "torch"

    def test_dtype_mismatch(self, sample_points):
        with pytest.raises(AssertionError, match="Dtype mismatch"):
            BackendVerifier.assert_equivalent(
                sample_points, torch.from_numpy(sample_points.astype(np.float64))
            )

    def test_value_mismatch(self, sample_points):
        other = torch.from_numpy(sample_points + 1.0)
        with pytest.raises(AssertionError):
            BackendVerifier.assert_equivalent(sample_points, other)

    def test_summary(self, sample_tensor):
        assert BackendVerifier.summary(sample_tensor).startswith("backend=torch, shape=(1000, 3)")
