"""Tests for batched operations on NumPy arrays."""

import numpy as np
import pytest

from splmath import (
    ContractError,
    Matrix3,
    Matrix4,
    ScalarKindError,
    Vector3,
    Vector3d,
    Vector3f,
    cross_batch,
    dot_batch,
    normalize_batch,
    square_batch,
    transform_batch,
)


@pytest.fixture
def points(rng):
    """Random float64 points [1000, 3]."""
    return rng.standard_normal((1000, 3))


class TestSquareDot:
    """Test square_batch and dot_batch."""

    def test_square_matches_scalar(self, points):
        result = square_batch(points)
        assert result.shape == (1000,)
        assert result.dtype == np.float64
        for i in (0, 500, 999):
            assert result[i] == pytest.approx(Vector3(points[i]).square())

    def test_square_integer_no_overflow(self):
        v = np.full((2, 3), 100, dtype=np.int8)
        np.testing.assert_array_equal(square_batch(v), [30000.0, 30000.0])

    def test_square_single_vector(self):
        assert square_batch(np.array([1.0, 2.0, 3.0])) == 14.0

    def test_dot(self, points):
        other = points[::-1].copy()
        np.testing.assert_allclose(
            dot_batch(points, other), np.sum(points * other, axis=1), atol=1e-12
        )

    def test_dot_keeps_integer_kind(self):
        a = np.array([[1, 2, 3]], dtype=np.int32)
        result = dot_batch(a, a)
        assert result.dtype == np.int32
        assert result[0] == 14

    def test_dot_mixed_dtypes(self):
        with pytest.raises(ScalarKindError):
            dot_batch(np.zeros((2, 3), np.float32), np.zeros((2, 3), np.float64))

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            dot_batch(np.zeros((2, 3)), np.zeros((3, 3)))
        with pytest.raises(ValueError):
            square_batch(np.zeros((2, 3, 3)))


class TestCross:
    """Test cross_batch."""

    def test_matches_scalar(self, points):
        other = points[::-1].copy()
        result = cross_batch(points, other)
        for i in (0, 1, 999):
            expected = Vector3d(points[i]).cross_product(Vector3d(other[i]))
            np.testing.assert_allclose(result[i], expected.to_numpy(), atol=1e-12)

    def test_basis(self):
        result = cross_batch(np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))
        np.testing.assert_array_equal(result, [0.0, 0.0, 1.0])

    def test_needs_three_components(self):
        with pytest.raises(ValueError):
            cross_batch(np.zeros((2, 4)), np.zeros((2, 4)))


class TestNormalize:
    """Test normalize_batch."""

    def test_unit_length(self, points):
        result = normalize_batch(points)
        np.testing.assert_allclose(np.linalg.norm(result, axis=1), 1.0, atol=1e-6)

    def test_target_length(self, points):
        result = normalize_batch(points.astype(np.float32), length=3.0)
        assert result.dtype == np.float32
        np.testing.assert_allclose(np.linalg.norm(result, axis=1), 3.0, rtol=1e-5)

    def test_zero_rows_unchanged(self):
        v = np.array([[0.0, 0.0, 0.0], [3.0, 4.0, 0.0]])
        result = normalize_batch(v)
        np.testing.assert_array_equal(result[0], [0.0, 0.0, 0.0])
        np.testing.assert_allclose(result[1], [0.6, 0.8, 0.0])

    def test_in_place(self):
        v = np.array([[3.0, 4.0, 0.0]])
        out = normalize_batch(v, out=v)
        assert out is v
        np.testing.assert_allclose(v[0], [0.6, 0.8, 0.0])

    def test_matches_scalar(self):
        v = np.array([1.0, 2.0, 2.0], dtype=np.float32)
        np.testing.assert_allclose(
            normalize_batch(v), Vector3f(v).get_normalized().to_numpy(), rtol=1e-6
        )

    def test_longdouble_fallback(self):
        v = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 0.0]], dtype=np.longdouble)
        result = normalize_batch(v)
        assert result.dtype == np.longdouble
        np.testing.assert_allclose(result.astype(np.float64), [[0.6, 0.8, 0.0], [0, 0, 0]])

    def test_rejects_integers(self):
        with pytest.raises(ScalarKindError):
            normalize_batch(np.ones((2, 3), dtype=np.int32))

    def test_rejects_non_positive_target(self, points):
        with pytest.raises(ContractError):
            normalize_batch(points, length=0.0)


class TestTransform:
    """Test transform_batch."""

    def test_matches_scalar(self, points):
        m = Matrix3.rotation((1, 1, 0), 0.3)
        result = transform_batch(m, points)
        for i in (0, 10, 999):
            expected = m * Vector3(points[i])
            np.testing.assert_allclose(result[i], expected.to_numpy(), atol=1e-12)

    def test_translation_homogeneous(self):
        pts = np.zeros((5, 4))
        pts[:, 3] = 1.0
        result = transform_batch(Matrix4.translation(1, 2, 3), pts)
        np.testing.assert_allclose(result, np.tile([1.0, 2.0, 3.0, 1.0], (5, 1)))

    def test_matrix4_on_vector3_uses_block(self, points):
        result = transform_batch(Matrix4.translation(1, 2, 3), points)
        np.testing.assert_allclose(result, points)

    def test_row_major_array(self, points):
        a = np.diag([2.0, 3.0, 4.0])
        np.testing.assert_allclose(transform_batch(a, points), points * [2.0, 3.0, 4.0])

    def test_too_many_components(self):
        with pytest.raises(ValueError):
            transform_batch(Matrix3.identity(), np.zeros((2, 4)))

    def test_non_square_matrix(self, points):
        with pytest.raises(ValueError):
            transform_batch(np.zeros((3, 4)), points)
