"""Tests for scalar kinds and their dtype mapping."""

import numpy as np
import pytest

from splmath.errors import ScalarKindError
from splmath.registry import ScalarTypeId
from splmath.types import (
    ENUM_KIND,
    FLOAT_KINDS,
    INDEX_KIND,
    INTEGER_KINDS,
    NUMERIC_KINDS,
    SIZEI_KIND,
    ScalarKind,
    require_numeric,
)


class TestScalarKind:
    """Test kind properties."""

    @pytest.mark.parametrize(
        "kind,dtype,bits",
        [
            (ScalarKind.UINT8, np.uint8, 8),
            (ScalarKind.INT16, np.int16, 16),
            (ScalarKind.UINT32, np.uint32, 32),
            (ScalarKind.INT64, np.int64, 64),
            (ScalarKind.IEEE32, np.float32, 32),
            (ScalarKind.IEEE64, np.float64, 64),
        ],
    )
    def test_dtype_and_bits(self, kind, dtype, bits):
        """Each kind maps to its NumPy dtype."""
        assert kind.dtype == np.dtype(dtype)
        assert kind.bits == bits

    def test_ieee128_is_longdouble(self):
        """IEEE128 uses the platform long double."""
        assert ScalarKind.IEEE128.dtype == np.dtype(np.longdouble)
        assert ScalarKind.IEEE128.is_float

    def test_classification(self):
        """Float, integer and signedness flags."""
        assert ScalarKind.IEEE32.is_float
        assert not ScalarKind.IEEE32.is_integer
        assert ScalarKind.UINT16.is_integer
        assert not ScalarKind.UINT16.is_signed
        assert ScalarKind.INT8.is_signed
        assert ScalarKind.IEEE64.is_signed

    def test_voidp_is_opaque(self):
        """VOIDP is neither numeric nor integer."""
        assert not ScalarKind.VOIDP.is_numeric
        assert not ScalarKind.VOIDP.is_integer
        assert ScalarKind.VOIDP not in NUMERIC_KINDS

    def test_kind_groups(self):
        """Module-level groups partition the numeric kinds."""
        assert set(FLOAT_KINDS) | set(INTEGER_KINDS) == set(NUMERIC_KINDS)
        assert len(FLOAT_KINDS) == 3
        assert len(INTEGER_KINDS) == 8

    def test_index_aliases(self):
        """Index, enum and size aliases are 32-bit signed."""
        assert INDEX_KIND is ENUM_KIND is SIZEI_KIND is ScalarKind.INT32

    def test_type_id(self):
        """Each kind knows its registry id."""
        assert ScalarKind.IEEE32.type_id is ScalarTypeId.IEEE32
        assert ScalarKind.UINT8.type_id is ScalarTypeId.UINT8


class TestFromDtype:
    """Test kind resolution."""

    def test_from_numpy_dtype(self):
        assert ScalarKind.from_dtype(np.float32) is ScalarKind.IEEE32
        assert ScalarKind.from_dtype(np.dtype("int16")) is ScalarKind.INT16

    def test_from_python_types(self):
        """Python int and float resolve to the 64-bit kinds."""
        assert ScalarKind.from_dtype(int) is ScalarKind.INT64
        assert ScalarKind.from_dtype(float) is ScalarKind.IEEE64

    def test_from_name(self):
        assert ScalarKind.from_dtype("ieee32") is ScalarKind.IEEE32
        assert ScalarKind.from_dtype("UINT8") is ScalarKind.UINT8

    def test_kind_passthrough(self):
        assert ScalarKind.from_dtype(ScalarKind.INT8) is ScalarKind.INT8

    def test_unknown_raises(self):
        """Unsupported dtypes raise ScalarKindError."""
        with pytest.raises(ScalarKindError):
            ScalarKind.from_dtype(np.complex64)
        with pytest.raises(ScalarKindError):
            ScalarKind.from_dtype(object())

    def test_error_is_type_error(self):
        """ScalarKindError can be caught as TypeError."""
        with pytest.raises(TypeError):
            ScalarKind.from_dtype(np.bool_)


class TestCast:
    """Test C-style scalar conversion."""

    def test_float_to_int_truncates(self):
        assert ScalarKind.INT32.cast(2.9) == 2
        assert ScalarKind.INT32.cast(-2.9) == -2

    def test_integer_wraps(self):
        """Out-of-range integers wrap like a C cast."""
        assert ScalarKind.UINT8.cast(256) == 0
        assert ScalarKind.UINT8.cast(-1) == 255

    def test_result_dtype(self):
        assert ScalarKind.IEEE32.cast(1).dtype == np.float32

    def test_require_numeric(self):
        """VOIDP is rejected where components are stored."""
        assert require_numeric(ScalarKind.INT8, "Vector3") is ScalarKind.INT8
        with pytest.raises(ScalarKindError, match="Vector3"):
            require_numeric(ScalarKind.VOIDP, "Vector3")
