"""Tests for the type/role identifier registry."""

from enum import IntEnum

import numpy as np
import pytest

from splmath import RGBA8, RGBAf, ScalarKind
from splmath.errors import RegistryError, UnsupportedTypeIdError
from splmath.registry import (
    ENUM_FIRST,
    ENUM_RANGE,
    PARTITIONS,
    CameraMatrix,
    FileFormat,
    LightKind,
    MaterialApprox,
    MaterialChannel,
    Partition,
    ScalarTypeId,
    TaggedValue,
    decode_id,
    get_partition,
    partition_base,
    verify_partitions,
)


class TestIdValues:
    """The numeric ids are persisted and must never change."""

    def test_layout_constants(self):
        assert ENUM_FIRST == 0x0FFF0000
        assert ENUM_RANGE == 0x2000
        assert partition_base(3) == 0x0FFF6000

    def test_scalar_type_ids(self):
        assert int(ScalarTypeId.UINT8) == 0x0FFF0001
        assert int(ScalarTypeId.IEEE32) == 0x0FFF0009
        assert int(ScalarTypeId.VOIDP) == 0x0FFF000C
        assert int(ScalarTypeId.RGBAF) == 0x0FFF000E

    def test_role_ids(self):
        assert int(FileFormat.PGM) == 0x0FFF2001
        assert int(FileFormat.VTR) == 0x0FFF2007
        assert int(CameraMatrix.MODELVIEW) == 0x0FFF4001
        assert int(CameraMatrix.VIEWPORT) == 0x0FFF4004
        assert int(MaterialChannel.OPACITY) == 0x0FFF6001
        assert int(MaterialChannel.EXT0) == 0x0FFF6011
        assert int(MaterialApprox.CONSTANT) == 0x0FFF6014
        assert int(MaterialApprox.QUADRATIC) == 0x0FFF6016
        assert int(LightKind.POINT) == 0x0FFF8001
        assert int(LightKind.SPOT) == 0x0FFF8003

    def test_member_counts(self):
        assert len(ScalarTypeId) == 14
        assert len(FileFormat) == 7
        assert len(CameraMatrix) == 4
        assert len(MaterialChannel) == 17
        assert len(MaterialApprox) == 3
        assert len(LightKind) == 3


class TestPartitions:
    """Test partition layout invariants."""

    def test_layout_is_valid(self):
        verify_partitions()

    def test_sentinels(self):
        p = get_partition("type")
        assert p.min_id == ENUM_FIRST
        assert p.max_id == ENUM_FIRST + 15
        assert p.slot == 0
        assert not p.contains(p.min_id)
        assert not p.contains(p.max_id)
        assert p.contains(int(ScalarTypeId.UINT8))

    def test_material_sub_range(self):
        p = get_partition(MaterialApprox)
        assert p.slot == 3
        assert p.min_id == partition_base(3) + 19
        assert p.max_id == partition_base(3) + 23

    def test_no_overlap(self):
        ordered = sorted(PARTITIONS, key=lambda p: p.min_id)
        for lower, upper in zip(ordered, ordered[1:]):
            assert lower.max_id < upper.min_id

    def test_unknown_partition(self):
        with pytest.raises(KeyError):
            get_partition("shader")

    def test_gap_detected(self):
        """A partition with a hole in its ids fails verification."""

        class Holey(IntEnum):
            A = ENUM_FIRST + 1
            B = ENUM_FIRST + 3

        with pytest.raises(RegistryError, match="contiguous"):
            verify_partitions((Partition("holey", Holey, ENUM_FIRST),))

    def test_overlap_detected(self):
        class First(IntEnum):
            A = ENUM_FIRST + 1
            B = ENUM_FIRST + 2

        class Second(IntEnum):
            C = ENUM_FIRST + 3

        layout = (
            Partition("first", First, ENUM_FIRST),
            Partition("second", Second, ENUM_FIRST + 2),
        )
        with pytest.raises(RegistryError, match="overlap"):
            verify_partitions(layout)


class TestDecode:
    """Test mapping integers back to members."""

    @pytest.mark.parametrize(
        "member",
        [ScalarTypeId.INT64, FileFormat.NII, CameraMatrix.FRUSTUM, MaterialChannel.GRADIENT,
         MaterialApprox.LINEAR, LightKind.DIRECTIONAL],
    )
    def test_round_trip(self, member):
        assert decode_id(int(member)) is member

    def test_sentinels_rejected(self):
        with pytest.raises(UnsupportedTypeIdError):
            decode_id(ENUM_FIRST)
        with pytest.raises(UnsupportedTypeIdError):
            decode_id(ENUM_FIRST + 15)
        with pytest.raises(UnsupportedTypeIdError):
            decode_id(partition_base(3) + 19)

    def test_unknown_rejected(self):
        with pytest.raises(UnsupportedTypeIdError) as exc_info:
            decode_id(42)
        assert exc_info.value.value == 42
        with pytest.raises(ValueError):
            decode_id(partition_base(7) + 1)

    def test_restricted_lookup(self):
        assert decode_id(int(LightKind.SPOT), "light") is LightKind.SPOT
        with pytest.raises(UnsupportedTypeIdError):
            decode_id(int(LightKind.SPOT), ScalarTypeId)


class TestScalarTypeId:
    """Test scalar id helpers."""

    def test_kind_round_trip(self):
        for kind in ScalarKind:
            assert ScalarTypeId.for_kind(kind).kind is kind

    def test_color_ids_have_no_kind(self):
        assert ScalarTypeId.RGBA8.is_color
        with pytest.raises(UnsupportedTypeIdError):
            ScalarTypeId.RGBAF.kind

    def test_file_extension(self):
        assert FileFormat.from_extension(".PNG") is FileFormat.PNG
        assert FileFormat.from_extension("tiff") is FileFormat.TIF
        assert FileFormat.VTR.extension == "vtr"
        with pytest.raises(ValueError):
            FileFormat.from_extension("jpg")


class TestTaggedValue:
    """Test the tagged value wrapper."""

    def test_wrap_infers_id(self):
        assert TaggedValue.wrap(np.float32(0.5)).type_id is ScalarTypeId.IEEE32
        assert TaggedValue.wrap(np.uint16(7)).type_id is ScalarTypeId.UINT16
        assert TaggedValue.wrap(3).type_id is ScalarTypeId.INT64
        assert TaggedValue.wrap(2.5).type_id is ScalarTypeId.IEEE64
        assert TaggedValue.wrap(RGBA8(1, 2, 3)).type_id is ScalarTypeId.RGBA8

    def test_wrap_rejects(self):
        with pytest.raises(UnsupportedTypeIdError):
            TaggedValue.wrap(True)
        with pytest.raises(UnsupportedTypeIdError):
            TaggedValue.wrap("text")

    def test_wrap_copies_color(self):
        c = RGBA8(1, 2, 3)
        tv = TaggedValue.wrap(c)
        c.r = 99
        assert tv.value.r == 1

    def test_bytes_layout(self):
        data = TaggedValue.wrap(np.int16(-2)).to_bytes()
        assert data == (0x0FFF0004).to_bytes(4, "little") + b"\xfe\xff"

    def test_scalar_bytes(self):
        tv = TaggedValue.wrap(np.float64(1.25))
        restored = TaggedValue.from_bytes(tv.to_bytes())
        assert restored.type_id is ScalarTypeId.IEEE64
        assert restored.value == 1.25

    def test_color_bytes(self):
        tv = TaggedValue.wrap(RGBAf(0.25, 0.5, 0.75, 1.0))
        restored = TaggedValue.from_bytes(tv.to_bytes())
        assert restored.type_id is ScalarTypeId.RGBAF
        assert restored.value == RGBAf(0.25, 0.5, 0.75, 1.0)

    def test_unknown_id(self):
        with pytest.raises(UnsupportedTypeIdError):
            TaggedValue.from_bytes(int(LightKind.POINT).to_bytes(4, "little") + b"\x00")

    def test_short_payload(self):
        with pytest.raises(ValueError):
            TaggedValue.from_bytes(b"\x01\x00")
        with pytest.raises(ValueError):
            TaggedValue.from_bytes(int(ScalarTypeId.IEEE64).to_bytes(4, "little") + b"\x00")

    def test_voidp_not_serialisable(self):
        tv = TaggedValue(ScalarTypeId.VOIDP, 0)
        with pytest.raises(UnsupportedTypeIdError):
            tv.to_bytes()
        with pytest.raises(UnsupportedTypeIdError):
            TaggedValue.from_bytes(int(ScalarTypeId.VOIDP).to_bytes(4, "little") + bytes(8))
