"""Type and role identifier registry.

Identifiers name a storage type (``ScalarTypeId``) or a semantic role
(file format, camera matrix, material channel, light kind) by integer.
The numeric values are persisted by file formats and binary structures,
so they never change. Each enumeration owns one partition of the id space:

    base(slot) = 0x0FFF0000 + 0x2000 * slot

A partition reserves ``base`` as its ``MIN`` sentinel; valid ids are
contiguous from ``base + 1`` and end one below the ``MAX`` sentinel.
Sentinels are never valid ids.

Example:
    >>> from splmath.registry import ScalarTypeId, decode_id
    >>> int(ScalarTypeId.IEEE32)
    268369929
    >>> decode_id(268369929)
    <ScalarTypeId.IEEE32: 268369929>
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from enum import IntEnum, unique
from typing import TYPE_CHECKING, Any

import numpy as np

from splmath.errors import RegistryError, UnsupportedTypeIdError
from splmath.types import ScalarKind

if TYPE_CHECKING:
    from splmath.color import RGBA

logger = logging.getLogger(__name__)

ENUM_FIRST = 0x0FFF0000
ENUM_RANGE = 0x00002000


def partition_base(slot: int) -> int:
    """Return the ``MIN`` sentinel of partition ``slot``."""
    return ENUM_FIRST + ENUM_RANGE * slot


_TYPE = partition_base(0)
_FILEIO = partition_base(1)
_CAMERA = partition_base(2)
_MATERIAL = partition_base(3)
_LIGHT = partition_base(4)


# ============================================================================
# Partition enumerations
# ============================================================================


@unique
class ScalarTypeId(IntEnum):
    """Storage type identifiers (scalar kinds plus the two color tuples)."""

    UINT8 = _TYPE + 1
    INT8 = _TYPE + 2
    UINT16 = _TYPE + 3
    INT16 = _TYPE + 4
    UINT32 = _TYPE + 5
    INT32 = _TYPE + 6
    UINT64 = _TYPE + 7
    INT64 = _TYPE + 8
    IEEE32 = _TYPE + 9
    IEEE64 = _TYPE + 10
    IEEE128 = _TYPE + 11
    VOIDP = _TYPE + 12
    RGBA8 = _TYPE + 13
    RGBAF = _TYPE + 14

    @classmethod
    def for_kind(cls, kind: ScalarKind) -> ScalarTypeId:
        return cls[kind.name]

    @property
    def kind(self) -> ScalarKind:
        """Scalar kind stored under this id.

        :raises UnsupportedTypeIdError: For the color ids, which are tuples
        """
        try:
            return ScalarKind[self.name]
        except KeyError:
            raise UnsupportedTypeIdError(int(self), f"{self.name} is not a scalar kind") from None

    @property
    def is_color(self) -> bool:
        return self in (ScalarTypeId.RGBA8, ScalarTypeId.RGBAF)


@unique
class FileFormat(IntEnum):
    """Grid file storage formats."""

    PGM = _FILEIO + 1
    PPM = _FILEIO + 2
    RAW = _FILEIO + 3
    PNG = _FILEIO + 4
    TIF = _FILEIO + 5
    NII = _FILEIO + 6
    VTR = _FILEIO + 7

    @property
    def extension(self) -> str:
        return self.name.lower()

    @classmethod
    def from_extension(cls, ext: str) -> FileFormat:
        """Look up a format from a file extension (leading dot optional)."""
        name = ext.lower().lstrip(".")
        if name == "tiff":
            name = "tif"
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown file format extension: {ext!r}") from None


@unique
class CameraMatrix(IntEnum):
    """Which matrix a camera holds. Tags only; matrices behave identically."""

    MODELVIEW = _CAMERA + 1
    ORTHO = _CAMERA + 2
    FRUSTUM = _CAMERA + 3
    VIEWPORT = _CAMERA + 4


@unique
class MaterialChannel(IntEnum):
    """Material channels addressable on a transfer function."""

    OPACITY = _MATERIAL + 1
    EMISSION_RED = _MATERIAL + 2
    EMISSION_GREEN = _MATERIAL + 3
    EMISSION_BLUE = _MATERIAL + 4
    AMBIENT_RED = _MATERIAL + 5
    AMBIENT_GREEN = _MATERIAL + 6
    AMBIENT_BLUE = _MATERIAL + 7
    DIFFUSE_RED = _MATERIAL + 8
    DIFFUSE_GREEN = _MATERIAL + 9
    DIFFUSE_BLUE = _MATERIAL + 10
    SPECULAR_RED = _MATERIAL + 11
    SPECULAR_GREEN = _MATERIAL + 12
    SPECULAR_BLUE = _MATERIAL + 13
    SHININESS = _MATERIAL + 14
    ISOSURFACE = _MATERIAL + 15
    GRADIENT = _MATERIAL + 16
    EXT0 = _MATERIAL + 17


# Sub-range of the material partition, after MaterialChannel's MAX sentinel
_MATERIAL_APPROX = _MATERIAL + 19


@unique
class MaterialApprox(IntEnum):
    """Approximation order of a material channel."""

    CONSTANT = _MATERIAL_APPROX + 1
    LINEAR = _MATERIAL_APPROX + 2
    QUADRATIC = _MATERIAL_APPROX + 3


@unique
class LightKind(IntEnum):
    """Light source kinds."""

    POINT = _LIGHT + 1
    DIRECTIONAL = _LIGHT + 2
    SPOT = _LIGHT + 3


# ============================================================================
# Partition layout
# ============================================================================


@dataclass(frozen=True)
class Partition:
    """Contiguous id range owned by one enumeration.

    :param name: Partition name (``"type"``, ``"fileio"``, ...)
    :param members: Enumeration whose values fill the range
    :param min_id: ``MIN`` sentinel, one below the first valid id
    """

    name: str
    members: type[IntEnum]
    min_id: int
    max_id: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "max_id", self.min_id + len(self.members) + 1)

    @property
    def slot(self) -> int:
        """Index of the reserved range this partition lives in."""
        return (self.min_id - ENUM_FIRST) // ENUM_RANGE

    def contains(self, value: int) -> bool:
        """True if ``value`` lies strictly between the sentinels."""
        return self.min_id < value < self.max_id

    def decode(self, value: int) -> IntEnum:
        if not self.contains(value):
            raise UnsupportedTypeIdError(value, f"outside partition '{self.name}'")
        return self.members(value)


PARTITIONS: tuple[Partition, ...] = (
    Partition("type", ScalarTypeId, _TYPE),
    Partition("fileio", FileFormat, _FILEIO),
    Partition("camera", CameraMatrix, _CAMERA),
    Partition("material", MaterialChannel, _MATERIAL),
    Partition("material_approx", MaterialApprox, _MATERIAL_APPROX),
    Partition("light", LightKind, _LIGHT),
)

_PARTITIONS_BY_NAME = {p.name: p for p in PARTITIONS}
_PARTITIONS_BY_ENUM = {p.members: p for p in PARTITIONS}


def get_partition(which: str | type[IntEnum]) -> Partition:
    """Look up a partition by name or by its enumeration class.

    :raises KeyError: If the partition does not exist
    """
    table = _PARTITIONS_BY_NAME if isinstance(which, str) else _PARTITIONS_BY_ENUM
    if which not in table:
        available = ", ".join(_PARTITIONS_BY_NAME)
        raise KeyError(f"Unknown partition {which!r}. Available: {available}")
    return table[which]


def verify_partitions(partitions: tuple[Partition, ...] = PARTITIONS) -> None:
    """Check contiguity, sentinel exclusion and non-overlap of the layout.

    :raises RegistryError: On the first broken invariant
    """
    for p in partitions:
        values = sorted(int(m) for m in p.members)
        expected = list(range(p.min_id + 1, p.max_id))
        if values != expected:
            raise RegistryError(f"Partition '{p.name}' ids are not contiguous from MIN+1")

    ordered = sorted(partitions, key=lambda p: p.min_id)
    for lower, upper in zip(ordered, ordered[1:]):
        if lower.max_id >= upper.min_id:
            raise RegistryError(f"Partitions '{lower.name}' and '{upper.name}' overlap")

    for p in partitions:
        slot, offset = divmod(p.min_id - ENUM_FIRST, ENUM_RANGE)
        if slot < 0 or p.max_id - p.min_id + offset >= ENUM_RANGE:
            raise RegistryError(f"Partition '{p.name}' leaves its reserved range")

    logger.debug("[registry] %d partitions verified", len(partitions))


def decode_id(value: int, partition: str | type[IntEnum] | None = None) -> IntEnum:
    """Map a persisted integer id back to its enumeration member.

    :param value: Integer id as read from a file or binary structure
    :param partition: Optional partition to restrict the lookup to
    :returns: Member of the owning enumeration
    :raises UnsupportedTypeIdError: If no partition holds ``value``

    Example:
        >>> decode_id(int(LightKind.SPOT))
        <LightKind.SPOT: 268402691>
    """
    value = int(value)
    if partition is not None:
        return get_partition(partition).decode(value)
    for p in PARTITIONS:
        if p.contains(value):
            return p.members(value)
    raise UnsupportedTypeIdError(value, "not in any registry partition")


# ============================================================================
# Tagged values
# ============================================================================

_HEADER = struct.Struct("<I")


@dataclass(frozen=True)
class TaggedValue:
    """A value paired with the ``ScalarTypeId`` of its storage type.

    Used where heterogeneous values cross a boundary, e.g. a grid header
    recording its element type next to a fill value.

    Example:
        >>> tv = TaggedValue.wrap(np.float32(0.5))
        >>> tv.type_id
        <ScalarTypeId.IEEE32: 268369929>
        >>> TaggedValue.from_bytes(tv.to_bytes()) == tv
        True
    """

    type_id: ScalarTypeId
    value: Any

    @classmethod
    def wrap(cls, value: Any) -> TaggedValue:
        """Tag a NumPy scalar, Python int/float or RGBA8/RGBAf color.

        :raises UnsupportedTypeIdError: If the value has no storage id
        """
        from splmath.color import RGBA

        if isinstance(value, RGBA):
            return cls(value.type_id, value.copy())
        if isinstance(value, bool):
            raise UnsupportedTypeIdError(-1, "bool has no storage type id")
        if isinstance(value, int):
            return cls(ScalarTypeId.INT64, np.int64(value))
        if isinstance(value, float):
            return cls(ScalarTypeId.IEEE64, np.float64(value))
        if isinstance(value, np.generic):
            kind = ScalarKind.from_dtype(value.dtype)
            return cls(kind.type_id, value)
        raise UnsupportedTypeIdError(-1, f"{type(value).__name__} has no storage type id")

    def to_bytes(self) -> bytes:
        """Serialise as ``<u4 id>`` followed by the little-endian payload."""
        if self.type_id is ScalarTypeId.VOIDP:
            raise UnsupportedTypeIdError(int(self.type_id), "opaque pointers are not serialisable")
        if self.type_id.is_color:
            payload = self.value.to_numpy()
        else:
            payload = np.asarray(self.value, dtype=self.type_id.kind.dtype)
        payload = payload.astype(payload.dtype.newbyteorder("<"))
        return _HEADER.pack(int(self.type_id)) + payload.tobytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> TaggedValue:
        """Decode bytes written by ``to_bytes``.

        :raises UnsupportedTypeIdError: If the header id is unknown
        :raises ValueError: If the payload is too short
        """
        if len(data) < _HEADER.size:
            raise ValueError(f"Tagged value needs at least {_HEADER.size} bytes, got {len(data)}")
        (raw_id,) = _HEADER.unpack_from(data)
        type_id = decode_id(raw_id, ScalarTypeId)
        if type_id is ScalarTypeId.VOIDP:
            raise UnsupportedTypeIdError(raw_id, "opaque pointers are not serialisable")

        color_cls = _color_class(type_id)
        if color_cls is not None:
            dtype, count = color_cls._kind.dtype, 4
        else:
            dtype, count = type_id.kind.dtype, 1

        dtype = dtype.newbyteorder("<")
        payload = data[_HEADER.size :]
        if len(payload) < dtype.itemsize * count:
            raise ValueError(
                f"{type_id.name} payload needs {dtype.itemsize * count} bytes, got {len(payload)}"
            )
        values = np.frombuffer(payload, dtype=dtype, count=count).astype(dtype.newbyteorder("="))
        if color_cls is not None:
            return cls(type_id, color_cls(values))
        return cls(type_id, values[0])


def _color_class(type_id: ScalarTypeId) -> type[RGBA] | None:
    if not type_id.is_color:
        return None
    from splmath.color import RGBA8, RGBAf

    return RGBA8 if type_id is ScalarTypeId.RGBA8 else RGBAf
