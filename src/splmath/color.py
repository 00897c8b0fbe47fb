"""RGBA color tuples.

Colors share the tuple contract of vectors (construction, indexing,
exact equality, per-channel add/subtract/scale) but are not geometric:
there is no dot product, cross product or normalization.

    >>> c = RGBA8(255, 128, 0)
    >>> int(c.a)
    255
    >>> c.to_float().r
    np.float32(1.0)
"""

from __future__ import annotations

import numpy as np

from splmath.base import FixedTuple
from splmath.errors import ScalarKindError, UnsupportedTypeIdError
from splmath.registry import ScalarTypeId
from splmath.types import ScalarKind


def srgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """sRGB transfer function, decoding to linear light."""
    return np.where(srgb <= 0.04045, srgb / 12.92, ((srgb + 0.055) / 1.055) ** 2.4)


def linear_to_srgb(linear: np.ndarray) -> np.ndarray:
    """Inverse of ``srgb_to_linear``."""
    linear = np.maximum(linear, 0.0)
    return np.where(linear <= 0.0031308, linear * 12.92, 1.055 * linear ** (1 / 2.4) - 0.055)


def full_scale(kind: ScalarKind) -> float:
    """Channel value of full intensity: 1.0 for float kinds, the maximum otherwise.

    :raises ScalarKindError: For 64-bit integer kinds, whose maximum is not
        exact in float64
    """
    if kind.is_float:
        return 1.0
    if kind.bits > 32:
        raise ScalarKindError(f"no exact full-scale conversion for {kind.name} channels")
    return float(np.iinfo(kind.dtype).max)


class RGBA(FixedTuple):
    """Color with channels ``r, g, b, a``.

    Integer channels span 0 to the kind's maximum (255 for ``RGBA8``), float
    channels 0 to 1. Built from three channels, alpha defaults to opaque:
    the kind's maximum for integer kinds, 1.0 for float kinds.
    """

    __slots__ = ()
    _shape = (4,)
    _names = ("r", "g", "b", "a")

    @classmethod
    def _components(cls, values: tuple, kind: ScalarKind) -> np.ndarray:
        if len(values) == 3:
            values = (*values, 1.0 if kind.is_float else np.iinfo(kind.dtype).max)
        return super()._components(values, kind)

    @property
    def type_id(self) -> ScalarTypeId:
        """Storage id of this color (``RGBA8`` or ``RGBAF``)."""
        if self.kind is ScalarKind.UINT8:
            return ScalarTypeId.RGBA8
        if self.kind is ScalarKind.IEEE32:
            return ScalarTypeId.RGBAF
        raise UnsupportedTypeIdError(-1, f"no storage id for RGBA[{self.kind.name}]")

    @classmethod
    def from_hex(cls, text: str) -> RGBA:
        """Parse ``#rrggbb`` or ``#rrggbbaa``.

        ``RGBA.from_hex`` gives an 8-bit color; a specialized class such as
        ``RGBAf`` rescales the channels to its own kind.
        """
        digits = text.strip().lstrip("#")
        if len(digits) not in (6, 8):
            raise ValueError(f"Expected #rrggbb or #rrggbbaa, got {text!r}")
        try:
            channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
        except ValueError:
            raise ValueError(f"Invalid hex color {text!r}") from None
        if cls._kind is None or cls._kind is ScalarKind.UINT8:
            return RGBA8(*channels)
        return _from_unit(np.array(channels, dtype=np.float64) / 255.0, cls._kind)

    def to_hex(self) -> str:
        return "#" + "".join(f"{int(c):02x}" for c in self.to_uint8())

    def to_unit(self) -> np.ndarray:
        """Channels as float64, scaled so full intensity is 1.0."""
        return self._data.astype(np.float64) / full_scale(self.kind)

    def to_float(self) -> RGBA:
        """Float color; integer channels are divided by the kind's maximum."""
        if self.kind.is_float:
            return self.astype(ScalarKind.IEEE32)
        return RGBAf(self.to_unit().astype(np.float32))

    def to_uint8(self) -> RGBA:
        """8-bit color; channels are clipped to full scale, scaled to 255 and rounded."""
        if self.kind is ScalarKind.UINT8:
            return self.copy()
        return _from_unit(self.to_unit(), ScalarKind.UINT8)

    def clamped(self) -> RGBA:
        """Copy with float channels clipped to [0, 1]."""
        self._require_float("clamped")
        return self._from_array(np.clip(self._data, 0, 1).astype(self._data.dtype))

    def to_linear(self) -> RGBA:
        """Decode sRGB color channels to linear light; alpha is unchanged."""
        self._require_float("to_linear")
        out = self._data.copy()
        out[:3] = srgb_to_linear(self._data[:3].astype(np.float64))
        return self._from_array(out)

    def to_srgb(self) -> RGBA:
        """Encode linear color channels with the sRGB curve; alpha is unchanged."""
        self._require_float("to_srgb")
        out = self._data.copy()
        out[:3] = linear_to_srgb(self._data[:3].astype(np.float64))
        return self._from_array(out)

    def _require_float(self, op: str) -> None:
        if not self.kind.is_float:
            raise ScalarKindError(f"{type(self).__name__}.{op} needs a float kind; call to_float()")


def _from_unit(unit: np.ndarray, kind: ScalarKind) -> RGBA:
    """Color of ``kind`` from channels where 1.0 is full intensity."""
    if kind.is_float:
        return RGBA(unit, kind=kind)
    scaled = np.rint(np.clip(unit, 0.0, 1.0) * full_scale(kind))
    return RGBA(scaled.astype(kind.dtype), kind=kind)


RGBA8 = RGBA[ScalarKind.UINT8]
RGBAf = RGBA[ScalarKind.IEEE32]
