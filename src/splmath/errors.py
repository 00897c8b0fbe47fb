"""Error taxonomy for splmath.

Contract errors signal programmer mistakes (bad index, zero divisor,
non-positive normalization target). They are raised before the receiver
is touched, so a caught contract error never leaves a half-updated value.
"""

from __future__ import annotations


class SplMathError(Exception):
    """Base class for all splmath errors."""


class ContractError(SplMathError, AssertionError):
    """A stated precondition or postcondition does not hold."""


class ComponentIndexError(ContractError, IndexError):
    """Component index outside ``0 <= i < N``."""

    def __init__(self, index: object, size: int, owner: str):
        self.index = index
        self.size = size
        super().__init__(f"{owner}: index {index!r} out of range [0, {size})")


class ZeroDivisorError(ContractError, ZeroDivisionError):
    """Division of a tuple by the zero value of its scalar kind."""


class ScalarKindError(SplMathError, TypeError):
    """Scalar kind not supported by the operation, or kinds mixed implicitly."""


class UnsupportedTypeIdError(SplMathError, ValueError):
    """Integer id outside every registry partition (or a sentinel)."""

    def __init__(self, value: int, detail: str = ""):
        self.value = value
        if value >= 0:
            msg = f"Unsupported type id {value} (0x{value:08X})"
        else:
            msg = f"Unsupported type id {value}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class RegistryError(SplMathError):
    """Registry partition layout is inconsistent."""


class ConfigError(SplMathError, ValueError):
    """Invalid configuration value or key."""
