"""Runtime configuration for splmath.

Holds the few knobs the value types consult: the normalization tolerance,
whether debug dumps are emitted, and the kind used when a tuple is built
without one. Configuration can be loaded from a dict or a JSON file.

Example:
    >>> from splmath import Vector3
    >>> from splmath.config import config_context
    >>> with config_context(debug=True):
    ...     Vector3(1, 2, 3).print()  # logged at DEBUG level
"""

from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

from splmath.errors import ConfigError, ScalarKindError
from splmath.types import ScalarKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MathConfig:
    """Configuration values.

    :param eps: Tolerance for the normalization postcondition, relative
        to ``max(1, target_length)``
    :param debug: Emit ``print()`` dumps through logging
    :param default_kind: Kind name used when a tuple is built without one
    """

    eps: float = 1e-6
    debug: bool = False
    default_kind: str = "ieee64"

    def __post_init__(self):
        if not self.eps > 0.0:
            raise ConfigError(f"eps must be positive, got {self.eps}")
        try:
            kind = ScalarKind.from_dtype(self.default_kind)
        except ScalarKindError as exc:
            raise ConfigError(f"default_kind: {exc}") from exc
        if not kind.is_numeric:
            raise ConfigError(f"default_kind must be numeric, got {self.default_kind!r}")

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.from_dtype(self.default_kind)

    def to_dict(self) -> dict:
        return asdict(self)


# Each thread and asyncio task sees its own active configuration; new
# threads start from the defaults.
_active: ContextVar[MathConfig] = ContextVar("splmath_config", default=MathConfig())


def get_config() -> MathConfig:
    """Return the configuration active in the current context."""
    return _active.get()


def set_config(config: MathConfig) -> MathConfig:
    """Replace the configuration active in the current context.

    Other threads and tasks are not affected.

    :returns: The previous configuration
    """
    previous = _active.get()
    _active.set(config)
    logger.debug("[config] active configuration: %s", config)
    return previous


@contextmanager
def config_context(**overrides) -> Iterator[MathConfig]:
    """Temporarily override configuration values.

    :param overrides: Field values to change
    :raises ConfigError: On unknown fields or invalid values
    """
    config = replace(get_config(), **_check_keys(overrides))
    token = _active.set(config)
    logger.debug("[config] override: %s", overrides)
    try:
        yield config
    finally:
        _active.reset(token)


def config_from_dict(data: dict) -> MathConfig:
    """Create a configuration from a dict of field values.

    :param data: Field values; missing fields keep their defaults
    :raises ConfigError: On unknown fields or invalid values
    """
    return MathConfig(**_check_keys(data))


def load_config_json(path: str | Path) -> MathConfig:
    """Load a configuration from a JSON file.

    :param path: JSON file holding an object of field values
    :returns: Parsed configuration (not activated)
    """
    path = Path(path)
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object, got {type(data).__name__}")
    logger.debug("[config] loaded %s", path)
    return config_from_dict(data)


def _check_keys(data: dict) -> dict:
    known = {f.name for f in fields(MathConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {unknown}. Available: {sorted(known)}")
    return data
