"""Shared fixtures for splmath tests."""

import numpy as np
import pytest

from splmath.config import MathConfig, set_config


@pytest.fixture(autouse=True)
def default_config():
    """Run every test against the default configuration."""
    previous = set_config(MathConfig())
    yield
    set_config(previous)


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(42)
