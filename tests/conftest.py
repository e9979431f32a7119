"""Shared test configuration and utilities."""

import pytest
from hypothesis import settings

from pivothound.config import SimplexConfig


@pytest.fixture
def atol() -> float:
    """Absolute tolerance for comparing solver output."""
    return 1e-6


@pytest.fixture
def config() -> SimplexConfig:
    """Default solver settings."""
    return SimplexConfig()


# Set test parameters
settings.register_profile("dev", max_examples=50, deadline=None)
settings.load_profile("dev")
