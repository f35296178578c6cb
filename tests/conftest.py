"""Shared pytest fixtures for the kernel tests."""
import numpy as np
import pytest


@pytest.fixture
def rng():
    """Deterministic random generator so failures are reproducible."""
    return np.random.default_rng(20160101)


@pytest.fixture
def ramp_4x4():
    """Single-channel 4x4 float image with values 1..16 in row-major order."""
    return np.arange(1, 17, dtype=np.float32).reshape(4, 4, 1)

