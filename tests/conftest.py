"""Hypothesis profiles and pytest fixtures for optadapt.

Worlds (in-memory chain + adapter) and strategies live in ``world.py``;
the fixtures here hand a fresh world to each test.
"""

from __future__ import annotations

import pytest
from hypothesis import HealthCheck, settings

from optadapt.adapters.gamma import GammaAdapter
from world import World, build_gamma, build_world

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.load_profile("dev")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def world() -> World:
    return build_world()


@pytest.fixture
def gamma(world: World) -> GammaAdapter:
    return build_gamma(world)
