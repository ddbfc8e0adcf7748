"""Shared fixtures for the agent-reach-filter test suite."""
from __future__ import annotations

import pytest

from agent_reach_filter.convenience import LineWorld


@pytest.fixture()
def expected_version() -> str:
    return "0.1.0"


@pytest.fixture()
def line_world() -> LineWorld:
    """Line world whose forbidden region is ``x >= 10``."""
    return LineWorld(limit=10)


@pytest.fixture()
def open_line_world() -> LineWorld:
    """Line world whose forbidden region is far from the origin."""
    return LineWorld(limit=100)
