"""Smoke tests for the 3-line quickstart convenience API.

Covers:
- LineWorld (transition, forbidden region, distance, retreat policy, repr)
- constant_policy
- quick_filter — keyword settings bound into a ReachabilityFilter
- quick_line_world_check — exhaustive and policy-rollout modes
- Top-level __init__ exports for all convenience symbols
"""
from __future__ import annotations

import pytest


# ---------------------------------------------------------------------------
# LineWorld
# ---------------------------------------------------------------------------


def test_line_world_import() -> None:
    from agent_reach_filter import LineWorld

    world = LineWorld()
    assert world.limit == 10
    assert world.actions == ("left", "right", "stop")


def test_line_world_transition() -> None:
    from agent_reach_filter import LineWorld

    world = LineWorld()
    assert world.transition(5, "left") == 4
    assert world.transition(5, "right") == 6
    assert world.transition(5, "stop") == 5


def test_line_world_unknown_action_raises() -> None:
    from agent_reach_filter import LineWorld

    with pytest.raises(ValueError, match="Unknown action"):
        LineWorld().transition(0, "jump")


def test_line_world_forbidden_region() -> None:
    from agent_reach_filter import LineWorld

    world = LineWorld(limit=10, lower_limit=-3)
    assert world.is_forbidden(10) is True
    assert world.is_forbidden(9) is False
    assert world.is_forbidden(-3) is True
    assert world.is_forbidden(-2) is False


def test_line_world_distance() -> None:
    from agent_reach_filter import LineWorld

    world = LineWorld(limit=10, lower_limit=-4)
    assert world.distance(7) == 3.0
    assert world.distance(-2) == 2.0
    assert world.distance(12) == 0.0


def test_line_world_invalid_limits() -> None:
    from agent_reach_filter import LineWorld

    with pytest.raises(ValueError):
        LineWorld(limit=5, lower_limit=5)


def test_line_world_retreat_policy() -> None:
    from agent_reach_filter import LineWorld

    world = LineWorld(limit=10, lower_limit=0)
    assert world.retreat_policy(8) == "left"
    assert world.retreat_policy(2) == "right"
    assert LineWorld().retreat_policy(-50) == "left"


def test_line_world_repr() -> None:
    from agent_reach_filter import LineWorld

    assert "limit=10" in repr(LineWorld())


def test_constant_policy() -> None:
    from agent_reach_filter import constant_policy

    policy = constant_policy("stop")
    assert policy(0) == "stop"
    assert policy("anything") == "stop"


# ---------------------------------------------------------------------------
# quick_filter / quick_line_world_check
# ---------------------------------------------------------------------------


def test_quick_filter_binds_settings() -> None:
    from agent_reach_filter import ReachabilityFilter, quick_filter

    rf = quick_filter(horizon=3, epsilon=0.5, max_workers=2)
    assert isinstance(rf, ReachabilityFilter)
    assert rf.config.horizon == 3
    assert rf.config.epsilon == 0.5
    assert rf.config.max_workers == 2


def test_quick_filter_rejects_invalid_settings() -> None:
    from pydantic import ValidationError

    from agent_reach_filter import quick_filter

    with pytest.raises(ValidationError):
        quick_filter(horizon=-1)


def test_quick_line_world_check_one_step() -> None:
    from agent_reach_filter import quick_line_world_check

    safe = quick_line_world_check(start=9, limit=10, horizon=1)
    assert list(safe) == ["left", "stop"]
    assert "right" not in safe


def test_quick_line_world_check_two_steps() -> None:
    from agent_reach_filter import quick_line_world_check

    safe = quick_line_world_check(start=9, limit=10, horizon=2)
    assert list(safe) == ["left"]


def test_quick_line_world_check_policy_mode_defaults_to_retreat() -> None:
    from agent_reach_filter import quick_line_world_check

    safe = quick_line_world_check(start=9, horizon=5, mode="policy_rollout")
    assert list(safe) == ["left", "stop"]


def test_quick_line_world_check_custom_policy() -> None:
    from agent_reach_filter import constant_policy, quick_line_world_check

    safe = quick_line_world_check(
        start=9, horizon=2, mode="policy_rollout", policy=constant_policy("right")
    )
    assert list(safe) == ["left"]


# ---------------------------------------------------------------------------
# Top-level exports
# ---------------------------------------------------------------------------


def test_convenience_exports() -> None:
    import agent_reach_filter

    for name in ("LineWorld", "constant_policy", "quick_filter", "quick_line_world_check"):
        assert name in agent_reach_filter.__all__
