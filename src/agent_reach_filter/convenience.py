"""Convenience API for agent-reach-filter — 3-line quickstart.

Example
-------
::

    # Option 1 — built-in toy system
    from agent_reach_filter import LineWorld, compute_safe_actions
    world = LineWorld(limit=10)
    safe = compute_safe_actions(9, world.actions, world.transition, world.is_forbidden, 2)
    print(list(safe))  # ["left"]

    # Option 2 — functional quick-* helpers
    from agent_reach_filter import quick_filter, quick_line_world_check
    rf = quick_filter(horizon=3, epsilon=0.5)
    safe = quick_line_world_check(start=9, limit=10, horizon=1)
"""
from __future__ import annotations

from agent_reach_filter.config import FilterConfig
from agent_reach_filter.filter import ReachabilityFilter
from agent_reach_filter.reachability.engine import SafeActionSet, SearchMode
from agent_reach_filter.types import Action, PolicyFn

# ---------------------------------------------------------------------------
# LineWorld toy system
# ---------------------------------------------------------------------------

_STEP: dict[str, int] = {"left": -1, "right": 1, "stop": 0}


class LineWorld:
    """Agent on the integer line with actions ``left``, ``right`` and ``stop``.

    The forbidden region is ``x >= limit`` and, when ``lower_limit`` is
    given, also ``x <= lower_limit``.

    Parameters
    ----------
    limit:
        Upper forbidden threshold.
    lower_limit:
        Optional lower forbidden threshold.  Must be below ``limit``.

    Raises
    ------
    ValueError
        If ``lower_limit >= limit``.
    """

    actions: tuple[str, ...] = ("left", "right", "stop")

    def __init__(self, limit: int = 10, lower_limit: int | None = None) -> None:
        if lower_limit is not None and lower_limit >= limit:
            raise ValueError(
                f"lower_limit ({lower_limit}) must be below limit ({limit})."
            )
        self.limit = limit
        self.lower_limit = lower_limit

    def transition(self, x: int, action: str) -> int:
        """Move one unit left or right, or stay put.

        Raises
        ------
        ValueError
            If ``action`` is not one of :attr:`actions`.
        """
        if action not in _STEP:
            raise ValueError(
                f"Unknown action {action!r}; expected one of {list(self.actions)}."
            )
        return x + _STEP[action]

    def is_forbidden(self, x: int) -> bool:
        """True at or beyond either limit."""
        if x >= self.limit:
            return True
        return self.lower_limit is not None and x <= self.lower_limit

    def distance(self, x: int) -> float:
        """Distance from ``x`` to the nearest forbidden threshold, ``0`` inside."""
        gap = max(self.limit - x, 0)
        if self.lower_limit is not None:
            gap = min(gap, max(x - self.lower_limit, 0))
        return float(gap)

    def retreat_policy(self, x: int) -> str:
        """Policy that steps away from the nearest forbidden threshold."""
        if self.lower_limit is not None and x - self.lower_limit < self.limit - x:
            return "right"
        return "left"

    def __repr__(self) -> str:
        return f"LineWorld(limit={self.limit}, lower_limit={self.lower_limit})"


def constant_policy(action: Action) -> PolicyFn:
    """Return a policy that always chooses ``action``."""

    def policy(state: object) -> Action:
        return action

    return policy


# ---------------------------------------------------------------------------
# Quick helpers
# ---------------------------------------------------------------------------


def quick_filter(horizon: int = 1, **settings: object) -> ReachabilityFilter:
    """Create a :class:`ReachabilityFilter` from keyword settings.

    Parameters
    ----------
    horizon:
        Lookahead depth.
    **settings:
        Any other :class:`~agent_reach_filter.config.FilterConfig` field.

    Returns
    -------
    ReachabilityFilter
    """
    return ReachabilityFilter(FilterConfig(horizon=horizon, **settings))


def quick_line_world_check(
    start: int,
    limit: int = 10,
    horizon: int = 1,
    mode: SearchMode | str = SearchMode.EXHAUSTIVE,
    policy: PolicyFn | None = None,
) -> SafeActionSet:
    """Filter the :class:`LineWorld` actions at ``start``.

    In policy-rollout mode ``policy`` defaults to
    :meth:`LineWorld.retreat_policy`.
    """
    world = LineWorld(limit=limit)
    rf = quick_filter(horizon=horizon, mode=SearchMode(mode))
    if rf.config.mode == SearchMode.POLICY_ROLLOUT and policy is None:
        policy = world.retreat_policy
    return rf.safe_actions(
        start, world.actions, world.transition, world.is_forbidden, policy
    )
