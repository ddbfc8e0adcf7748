#!/usr/bin/env python3
"""Example: Margin gating over box regions — agent-reach-filter

A point agent moves on a 2-D grid next to a wall.  The reachability filter
removes moves that can reach the wall within the horizon; a margin gate
then drops moves that end too close to it.

Usage:
    python examples/02_margin_gating.py

Requirements:
    pip install agent-reach-filter
"""
from __future__ import annotations

from agent_reach_filter import (
    BoxRegion,
    FilterConfig,
    ForbiddenRegions,
    ReachabilityFilter,
    RiskLevel,
    assess_actions,
)

MOVES: dict[str, tuple[float, float]] = {
    "east": (1.0, 0.0),
    "west": (-1.0, 0.0),
    "north": (0.0, 1.0),
    "south": (0.0, -1.0),
}


def step(state: tuple[float, float], action: str) -> tuple[float, float]:
    dx, dy = MOVES[action]
    return (state[0] + dx, state[1] + dy)


def main() -> None:
    regions = ForbiddenRegions(
        [BoxRegion("wall", lower_bounds=[5.0, -20.0], upper_bounds=[6.0, 20.0])]
    )
    config = FilterConfig(horizon=2, epsilon=1.0, block_at=RiskLevel.WARNING)
    rf = ReachabilityFilter(config)
    state = (2.0, 0.0)

    safe = rf.safe_actions(state, list(MOVES), step, regions.is_forbidden)
    print(f"Reachability-safe moves at {state}: {list(safe)}")

    for risk in assess_actions(state, safe, step, regions.distance, config.epsilon):
        print(f"  {risk.action:<6} distance={risk.distance:.1f} level={risk.level.value}")

    admitted = rf.admissible_actions(
        state, list(MOVES), step, regions.is_forbidden, distance_fn=regions.distance
    )
    print(f"Admitted after margin gate at {config.block_at.value}: {admitted}")


if __name__ == "__main__":
    main()
