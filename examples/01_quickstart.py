#!/usr/bin/env python3
"""Example: Quickstart — agent-reach-filter

Minimal working example: filter the actions of an agent on a line whose
forbidden region is x >= 10, first one step ahead, then two steps ahead,
then under a fixed follow-up policy.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install agent-reach-filter
"""
from __future__ import annotations

import agent_reach_filter
from agent_reach_filter import (
    LineWorld,
    compute_safe_actions,
    compute_safe_actions_under_policy,
    risk_level,
)


def main() -> None:
    print(f"agent-reach-filter version: {agent_reach_filter.__version__}")

    world = LineWorld(limit=10)
    start = 9

    # Step 1: One-step filter
    safe = compute_safe_actions(
        start, world.actions, world.transition, world.is_forbidden, horizon=1
    )
    print(f"\nHorizon 1 at x={start}: {list(safe)}")

    # Step 2: Exhaustive two-step lookahead
    safe = compute_safe_actions(
        start, world.actions, world.transition, world.is_forbidden, horizon=2
    )
    print(f"Horizon 2 at x={start}: {list(safe)}")
    for verdict in safe.excluded:
        print(f"  excluded {verdict.action!r}: {verdict.reason.value}")

    # Step 3: Single rollout under a retreating policy
    safe = compute_safe_actions_under_policy(
        start,
        world.actions,
        world.transition,
        world.is_forbidden,
        world.retreat_policy,
        horizon=5,
    )
    print(f"\nHorizon 5 under retreat policy: {list(safe)}")
    print(f"Verified for {safe.verified_steps} step(s) only.")

    # Step 4: Advisory risk level of the current state
    level = risk_level(start, world.distance, epsilon=1.0)
    print(f"\nRisk at x={start}: {level.value}")


if __name__ == "__main__":
    main()
