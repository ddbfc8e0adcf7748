"""agent-reach-filter — Bounded-horizon reachability filtering of agent actions.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick-start example
-------------------
>>> import agent_reach_filter as arf
>>> arf.__version__
'0.1.0'

Subpackages
-----------
reachability:
    Exhaustive and policy-rollout safe-action search, memoisation and budgets.
margin:
    Distance-based risk levels, margin gating, and box-shaped forbidden regions.
cli:
    Developer command line for inspecting configs and the toy line world.

Safety beyond the configured horizon is never verified.  A retained action
is proven to avoid the forbidden region for ``SafeActionSet.verified_steps``
transitions only.
"""
from __future__ import annotations

__version__: str = "0.1.0"

from agent_reach_filter.errors import (
    AlreadyForbiddenError,
    InvalidDistanceError,
    ReachFilterError,
)

# -- Reachability ---------------------------------------------------------
from agent_reach_filter.reachability import (
    ActionVerdict,
    ExclusionReason,
    QuantizedKey,
    SafeActionSet,
    SearchBudget,
    SearchMode,
    compute_safe_actions,
    compute_safe_actions_under_policy,
    exact_key,
    no_memo,
)

# -- Margin ---------------------------------------------------------------
from agent_reach_filter.margin import (
    ActionRisk,
    BoxRegion,
    ForbiddenRegions,
    MarginGate,
    RiskLevel,
    assess_actions,
    classify_distance,
    risk_level,
)

# -- Configuration --------------------------------------------------------
from agent_reach_filter.config import FilterConfig
from agent_reach_filter.filter import ReachabilityFilter

from agent_reach_filter.convenience import (
    LineWorld,
    constant_policy,
    quick_filter,
    quick_line_world_check,
)

__all__: list[str] = [
    "__version__",
    # errors
    "ReachFilterError",
    "AlreadyForbiddenError",
    "InvalidDistanceError",
    # reachability
    "compute_safe_actions",
    "compute_safe_actions_under_policy",
    "SafeActionSet",
    "ActionVerdict",
    "ExclusionReason",
    "SearchMode",
    "SearchBudget",
    "QuantizedKey",
    "exact_key",
    "no_memo",
    # margin
    "RiskLevel",
    "risk_level",
    "classify_distance",
    "assess_actions",
    "ActionRisk",
    "MarginGate",
    "BoxRegion",
    "ForbiddenRegions",
    # configuration
    "FilterConfig",
    "ReachabilityFilter",
    # convenience
    "LineWorld",
    "constant_policy",
    "quick_filter",
    "quick_line_world_check",
]
