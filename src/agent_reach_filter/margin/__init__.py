"""Margin subsystem — advisory risk levels and boundary-distance helpers."""
from __future__ import annotations

from agent_reach_filter.margin.regions import BoxRegion, ForbiddenRegions
from agent_reach_filter.margin.risk import (
    ActionRisk,
    MarginGate,
    RiskLevel,
    assess_actions,
    classify_distance,
    risk_level,
)

__all__ = [
    "RiskLevel",
    "risk_level",
    "classify_distance",
    "assess_actions",
    "ActionRisk",
    "MarginGate",
    "BoxRegion",
    "ForbiddenRegions",
]
