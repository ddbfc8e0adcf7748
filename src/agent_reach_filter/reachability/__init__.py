"""Reachability subsystem — bounded-horizon search for admissible actions.

1. **Engine** (:mod:`~agent_reach_filter.reachability.engine`) — exhaustive
   and policy-rollout action filtering.
2. **Keys** (:mod:`~agent_reach_filter.reachability.keys`) — state-key
   policies that control memoisation.
3. **Memo** (:mod:`~agent_reach_filter.reachability.memo`) — per-call,
   thread-safe, compute-once memo table.
4. **Budget** (:mod:`~agent_reach_filter.reachability.budget`) — expansion
   and deadline limits.
"""
from __future__ import annotations

from agent_reach_filter.reachability.budget import SearchBudget
from agent_reach_filter.reachability.engine import (
    ActionVerdict,
    ExclusionReason,
    SafeActionSet,
    SearchMode,
    compute_safe_actions,
    compute_safe_actions_under_policy,
)
from agent_reach_filter.reachability.keys import QuantizedKey, exact_key, no_memo
from agent_reach_filter.reachability.memo import MemoEntry, MemoStats, MemoTable

__all__ = [
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
    "MemoTable",
    "MemoEntry",
    "MemoStats",
]
