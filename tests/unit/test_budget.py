"""Unit tests for SearchBudget and fail-closed budget exhaustion in the engine."""
from __future__ import annotations

import time

import pytest

from agent_reach_filter.convenience import LineWorld, constant_policy
from agent_reach_filter.reachability.budget import BudgetExhausted, SearchBudget
from agent_reach_filter.reachability.engine import (
    ExclusionReason,
    compute_safe_actions,
    compute_safe_actions_under_policy,
)


class TestSearchBudget:
    def test_unlimited_budget_never_exhausts(self) -> None:
        budget = SearchBudget()
        budget.start()
        for _ in range(1000):
            budget.charge()
        assert budget.expansions == 1000
        assert budget.exhausted is False

    def test_expansion_limit(self) -> None:
        budget = SearchBudget(max_expansions=2)
        budget.start()
        budget.charge()
        budget.charge()
        with pytest.raises(BudgetExhausted):
            budget.charge()
        assert budget.exhausted is True
        assert budget.expansions == 2

    def test_stays_exhausted(self) -> None:
        budget = SearchBudget(max_expansions=1)
        budget.start()
        budget.charge()
        for _ in range(3):
            with pytest.raises(BudgetExhausted):
                budget.charge()

    def test_start_resets(self) -> None:
        budget = SearchBudget(max_expansions=1)
        budget.start()
        budget.charge()
        with pytest.raises(BudgetExhausted):
            budget.charge()
        budget.start()
        budget.charge()
        assert budget.exhausted is False

    def test_deadline(self) -> None:
        budget = SearchBudget(deadline_seconds=0.02)
        budget.start()
        budget.charge()
        time.sleep(0.05)
        with pytest.raises(BudgetExhausted):
            budget.charge()

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_expansions": 0}, {"max_expansions": -3}, {"deadline_seconds": 0.0}],
    )
    def test_invalid_limits_raise(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            SearchBudget(**kwargs)  # type: ignore[arg-type]

    def test_repr(self) -> None:
        assert "max_expansions=5" in repr(SearchBudget(max_expansions=5))


class TestEngineBudget:
    def test_exhaustion_fails_closed(self, open_line_world: LineWorld) -> None:
        result = compute_safe_actions(
            0, open_line_world.actions, open_line_world.transition,
            open_line_world.is_forbidden, 4,
            budget=SearchBudget(max_expansions=2),
        )
        assert list(result) == []
        assert result.budget_exhausted is True
        assert all(
            v.reason == ExclusionReason.BUDGET_EXHAUSTED for v in result.excluded
        )

    def test_direct_entry_still_reported_under_exhaustion(
        self, line_world: LineWorld
    ) -> None:
        result = compute_safe_actions(
            9, line_world.actions, line_world.transition, line_world.is_forbidden, 6,
            budget=SearchBudget(max_expansions=1),
        )
        assert result.verdict_for("right").reason == ExclusionReason.DIRECT_ENTRY

    def test_sufficient_budget_matches_unbudgeted(self, line_world: LineWorld) -> None:
        budgeted = compute_safe_actions(
            9, line_world.actions, line_world.transition, line_world.is_forbidden, 2,
            budget=SearchBudget(max_expansions=1000),
        )
        assert list(budgeted) == ["left"]
        assert budgeted.budget_exhausted is False

    def test_policy_mode_budget(self, open_line_world: LineWorld) -> None:
        result = compute_safe_actions_under_policy(
            0, open_line_world.actions, open_line_world.transition,
            open_line_world.is_forbidden, constant_policy("stop"), 10,
            budget=SearchBudget(max_expansions=12),
        )
        # First candidate uses 9 rollout steps; the second runs out.
        assert list(result) == ["left"]
        assert result.budget_exhausted is True
