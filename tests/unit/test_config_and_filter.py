"""Unit tests for FilterConfig and the ReachabilityFilter facade."""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from agent_reach_filter.config import FilterConfig
from agent_reach_filter.convenience import LineWorld, constant_policy
from agent_reach_filter.errors import AlreadyForbiddenError
from agent_reach_filter.filter import ReachabilityFilter
from agent_reach_filter.margin.risk import RiskLevel
from agent_reach_filter.reachability.budget import SearchBudget
from agent_reach_filter.reachability.engine import SearchMode
from agent_reach_filter.reachability.keys import QuantizedKey, exact_key


# ---------------------------------------------------------------------------
# FilterConfig
# ---------------------------------------------------------------------------


class TestFilterConfigDefaults:
    def test_defaults(self) -> None:
        config = FilterConfig()
        assert config.horizon == 1
        assert config.mode == SearchMode.EXHAUSTIVE
        assert config.memoize is True
        assert config.max_workers == 1
        assert config.epsilon == 1.0
        assert config.block_at is None

    def test_state_key_default_is_exact(self) -> None:
        assert FilterConfig().state_key() is exact_key

    def test_state_key_quantized(self) -> None:
        key = FilterConfig(quantization=0.25).state_key()
        assert isinstance(key, QuantizedKey)
        assert key.resolution == 0.25

    def test_state_key_disabled(self) -> None:
        assert FilterConfig(memoize=False, quantization=0.25).state_key() is None

    def test_budget_unlimited(self) -> None:
        assert FilterConfig().budget() is None

    def test_budget_built_fresh(self) -> None:
        config = FilterConfig(max_expansions=50)
        first = config.budget()
        assert isinstance(first, SearchBudget)
        assert first is not config.budget()


class TestFilterConfigValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"horizon": -1},
            {"max_workers": 0},
            {"epsilon": 0.0},
            {"quantization": -0.1},
            {"max_expansions": 0},
            {"deadline_seconds": 0.0},
            {"mode": "random_walk"},
            {"block_at": "doom"},
        ],
    )
    def test_rejects_invalid_values(self, overrides: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            FilterConfig(**overrides)

    def test_string_enums_coerced(self) -> None:
        config = FilterConfig(mode="policy_rollout", block_at="warning")
        assert config.mode is SearchMode.POLICY_ROLLOUT
        assert config.block_at is RiskLevel.WARNING


class TestFilterConfigYaml:
    def test_save_and_load(self, tmp_path: Path) -> None:
        config = FilterConfig(horizon=4, quantization=0.5, block_at=RiskLevel.DANGER)
        path = config.to_yaml(tmp_path / "nested" / "filter.yaml")
        assert path.exists()
        assert FilterConfig.from_yaml(path) == config

    def test_yaml_uses_plain_values(self, tmp_path: Path) -> None:
        path = FilterConfig(mode=SearchMode.POLICY_ROLLOUT).to_yaml(tmp_path / "f.yaml")
        text = path.read_text(encoding="utf-8")
        assert "mode: policy_rollout" in text
        assert "!!python" not in text

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert FilterConfig.from_yaml(path) == FilterConfig()

    def test_partial_file(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.yaml"
        path.write_text("horizon: 3\nmax_workers: 2\n", encoding="utf-8")
        config = FilterConfig.from_yaml(path)
        assert config.horizon == 3
        assert config.max_workers == 2
        assert config.epsilon == 1.0

    def test_invalid_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("horizon: -2\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            FilterConfig.from_yaml(path)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FilterConfig.from_yaml(tmp_path / "missing.yaml")


# ---------------------------------------------------------------------------
# ReachabilityFilter
# ---------------------------------------------------------------------------


class TestReachabilityFilter:
    def test_default_config(self) -> None:
        rf = ReachabilityFilter()
        assert rf.config == FilterConfig()

    def test_exhaustive_mode(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(horizon=2))
        safe = rf.safe_actions(
            9, line_world.actions, line_world.transition, line_world.is_forbidden
        )
        assert list(safe) == ["left"]
        assert safe.mode is SearchMode.EXHAUSTIVE

    def test_policy_mode(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(horizon=5, mode="policy_rollout"))
        safe = rf.safe_actions(
            9, line_world.actions, line_world.transition, line_world.is_forbidden,
            line_world.retreat_policy,
        )
        assert list(safe) == ["left", "stop"]
        assert safe.mode is SearchMode.POLICY_ROLLOUT

    def test_policy_mode_requires_policy(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(mode="policy_rollout"))
        with pytest.raises(ValueError, match="no policy"):
            rf.safe_actions(
                9, line_world.actions, line_world.transition, line_world.is_forbidden
            )

    def test_policy_ignored_in_exhaustive_mode(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(horizon=2))
        safe = rf.safe_actions(
            9, line_world.actions, line_world.transition, line_world.is_forbidden,
            constant_policy("left"),
        )
        assert list(safe) == ["left"]

    def test_budget_from_config(self, open_line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(horizon=4, max_expansions=2))
        safe = rf.safe_actions(
            0, open_line_world.actions, open_line_world.transition,
            open_line_world.is_forbidden,
        )
        assert safe.budget_exhausted is True
        assert list(safe) == []

    def test_fresh_budget_per_call(self, open_line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(horizon=2, max_expansions=10))
        for _ in range(3):
            safe = rf.safe_actions(
                0, open_line_world.actions, open_line_world.transition,
                open_line_world.is_forbidden,
            )
            assert safe.budget_exhausted is False
            assert len(safe) == 3

    def test_already_forbidden(self, line_world: LineWorld) -> None:
        with pytest.raises(AlreadyForbiddenError):
            ReachabilityFilter().safe_actions(
                10, line_world.actions, line_world.transition, line_world.is_forbidden
            )

    def test_risk_uses_configured_epsilon(self, line_world: LineWorld) -> None:
        assert ReachabilityFilter().risk(8, line_world.distance) == RiskLevel.WARNING
        rf = ReachabilityFilter(FilterConfig(epsilon=2.0))
        assert rf.risk(8, line_world.distance) == RiskLevel.DANGER

    def test_repr(self) -> None:
        assert "horizon=1" in repr(ReachabilityFilter())


class TestAdmissibleActions:
    def test_gate_blocks_at_warning(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(block_at=RiskLevel.WARNING))
        admitted = rf.admissible_actions(
            7, line_world.actions, line_world.transition, line_world.is_forbidden,
            distance_fn=line_world.distance,
        )
        assert admitted == ["left"]

    def test_gate_blocks_at_danger(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(block_at=RiskLevel.DANGER))
        admitted = rf.admissible_actions(
            7, line_world.actions, line_world.transition, line_world.is_forbidden,
            distance_fn=line_world.distance,
        )
        assert admitted == ["left", "right", "stop"]

    def test_no_gate_without_threshold(self, line_world: LineWorld) -> None:
        admitted = ReachabilityFilter().admissible_actions(
            8, line_world.actions, line_world.transition, line_world.is_forbidden,
            distance_fn=line_world.distance,
        )
        assert admitted == ["left", "right", "stop"]

    def test_no_gate_without_distance(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(block_at=RiskLevel.SAFE))
        admitted = rf.admissible_actions(
            8, line_world.actions, line_world.transition, line_world.is_forbidden
        )
        assert admitted == ["left", "right", "stop"]

    def test_gate_applies_after_reachability(self, line_world: LineWorld) -> None:
        rf = ReachabilityFilter(FilterConfig(horizon=2, block_at=RiskLevel.COLLAPSE))
        admitted = rf.admissible_actions(
            9, iter(line_world.actions), line_world.transition,
            line_world.is_forbidden, distance_fn=line_world.distance,
        )
        assert admitted == ["left"]
