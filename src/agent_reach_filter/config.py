"""FilterConfig — validated, YAML-persistable filter settings.

A config bundles everything that is a deployment choice rather than part
of the host model: horizon, search mode, memoisation policy, concurrency,
search budget and safety margin.  Configs are persisted as YAML for human
readability.

Example YAML::

    horizon: 3
    mode: exhaustive
    memoize: true
    quantization: 0.05
    max_workers: 4
    max_expansions: 100000
    epsilon: 0.5
    block_at: danger
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from agent_reach_filter.margin.risk import RiskLevel
from agent_reach_filter.reachability.budget import SearchBudget
from agent_reach_filter.reachability.engine import SearchMode
from agent_reach_filter.reachability.keys import QuantizedKey, exact_key
from agent_reach_filter.types import StateKeyFn

logger = logging.getLogger(__name__)


class FilterConfig(BaseModel):
    """Settings for :class:`~agent_reach_filter.filter.ReachabilityFilter`.

    Attributes
    ----------
    horizon:
        Lookahead depth.  ``0`` and ``1`` both mean one-step filtering.
    mode:
        Exhaustive branching or single policy rollout.
    memoize:
        Memoise on ``(state_key, remaining_depth)`` within a call.
    quantization:
        Grid resolution for keying numeric vector states.  ``None`` keys
        states by exact equality (hashable states only).
    max_workers:
        Threads used to evaluate first-level candidate actions.
    max_expansions:
        Search node budget per call.  ``None`` means unlimited.
    deadline_seconds:
        Wall-clock budget per call.  ``None`` means unlimited.
    epsilon:
        Safety-margin unit for risk levels.
    block_at:
        Risk level at or above which
        :meth:`~agent_reach_filter.filter.ReachabilityFilter.admissible_actions`
        drops an action.  ``None`` disables margin gating.
    """

    horizon: int = Field(default=1, ge=0)
    mode: SearchMode = SearchMode.EXHAUSTIVE
    memoize: bool = True
    quantization: float | None = Field(default=None, gt=0)
    max_workers: int = Field(default=1, ge=1)
    max_expansions: int | None = Field(default=None, gt=0)
    deadline_seconds: float | None = Field(default=None, gt=0)
    epsilon: float = Field(default=1.0, gt=0)
    block_at: RiskLevel | None = None

    def state_key(self) -> StateKeyFn | None:
        """Build the memoisation key policy described by this config."""
        if not self.memoize:
            return None
        if self.quantization is not None:
            return QuantizedKey(self.quantization)
        return exact_key

    def budget(self) -> SearchBudget | None:
        """Build a fresh :class:`SearchBudget`, or ``None`` when unlimited."""
        if self.max_expansions is None and self.deadline_seconds is None:
            return None
        return SearchBudget(
            max_expansions=self.max_expansions,
            deadline_seconds=self.deadline_seconds,
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> FilterConfig:
        """Load and validate a config from a YAML file.

        An empty file yields the defaults.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist.
        pydantic.ValidationError
            If the file content is not a valid config.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        config = cls.model_validate(data)
        logger.debug("Loaded filter config from %s: %r", path, config)
        return config

    def to_yaml(self, path: str | Path) -> Path:
        """Write this config to ``path`` as YAML and return the path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
        logger.info("Saved filter config to %s", path)
        return path
