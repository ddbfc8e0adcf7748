"""ReachabilityFilter — config-bound facade over the filter operations.

The module-level functions in :mod:`agent_reach_filter.reachability.engine`
and :mod:`agent_reach_filter.margin.risk` take every setting as an
argument.  :class:`ReachabilityFilter` binds those settings once from a
:class:`~agent_reach_filter.config.FilterConfig`, so an embedding system
only passes the per-call inputs.
"""
from __future__ import annotations

import logging
from typing import Iterable

from agent_reach_filter.config import FilterConfig
from agent_reach_filter.margin.risk import (
    MarginGate,
    RiskLevel,
    assess_actions,
    risk_level,
)
from agent_reach_filter.reachability.engine import (
    SafeActionSet,
    SearchMode,
    compute_safe_actions,
    compute_safe_actions_under_policy,
)
from agent_reach_filter.types import (
    Action,
    DistanceFn,
    ForbiddenPredicate,
    PolicyFn,
    State,
    TransitionFn,
)

logger = logging.getLogger(__name__)


class ReachabilityFilter:
    """Admissible-action filter configured from a :class:`FilterConfig`.

    The filter holds no state between calls besides its config.

    Parameters
    ----------
    config:
        Filter settings.  Defaults to ``FilterConfig()``.

    Example
    -------
    ::

        rf = ReachabilityFilter(FilterConfig(horizon=3, epsilon=0.5))
        safe = rf.safe_actions(state, actions, step, forbidden)
        level = rf.risk(state, distance)
    """

    def __init__(self, config: FilterConfig | None = None) -> None:
        self._config = config or FilterConfig()

    @property
    def config(self) -> FilterConfig:
        """The bound configuration."""
        return self._config

    def safe_actions(
        self,
        state: State,
        action_space: Iterable[Action],
        transition: TransitionFn,
        is_forbidden: ForbiddenPredicate,
        policy: PolicyFn | None = None,
    ) -> SafeActionSet:
        """Compute the safe action set in the configured mode.

        Raises
        ------
        ValueError
            If the config selects policy rollout but no ``policy`` is given.
        AlreadyForbiddenError
            If ``state`` is already forbidden.
        """
        config = self._config
        if config.mode == SearchMode.POLICY_ROLLOUT:
            if policy is None:
                raise ValueError(
                    "FilterConfig.mode is 'policy_rollout' but no policy was supplied."
                )
            return compute_safe_actions_under_policy(
                state,
                action_space,
                transition,
                is_forbidden,
                policy,
                config.horizon,
                budget=config.budget(),
                max_workers=config.max_workers,
            )
        return compute_safe_actions(
            state,
            action_space,
            transition,
            is_forbidden,
            config.horizon,
            state_key=config.state_key(),
            budget=config.budget(),
            max_workers=config.max_workers,
        )

    def risk(self, state: State, distance_fn: DistanceFn) -> RiskLevel:
        """Risk level of ``state`` using the configured ``epsilon``."""
        return risk_level(state, distance_fn, self._config.epsilon)

    def admissible_actions(
        self,
        state: State,
        action_space: Iterable[Action],
        transition: TransitionFn,
        is_forbidden: ForbiddenPredicate,
        distance_fn: DistanceFn | None = None,
        policy: PolicyFn | None = None,
    ) -> list[Action]:
        """Safe actions, further gated by successor risk when configured.

        Margin gating applies only when both ``config.block_at`` and
        ``distance_fn`` are set; otherwise this returns the safe set as a list.
        """
        action_space = list(action_space)
        safe = self.safe_actions(state, action_space, transition, is_forbidden, policy)
        if self._config.block_at is None or distance_fn is None:
            return list(safe)
        assessments = assess_actions(
            state, safe, transition, distance_fn, self._config.epsilon
        )
        admitted = MarginGate(self._config.block_at).admit(safe, assessments)
        logger.info(
            "Margin gate at %s admitted %d of %d safe action(s).",
            self._config.block_at.value,
            len(admitted),
            len(safe),
        )
        return admitted

    def __repr__(self) -> str:
        config = self._config
        return (
            f"ReachabilityFilter(mode={config.mode.value}, horizon={config.horizon}, "
            f"max_workers={config.max_workers})"
        )
