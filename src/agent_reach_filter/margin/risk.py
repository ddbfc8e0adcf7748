"""Safety-margin risk levels derived from distance to the forbidden boundary.

:func:`risk_level` buckets a single state's distance ``d`` in units of the
margin ``epsilon``:

* ``d > 10ε`` is :attr:`RiskLevel.SAFE`
* ``3ε < d ≤ 10ε`` is :attr:`RiskLevel.CAUTION`
* ``ε < d ≤ 3ε`` is :attr:`RiskLevel.WARNING`
* ``0 < d ≤ ε`` is :attr:`RiskLevel.DANGER`
* ``d = 0`` is :attr:`RiskLevel.COLLAPSE`

Risk levels are advisory.  Nothing in this module blocks an action on its
own; :class:`MarginGate` is a caller-side policy that can be applied to a
:class:`~agent_reach_filter.reachability.engine.SafeActionSet` explicitly.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from agent_reach_filter.errors import InvalidDistanceError
from agent_reach_filter.reachability.engine import SafeActionSet
from agent_reach_filter.types import Action, DistanceFn, State, TransitionFn

logger = logging.getLogger(__name__)

CAUTION_MULTIPLE: float = 10.0
WARNING_MULTIPLE: float = 3.0


class RiskLevel(str, Enum):
    """Graduated proximity to the forbidden region, least to most severe."""

    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"
    DANGER = "danger"
    COLLAPSE = "collapse"

    @property
    def severity(self) -> int:
        """Ordinal severity, 0 for SAFE up to 4 for COLLAPSE."""
        return _SEVERITY_ORDER.index(self)

    def at_least(self, other: RiskLevel) -> bool:
        """Return True if this level is as severe as ``other`` or worse."""
        return self.severity >= other.severity


_SEVERITY_ORDER: list[RiskLevel] = [
    RiskLevel.SAFE,
    RiskLevel.CAUTION,
    RiskLevel.WARNING,
    RiskLevel.DANGER,
    RiskLevel.COLLAPSE,
]


def _validate_epsilon(epsilon: float) -> None:
    if not math.isfinite(epsilon) or epsilon <= 0:
        raise ValueError(f"epsilon must be a positive finite number, got {epsilon!r}.")


def classify_distance(distance: float, epsilon: float) -> RiskLevel:
    """Bucket a raw distance into a :class:`RiskLevel`.

    Raises
    ------
    InvalidDistanceError
        If ``distance`` is negative or NaN.
    ValueError
        If ``epsilon`` is not a positive finite number.
    """
    _validate_epsilon(epsilon)
    if math.isnan(distance) or distance < 0:
        raise InvalidDistanceError(distance)
    if distance > CAUTION_MULTIPLE * epsilon:
        return RiskLevel.SAFE
    if distance > WARNING_MULTIPLE * epsilon:
        return RiskLevel.CAUTION
    if distance > epsilon:
        return RiskLevel.WARNING
    if distance > 0:
        return RiskLevel.DANGER
    return RiskLevel.COLLAPSE


def risk_level(state: State, distance_fn: DistanceFn, epsilon: float) -> RiskLevel:
    """Return the risk level of ``state`` given its distance to the boundary.

    Parameters
    ----------
    state:
        A state already known not to be forbidden.
    distance_fn:
        ``state -> distance`` to the forbidden-region boundary.
    epsilon:
        The safety-margin unit.  Must be positive.

    Raises
    ------
    InvalidDistanceError
        If ``distance_fn`` returns a negative or NaN value.
    ValueError
        If ``epsilon`` is not a positive finite number.
    """
    _validate_epsilon(epsilon)
    distance = float(distance_fn(state))
    level = classify_distance(distance, epsilon)
    logger.debug("State %r at distance %.6f -> %s.", state, distance, level.value)
    return level


@dataclass
class ActionRisk:
    """Risk of the state an action leads to.

    Attributes
    ----------
    action:
        The candidate action.
    distance:
        Distance from the successor state to the forbidden boundary.
    level:
        Bucketed :class:`RiskLevel` of that distance.
    """

    action: Action
    distance: float
    level: RiskLevel


def assess_actions(
    state: State,
    action_space: Iterable[Action],
    transition: TransitionFn,
    distance_fn: DistanceFn,
    epsilon: float,
) -> list[ActionRisk]:
    """Classify the successor of every action in ``action_space``.

    The successor states are not checked for forbidden-region membership;
    callers normally pass only actions already retained by the filter.

    Raises
    ------
    InvalidDistanceError
        If any successor has a negative or NaN distance.
    """
    _validate_epsilon(epsilon)
    assessments: list[ActionRisk] = []
    for action in action_space:
        distance = float(distance_fn(transition(state, action)))
        assessments.append(
            ActionRisk(
                action=action,
                distance=distance,
                level=classify_distance(distance, epsilon),
            )
        )
    return assessments


class MarginGate:
    """Caller-side policy that drops actions whose successor risk is too high.

    Parameters
    ----------
    block_at:
        Actions whose assessed level is this severe or worse are dropped.

    Example
    -------
    ::

        safe = compute_safe_actions(s, actions, step, forbidden, horizon=3)
        risks = assess_actions(s, safe, step, distance, epsilon=0.5)
        allowed = MarginGate(RiskLevel.DANGER).admit(safe, risks)
    """

    def __init__(self, block_at: RiskLevel = RiskLevel.DANGER) -> None:
        self._block_at = RiskLevel(block_at)

    @property
    def block_at(self) -> RiskLevel:
        """Lowest severity that is blocked."""
        return self._block_at

    def blocks(self, level: RiskLevel) -> bool:
        """Return True if ``level`` is blocked by this gate."""
        return level.at_least(self._block_at)

    def admit(
        self,
        safe_actions: SafeActionSet | Iterable[Action],
        assessments: Iterable[ActionRisk],
    ) -> list[Action]:
        """Return the actions of ``safe_actions`` not blocked by their assessment.

        An action without an assessment is dropped.
        """
        assessments = list(assessments)
        admitted: list[Action] = []
        for action in safe_actions:
            matching = [a for a in assessments if a.action == action]
            if not matching:
                logger.debug("No risk assessment for action %r; dropping.", action)
                continue
            if self.blocks(matching[0].level):
                logger.debug(
                    "Action %r blocked at %s.", action, matching[0].level.value
                )
                continue
            admitted.append(action)
        return admitted

    def __repr__(self) -> str:
        return f"MarginGate(block_at={self._block_at.value})"
