"""Bounded-horizon forward reachability — the admissible action filter.

Two distinct operations are provided, because they answer different
questions and generally return different sets for the same inputs:

:func:`compute_safe_actions`
    Exhaustive branching.  A candidate action is excluded if *any*
    sequence of actions from its successor state reaches the forbidden
    region within the horizon.  Cost is ``O(|A| ** horizon)`` in the worst
    case, reduced by memoising on ``(state_key, remaining_depth)``.

:func:`compute_safe_actions_under_policy`
    Single deterministic rollout.  After the candidate first action the
    agent follows a fixed policy; the action is excluded if that one
    trajectory touches the forbidden region.  Cost is ``O(|A| * horizon)``.

Horizon semantics
-----------------
The successor of every candidate action is always checked.  With
``horizon > 0`` the successor is further explored for ``horizon - 1``
transitions, so horizons ``0`` and ``1`` both reduce to the one-step
filter.  Nothing beyond the horizon is verified: a retained action is safe
for :attr:`SafeActionSet.verified_steps` transitions, not forever.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Hashable, Iterable

from agent_reach_filter.errors import AlreadyForbiddenError
from agent_reach_filter.reachability.budget import BudgetExhausted, SearchBudget
from agent_reach_filter.reachability.keys import exact_key
from agent_reach_filter.reachability.memo import MemoEntry, MemoTable
from agent_reach_filter.types import (
    Action,
    ForbiddenPredicate,
    PolicyFn,
    State,
    StateKeyFn,
    TransitionFn,
)

logger = logging.getLogger(__name__)


class SearchMode(str, Enum):
    """How continuations after the first action are explored."""

    EXHAUSTIVE = "exhaustive"
    POLICY_ROLLOUT = "policy_rollout"


class ExclusionReason(str, Enum):
    """Why a candidate action was removed from the safe set."""

    DIRECT_ENTRY = "direct_entry"
    REACHABLE_WITHIN_HORIZON = "reachable_within_horizon"
    BUDGET_EXHAUSTED = "budget_exhausted"


@dataclass
class ActionVerdict:
    """Outcome of filtering one candidate action.

    Attributes
    ----------
    action:
        The candidate action.
    safe:
        True when the action was retained.
    reason:
        Why the action was excluded; ``None`` for retained actions.
    steps_to_forbidden:
        Transition count at which the forbidden region was hit, when known.
        ``1`` for direct entry.  In exhaustive mode deeper hits are not
        located exactly and this stays ``None``.
    """

    action: Action
    safe: bool
    reason: ExclusionReason | None = None
    steps_to_forbidden: int | None = None


@dataclass
class SafeActionSet:
    """The admissible subset of an action space, with per-action verdicts.

    Iteration, ``len`` and ``in`` operate on the retained actions, in the
    order they appeared in the action space.

    Attributes
    ----------
    actions:
        Retained actions.
    verdicts:
        One :class:`ActionVerdict` per candidate, in action-space order.
    horizon:
        Horizon the set was computed for.
    mode:
        Search mode used.
    expansions:
        Number of search-node expansions performed.
    memo_hits:
        Memo table lookups answered without recomputation.
    memo_misses:
        Memo table lookups that triggered a computation.
    budget_exhausted:
        True if the search budget ran out.  Undecided actions were then
        excluded (fail-closed).
    """

    actions: list[Action] = field(default_factory=list)
    verdicts: list[ActionVerdict] = field(default_factory=list)
    horizon: int = 0
    mode: SearchMode = SearchMode.EXHAUSTIVE
    expansions: int = 0
    memo_hits: int = 0
    memo_misses: int = 0
    budget_exhausted: bool = False

    @property
    def verified_steps(self) -> int:
        """Number of transitions along which retained actions are proven safe.

        Safety beyond this many steps is unverified.
        """
        return max(self.horizon, 1)

    @property
    def excluded(self) -> list[ActionVerdict]:
        """Verdicts of all excluded actions."""
        return [verdict for verdict in self.verdicts if not verdict.safe]

    def verdict_for(self, action: Action) -> ActionVerdict:
        """Return the verdict recorded for ``action``.

        Raises
        ------
        KeyError
            If ``action`` was not a candidate.
        """
        for verdict in self.verdicts:
            if verdict.action == action:
                return verdict
        raise KeyError(action)

    def as_set(self) -> set[Action]:
        """Return the retained actions as a ``set`` (actions must be hashable)."""
        return set(self.actions)

    def summary(self) -> dict[str, object]:
        """Return a plain-dict summary of the filtering outcome."""
        return {
            "mode": self.mode.value,
            "horizon": self.horizon,
            "verified_steps": self.verified_steps,
            "candidates": len(self.verdicts),
            "retained": len(self.actions),
            "excluded": len(self.verdicts) - len(self.actions),
            "expansions": self.expansions,
            "memo_hits": self.memo_hits,
            "memo_misses": self.memo_misses,
            "budget_exhausted": self.budget_exhausted,
        }

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self.actions)

    def __contains__(self, action: object) -> bool:
        return any(action == retained for retained in self.actions)

    def __repr__(self) -> str:
        return (
            f"SafeActionSet(actions={self.actions!r}, mode={self.mode.value}, "
            f"horizon={self.horizon})"
        )


# ---------------------------------------------------------------------------
# Search machinery
# ---------------------------------------------------------------------------


@dataclass
class _Frame:
    """An open node of the exhaustive search."""

    state: State
    remaining: int
    entry: MemoEntry
    next_action: int = 0


class _Search:
    """One top-level search.  Holds the per-call memo table and budget."""

    def __init__(
        self,
        actions: tuple[Action, ...],
        transition: TransitionFn,
        is_forbidden: ForbiddenPredicate,
        state_key: StateKeyFn | None,
        budget: SearchBudget | None,
    ) -> None:
        self.actions = actions
        self.transition = transition
        self.is_forbidden = is_forbidden
        self.state_key = state_key
        self.budget = budget
        self.memo = MemoTable()
        self.expansions = 0
        self._lock = threading.Lock()

    def _charge(self) -> None:
        if self.budget is not None:
            self.budget.charge()
        with self._lock:
            self.expansions += 1

    def _memo_key(self, state: State, remaining: int) -> Hashable | None:
        if self.state_key is None:
            return None
        key = self.state_key(state)
        if key is None:
            return None
        try:
            hash(key)
        except TypeError:
            return None
        return (key, remaining)

    def reaches_forbidden(self, state: State, remaining: int) -> bool:
        """True if some action sequence of length <= ``remaining`` hits the region.

        Depth-first over an explicit stack, so the horizon is not limited by
        the interpreter's recursion limit.  Every expanded node fills its
        ``(state_key, remaining)`` memo entry on the way out; a failure fills
        the entries of all open nodes with the same error.
        """
        if remaining <= 0:
            return False
        entry, owner = self.memo.claim(self._memo_key(state, remaining))
        if not owner:
            return bool(entry.result())

        stack = [_Frame(state, remaining, entry)]
        hit = False
        try:
            self._charge()
            while stack:
                frame = stack[-1]
                if not hit and frame.next_action < len(self.actions):
                    hit = self._advance(frame, stack)
                    continue
                stack.pop()
                frame.entry.set_result(hit)
        except BaseException as exc:
            for frame in stack:
                frame.entry.set_error(exc)
            raise
        return hit

    def _advance(self, frame: _Frame, stack: list[_Frame]) -> bool:
        """Try the next action of ``frame``; True on a decided hit."""
        action = self.actions[frame.next_action]
        frame.next_action += 1
        next_state = self.transition(frame.state, action)
        if self.is_forbidden(next_state):
            return True
        remaining = frame.remaining - 1
        if remaining <= 0:
            return False
        entry, owner = self.memo.claim(self._memo_key(next_state, remaining))
        if not owner:
            return bool(entry.result())
        stack.append(_Frame(next_state, remaining, entry))
        self._charge()
        return False

    def rollout_hits(
        self, state: State, policy: PolicyFn, remaining: int
    ) -> int | None:
        """Follow ``policy`` for ``remaining`` steps; return the 1-based hit step."""
        for step in range(1, remaining + 1):
            self._charge()
            state = self.transition(state, policy(state))
            if self.is_forbidden(state):
                return step
        return None


def _validate_horizon(horizon: int) -> None:
    if isinstance(horizon, bool) or not isinstance(horizon, int):
        raise ValueError(f"horizon must be an int, got {type(horizon).__name__}.")
    if horizon < 0:
        raise ValueError(f"horizon must be >= 0, got {horizon}.")


def _run(
    state: State,
    is_forbidden: ForbiddenPredicate,
    horizon: int,
    mode: SearchMode,
    search: _Search,
    evaluate: Callable[[Action], ActionVerdict],
    max_workers: int,
) -> SafeActionSet:
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}.")
    if is_forbidden(state):
        raise AlreadyForbiddenError(state)

    if search.budget is not None:
        search.budget.start()

    if max_workers > 1 and len(search.actions) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            verdicts = list(executor.map(evaluate, search.actions))
    else:
        verdicts = [evaluate(action) for action in search.actions]

    stats = search.memo.stats
    result = SafeActionSet(
        actions=[verdict.action for verdict in verdicts if verdict.safe],
        verdicts=verdicts,
        horizon=horizon,
        mode=mode,
        expansions=search.expansions,
        memo_hits=stats.hits,
        memo_misses=stats.misses,
        budget_exhausted=search.budget is not None and search.budget.exhausted,
    )
    logger.info(
        "Filtered %d candidate action(s) [%s, horizon=%d]: %d retained, "
        "%d expansions, %d memo hits.",
        len(verdicts),
        mode.value,
        horizon,
        len(result.actions),
        result.expansions,
        result.memo_hits,
    )
    return result


def _log_exclusion(verdict: ActionVerdict) -> ActionVerdict:
    if not verdict.safe:
        logger.debug(
            "Excluded action %r: %s (steps_to_forbidden=%s).",
            verdict.action,
            verdict.reason.value if verdict.reason else None,
            verdict.steps_to_forbidden,
        )
    return verdict


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------


def compute_safe_actions(
    state: State,
    action_space: Iterable[Action],
    transition: TransitionFn,
    is_forbidden: ForbiddenPredicate,
    horizon: int,
    *,
    state_key: StateKeyFn | None = exact_key,
    budget: SearchBudget | None = None,
    max_workers: int = 1,
) -> SafeActionSet:
    """Return the actions whose exhaustive continuations avoid the forbidden region.

    Parameters
    ----------
    state:
        Current state.  Must not itself be forbidden.
    action_space:
        Finite iterable of candidate actions, also used for branching at
        every depth.  An empty action space yields an empty result.
    transition:
        Pure ``(state, action) -> next_state``.
    is_forbidden:
        Pure ``state -> bool`` membership test for the forbidden region.
    horizon:
        Lookahead depth, ``>= 0``.
    state_key:
        Memoisation key policy (see :mod:`agent_reach_filter.reachability.keys`).
        ``None`` disables memoisation.
    budget:
        Optional expansion / deadline budget.  Actions still undecided when
        it runs out are excluded.
    max_workers:
        Evaluate first-level candidates on this many threads.

    Returns
    -------
    SafeActionSet

    Raises
    ------
    AlreadyForbiddenError
        If ``state`` is in the forbidden region.
    ValueError
        If ``horizon`` or ``max_workers`` is invalid.

    Example
    -------
    ::

        safe = compute_safe_actions(
            9, ["left", "right", "stop"],
            lambda x, a: x + {"left": -1, "right": 1, "stop": 0}[a],
            lambda x: x >= 10,
            horizon=2,
        )
        list(safe)  # ["left"]
    """
    _validate_horizon(horizon)
    search = _Search(
        tuple(action_space), transition, is_forbidden, state_key, budget
    )

    def evaluate(action: Action) -> ActionVerdict:
        next_state = transition(state, action)
        if is_forbidden(next_state):
            return _log_exclusion(
                ActionVerdict(action, False, ExclusionReason.DIRECT_ENTRY, 1)
            )
        try:
            reachable = search.reaches_forbidden(next_state, horizon - 1)
        except BudgetExhausted:
            return _log_exclusion(
                ActionVerdict(action, False, ExclusionReason.BUDGET_EXHAUSTED)
            )
        if reachable:
            return _log_exclusion(
                ActionVerdict(action, False, ExclusionReason.REACHABLE_WITHIN_HORIZON)
            )
        return ActionVerdict(action, True)

    return _run(
        state,
        is_forbidden,
        horizon,
        SearchMode.EXHAUSTIVE,
        search,
        evaluate,
        max_workers,
    )


def compute_safe_actions_under_policy(
    state: State,
    action_space: Iterable[Action],
    transition: TransitionFn,
    is_forbidden: ForbiddenPredicate,
    policy: PolicyFn,
    horizon: int,
    *,
    budget: SearchBudget | None = None,
    max_workers: int = 1,
) -> SafeActionSet:
    """Return the first actions whose policy-driven rollout avoids the forbidden region.

    After the candidate action, the trajectory continues deterministically
    with ``next = transition(s, policy(s))`` for ``horizon - 1`` further
    steps.  One rollout per candidate; no branching.

    Parameters
    ----------
    state:
        Current state.  Must not itself be forbidden.
    action_space:
        Finite iterable of candidate first actions.
    transition:
        Pure ``(state, action) -> next_state``.
    is_forbidden:
        Pure ``state -> bool``.
    policy:
        Fixed decision rule used after the first action.
    horizon:
        Lookahead depth, ``>= 0``.
    budget:
        Optional expansion / deadline budget.  Each rollout step is one
        expansion.
    max_workers:
        Evaluate candidates on this many threads.

    Returns
    -------
    SafeActionSet
        ``steps_to_forbidden`` is exact for every excluded action (except
        budget exclusions).

    Raises
    ------
    AlreadyForbiddenError
        If ``state`` is in the forbidden region.
    ValueError
        If ``horizon`` or ``max_workers`` is invalid.
    """
    _validate_horizon(horizon)
    search = _Search(tuple(action_space), transition, is_forbidden, None, budget)

    def evaluate(action: Action) -> ActionVerdict:
        next_state = transition(state, action)
        if is_forbidden(next_state):
            return _log_exclusion(
                ActionVerdict(action, False, ExclusionReason.DIRECT_ENTRY, 1)
            )
        try:
            hit = search.rollout_hits(next_state, policy, horizon - 1)
        except BudgetExhausted:
            return _log_exclusion(
                ActionVerdict(action, False, ExclusionReason.BUDGET_EXHAUSTED)
            )
        if hit is not None:
            return _log_exclusion(
                ActionVerdict(
                    action, False, ExclusionReason.REACHABLE_WITHIN_HORIZON, hit + 1
                )
            )
        return ActionVerdict(action, True)

    return _run(
        state,
        is_forbidden,
        horizon,
        SearchMode.POLICY_ROLLOUT,
        search,
        evaluate,
        max_workers,
    )
