"""Callable type aliases for the inputs the host system supplies.

States and actions are opaque to the filter: any Python object works.
The callables below are plain duck-typed functions; bound methods,
lambdas and objects with ``__call__`` are all accepted.
"""
from __future__ import annotations

from typing import Any, Callable, Hashable

State = Any
"""Type alias: an opaque state value supplied by the host system."""

Action = Any
"""Type alias: an opaque action value drawn from a finite action space."""

TransitionFn = Callable[[State, Action], State]
"""Pure, deterministic ``(state, action) -> next_state``."""

ForbiddenPredicate = Callable[[State], bool]
"""Pure ``state -> bool``; True when the state lies in the forbidden region."""

PolicyFn = Callable[[State], Action]
"""Fixed decision rule ``state -> action`` used for single-rollout checks."""

DistanceFn = Callable[[State], float]
"""``state -> distance`` from the state to the forbidden-region boundary."""

StateKeyFn = Callable[[State], "Hashable | None"]
"""Maps a state to a memoisation key, or ``None`` to skip memoisation."""
