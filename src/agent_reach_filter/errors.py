"""Domain errors raised by the reachability filter.

Only two conditions are domain errors.  Everything raised by caller-supplied
callables (transition, predicate, policy, distance) propagates unchanged;
the filter never guesses an answer on their behalf.
"""
from __future__ import annotations


class ReachFilterError(Exception):
    """Base class for all agent-reach-filter domain errors."""


class AlreadyForbiddenError(ReachFilterError):
    """Raised when the state being filtered already lies in the forbidden region.

    Attributes
    ----------
    state:
        The offending state, exactly as passed by the caller.
    """

    def __init__(self, state: object) -> None:
        self.state = state
        super().__init__(
            f"State {state!r} is already inside the forbidden region; "
            "action filtering is undefined for a collapsed state."
        )


class InvalidDistanceError(ReachFilterError, ValueError):
    """Raised when a distance function returns a negative or NaN distance.

    Attributes
    ----------
    distance:
        The value returned by the distance function.
    """

    def __init__(self, distance: float) -> None:
        self.distance = distance
        super().__init__(
            f"Distance to the forbidden boundary must be a non-negative number, "
            f"got {distance!r}."
        )
