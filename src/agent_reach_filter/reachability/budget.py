"""SearchBudget — bound wall-clock time and node expansions of one search.

The horizon already guarantees termination, but with a large action space
``|A| ** horizon`` can still be impractically big.  A budget caps the work
independently of the horizon.  Exhaustion is reported through
:class:`BudgetExhausted`, which the engine turns into a fail-closed
exclusion of the affected candidate action.
"""
from __future__ import annotations

import logging
import threading
import time

logger = logging.getLogger(__name__)


class BudgetExhausted(Exception):
    """Internal signal: the search budget ran out mid-expansion."""


class SearchBudget:
    """Expansion-count and deadline limits shared by all branches of a call.

    Parameters
    ----------
    max_expansions:
        Maximum number of node expansions.  ``None`` means unlimited.
    deadline_seconds:
        Wall-clock limit measured from :meth:`start`.  ``None`` means
        unlimited.

    Raises
    ------
    ValueError
        If a limit is given but not strictly positive.
    """

    def __init__(
        self,
        max_expansions: int | None = None,
        deadline_seconds: float | None = None,
    ) -> None:
        if max_expansions is not None and max_expansions <= 0:
            raise ValueError(
                f"max_expansions must be positive, got {max_expansions}."
            )
        if deadline_seconds is not None and deadline_seconds <= 0:
            raise ValueError(
                f"deadline_seconds must be positive, got {deadline_seconds}."
            )
        self._max_expansions = max_expansions
        self._deadline_seconds = deadline_seconds
        self._lock = threading.Lock()
        self._expansions = 0
        self._started_at: float | None = None
        self._exhausted = False

    def start(self) -> None:
        """Reset counters and start the deadline clock."""
        with self._lock:
            self._expansions = 0
            self._started_at = time.monotonic()
            self._exhausted = False

    def charge(self) -> None:
        """Account for one node expansion.

        Raises
        ------
        BudgetExhausted
            If either limit has been reached.
        """
        with self._lock:
            if self._started_at is None:
                self._started_at = time.monotonic()
            if self._exhausted:
                raise BudgetExhausted()
            if (
                self._max_expansions is not None
                and self._expansions >= self._max_expansions
            ):
                self._mark_exhausted("expansion limit %d reached", self._max_expansions)
            if (
                self._deadline_seconds is not None
                and time.monotonic() - self._started_at >= self._deadline_seconds
            ):
                self._mark_exhausted("deadline of %.3fs passed", self._deadline_seconds)
            self._expansions += 1

    def _mark_exhausted(self, reason: str, limit: float) -> None:
        self._exhausted = True
        logger.warning("Search budget exhausted: " + reason + ".", limit)
        raise BudgetExhausted()

    @property
    def expansions(self) -> int:
        """Node expansions charged since :meth:`start`."""
        return self._expansions

    @property
    def exhausted(self) -> bool:
        """True once either limit has been hit."""
        return self._exhausted

    def __repr__(self) -> str:
        return (
            f"SearchBudget(max_expansions={self._max_expansions}, "
            f"deadline_seconds={self._deadline_seconds}, "
            f"expansions={self._expansions})"
        )
