"""MemoTable — per-call, thread-safe, compute-once memoisation.

Keys are ``(state_key, remaining_depth)`` pairs.  When several worker
threads ask for the same key at once, exactly one (the *owner*) runs the
computation and the others block until it publishes the result.  If the
owner raises, the same exception is re-raised in every waiter.

Waiting cannot deadlock: a computation for depth ``d`` only ever requests
keys at depth ``d - 1``, so the wait graph is acyclic.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class MemoStats:
    """Counters describing memo table usage for one top-level call.

    Attributes
    ----------
    hits:
        Lookups answered from a completed entry (or an in-flight one).
    misses:
        Lookups that ran the computation.
    skipped:
        Lookups bypassed because the state had no usable key.
    """

    hits: int = 0
    misses: int = 0
    skipped: int = 0


class MemoEntry:
    """One memo slot: filled exactly once, by its owner, with a value or an error."""

    __slots__ = ("event", "value", "error")

    def __init__(self) -> None:
        self.event = threading.Event()
        self.value: object = None
        self.error: BaseException | None = None

    def set_result(self, value: object) -> None:
        self.value = value
        self.event.set()

    def set_error(self, error: BaseException) -> None:
        self.error = error
        self.event.set()

    def result(self) -> object:
        """Block until the entry is filled; return its value or raise its error."""
        self.event.wait()
        if self.error is not None:
            raise self.error
        return self.value


class MemoTable:
    """Concurrent map with at-most-once computation per key.

    Callers either use :meth:`get_or_compute`, or :meth:`claim` an entry
    and fill it later with :meth:`MemoEntry.set_result` /
    :meth:`MemoEntry.set_error` when the computation cannot be expressed
    as a single call.

    Example
    -------
    ::

        memo = MemoTable()
        value = memo.get_or_compute(("s0", 3), lambda: expensive("s0", 3))
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[Hashable, MemoEntry] = {}
        self._stats = MemoStats()

    def claim(self, key: Hashable | None) -> tuple[MemoEntry, bool]:
        """Look up ``key``, registering a new entry when it is absent.

        Returns
        -------
        tuple[MemoEntry, bool]
            The entry, and True when the caller owns it and must fill it.
            A ``None`` key yields a fresh untracked entry owned by the caller.
        """
        with self._lock:
            if key is None:
                self._stats.skipped += 1
                return MemoEntry(), True
            entry = self._entries.get(key)
            if entry is None:
                entry = MemoEntry()
                self._entries[key] = entry
                self._stats.misses += 1
                return entry, True
            self._stats.hits += 1
            return entry, False

    def get_or_compute(self, key: Hashable | None, compute: Callable[[], T]) -> T:
        """Return the value for ``key``, running ``compute`` at most once.

        Parameters
        ----------
        key:
            Hashable memo key.  ``None`` bypasses the table and always calls
            ``compute``.
        compute:
            Zero-argument callable producing the value.

        Raises
        ------
        BaseException
            Whatever ``compute`` raised, in the owner and in every waiter.
        """
        entry, owner = self.claim(key)
        if not owner:
            return entry.result()  # type: ignore[return-value]
        try:
            value = compute()
        except BaseException as exc:
            entry.set_error(exc)
            raise
        entry.set_result(value)
        return value

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and entry.event.is_set() and entry.error is None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def stats(self) -> MemoStats:
        """Snapshot of the usage counters."""
        with self._lock:
            return MemoStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                skipped=self._stats.skipped,
            )

    def __repr__(self) -> str:
        stats = self.stats
        return (
            f"MemoTable(entries={len(self)}, hits={stats.hits}, "
            f"misses={stats.misses}, skipped={stats.skipped})"
        )
