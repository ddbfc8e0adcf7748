"""State-key policies controlling memoisation.

The memo table needs a hashable key per state.  Which key is appropriate
depends on how the host represents states:

* Hashable, exactly comparable states (ints, tuples, frozen dataclasses)
  work with :func:`exact_key`, the default.
* Continuous vectors (numpy arrays, lists of floats) need an explicit
  equality policy.  :class:`QuantizedKey` snaps them onto a grid.
* :func:`no_memo` turns memoisation off entirely.

A key function returning ``None`` means "do not memoise this state"; the
engine then recomputes the subtree, which costs time but never changes
the result.
"""
from __future__ import annotations

from collections.abc import Hashable
from typing import Any

import numpy as np

# Cell indices at or beyond 2**63 do not fit int64 and are not memoised.
_INT64_LIMIT: float = float(2**63)


def exact_key(state: Any) -> Hashable | None:
    """Return ``state`` itself when it is hashable, else ``None``."""
    try:
        hash(state)
    except TypeError:
        return None
    return state


def no_memo(state: Any) -> Hashable | None:
    """Never memoise."""
    return None


class QuantizedKey:
    """Key numeric vector states by their cell on a uniform grid.

    Two states map to the same key when every coordinate rounds to the
    same multiple of ``resolution``.  Callers choose ``resolution`` so that
    states within one cell are interchangeable for safety purposes.

    Parameters
    ----------
    resolution:
        Grid spacing.  Must be strictly positive and finite.

    Raises
    ------
    ValueError
        If ``resolution`` is not a positive finite number.

    Example
    -------
    ::

        key = QuantizedKey(0.01)
        key(np.array([0.1234, 2.0]))  # (12, 200)
    """

    def __init__(self, resolution: float) -> None:
        if not np.isfinite(resolution) or resolution <= 0:
            raise ValueError(
                f"Quantization resolution must be a positive finite number, "
                f"got {resolution!r}."
            )
        self._resolution = float(resolution)

    @property
    def resolution(self) -> float:
        """Grid spacing used for rounding."""
        return self._resolution

    def __call__(self, state: Any) -> Hashable | None:
        try:
            arr = np.asarray(state, dtype=np.float64)
        except (TypeError, ValueError):
            return None
        if not np.all(np.isfinite(arr)):
            return None
        cells = np.rint(arr / self._resolution)
        if np.any(np.abs(cells) >= _INT64_LIMIT):
            return None
        cells = cells.astype(np.int64)
        return (cells.shape, tuple(cells.ravel().tolist()))

    def __repr__(self) -> str:
        return f"QuantizedKey(resolution={self._resolution})"
