"""BoxRegion and ForbiddenRegions — forbidden zones over numeric vector states.

A forbidden region is built from axis-aligned boxes in N-dimensional space.
:class:`ForbiddenRegions` exposes the two callables the filter consumes:

* :meth:`ForbiddenRegions.is_forbidden` — a forbidden-region predicate.
* :meth:`ForbiddenRegions.distance` — a distance-to-boundary function for
  :func:`~agent_reach_filter.margin.risk.risk_level`.

Typical uses
------------
* Keep a robot's end-effector away from a fixture.
* Keep a vehicle off the shoulder of the road.
* Mark a band of a physiological vector as irrecoverable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class BoxRegion:
    """Axis-aligned box in N-dimensional space.

    Attributes
    ----------
    name:
        Human-readable identifier.
    lower_bounds:
        Per-dimension inclusive lower limits.  Must have the same length
        as ``upper_bounds``.
    upper_bounds:
        Per-dimension inclusive upper limits.
    description:
        Optional description of what the region represents.

    Raises
    ------
    ValueError
        If ``lower_bounds`` and ``upper_bounds`` have different lengths,
        or if any lower bound exceeds its corresponding upper bound.
    """

    name: str
    lower_bounds: list[float]
    upper_bounds: list[float]
    description: str = ""
    metadata: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.lower_bounds) != len(self.upper_bounds):
            raise ValueError(
                f"Region {self.name!r}: lower_bounds length "
                f"({len(self.lower_bounds)}) must equal upper_bounds length "
                f"({len(self.upper_bounds)})."
            )
        for i, (low, high) in enumerate(zip(self.lower_bounds, self.upper_bounds)):
            if low > high:
                raise ValueError(
                    f"Region {self.name!r}: lower_bounds[{i}]={low} "
                    f"exceeds upper_bounds[{i}]={high}."
                )

    @property
    def n_dims(self) -> int:
        """Number of dimensions of the box."""
        return len(self.lower_bounds)

    def _as_point(self, point: Sequence[float] | np.ndarray) -> np.ndarray:
        arr = np.asarray(point, dtype=np.float64).ravel()
        if arr.shape[0] != self.n_dims:
            raise ValueError(
                f"Region {self.name!r} is {self.n_dims}-dimensional, "
                f"but point has {arr.shape[0]} dimensions."
            )
        return arr

    def contains(self, point: Sequence[float] | np.ndarray) -> bool:
        """Return True if ``point`` lies inside the box (inclusive).

        Raises
        ------
        ValueError
            If ``point`` has the wrong dimensionality.
        """
        arr = self._as_point(point)
        return bool(
            np.all(arr >= np.asarray(self.lower_bounds))
            and np.all(arr <= np.asarray(self.upper_bounds))
        )

    def distance_to_boundary(self, point: Sequence[float] | np.ndarray) -> float:
        """Euclidean distance from ``point`` to the box; ``0.0`` inside or on it.

        Raises
        ------
        ValueError
            If ``point`` has the wrong dimensionality.
        """
        arr = self._as_point(point)
        below = np.asarray(self.lower_bounds) - arr
        above = arr - np.asarray(self.upper_bounds)
        gaps = np.maximum(np.maximum(below, above), 0.0)
        return float(np.linalg.norm(gaps))


class ForbiddenRegions:
    """Union of :class:`BoxRegion` objects forming the forbidden region.

    Parameters
    ----------
    regions:
        Initial boxes.  More can be added with :meth:`add_region`.

    Example
    -------
    ::

        wall = BoxRegion("wall", lower_bounds=[10.0, -5.0], upper_bounds=[11.0, 5.0])
        regions = ForbiddenRegions([wall])
        regions.is_forbidden([10.5, 0.0])  # True
        regions.distance([8.0, 0.0])       # 2.0
    """

    def __init__(self, regions: list[BoxRegion] | None = None) -> None:
        self._regions: dict[str, BoxRegion] = {}
        for region in regions or []:
            self.add_region(region)

    def add_region(self, region: BoxRegion) -> None:
        """Register a region.

        Raises
        ------
        ValueError
            If a region with the same name is already registered.
        """
        if region.name in self._regions:
            raise ValueError(f"Region {region.name!r} is already registered.")
        self._regions[region.name] = region
        logger.debug("Registered forbidden region %r (%d-D).", region.name, region.n_dims)

    def remove_region(self, name: str) -> None:
        """Remove a registered region by name.

        Raises
        ------
        KeyError
            If no region with that name is registered.
        """
        if name not in self._regions:
            raise KeyError(f"No region named {name!r} is registered.")
        del self._regions[name]

    def is_forbidden(self, point: Sequence[float] | np.ndarray) -> bool:
        """Return True if ``point`` lies inside any registered region."""
        return any(region.contains(point) for region in self._regions.values())

    def containing(self, point: Sequence[float] | np.ndarray) -> list[str]:
        """Return the sorted names of all regions containing ``point``."""
        return sorted(
            name for name, region in self._regions.items() if region.contains(point)
        )

    def distance(self, point: Sequence[float] | np.ndarray) -> float:
        """Minimum distance from ``point`` to any registered region.

        Returns ``inf`` when no regions are registered.
        """
        if not self._regions:
            return float("inf")
        return min(
            region.distance_to_boundary(point) for region in self._regions.values()
        )

    def list_regions(self) -> list[str]:
        """Return sorted names of all registered regions."""
        return sorted(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __repr__(self) -> str:
        return f"ForbiddenRegions(regions={self.list_regions()})"
