"""Interpolation blocks.

A block is the interpolation-ready table of one member slice: a set of
particle ids sampled on a strictly increasing ``x`` grid and a strictly
increasing ``mu2`` grid, stored as a dense ``[pid][x][mu2]`` array.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from core.errors import PartonsGridError, PidNotFoundError


class Block:
    """Dense ``(pid, x, mu2)`` table with a pid lookup map."""

    def __init__(
        self,
        pids: Iterable[int],
        xgrid: Iterable[float] | np.ndarray,
        mu2grid: Iterable[float] | np.ndarray,
        values: np.ndarray,
    ) -> None:
        """Validate and store block arrays.

        Args:
            pids: Particle ids, one per leading axis entry of ``values``.
            xgrid: Strictly increasing momentum-fraction knots.
            mu2grid: Strictly increasing scale knots.
            values: Array shaped ``(len(pids), len(xgrid), len(mu2grid))``.

        Raises:
            PartonsGridError: If grids are not strictly increasing, pids repeat,
                or the value shape does not match the grids.
        """
        self._pids = tuple(int(pid) for pid in pids)
        self._xgrid = _as_grid(xgrid, "x")
        self._mu2grid = _as_grid(mu2grid, "mu2")
        self._values = np.asarray(values, dtype=np.float64)
        expected_shape = (len(self._pids), self._xgrid.size, self._mu2grid.size)
        if self._values.shape != expected_shape:
            raise PartonsGridError(
                f"Block values have shape {self._values.shape}, expected {expected_shape}."
            )
        self._pid_lookup = {pid: position for position, pid in enumerate(self._pids)}
        if len(self._pid_lookup) != len(self._pids):
            raise PartonsGridError(f"Block pids must be unique, got {list(self._pids)}.")

    @property
    def pids(self) -> tuple[int, ...]:
        return self._pids

    @property
    def xgrid(self) -> np.ndarray:
        return self._xgrid

    @property
    def mu2grid(self) -> np.ndarray:
        return self._mu2grid

    @property
    def values(self) -> np.ndarray:
        return self._values

    def pid_index(self, pid: int) -> int:
        """Return the position of ``pid`` on the leading value axis.

        Raises:
            PidNotFoundError: If the block does not hold ``pid``.
        """
        try:
            return self._pid_lookup[int(pid)]
        except KeyError as error:
            raise PidNotFoundError(int(pid)) from error

    def interpolate(self, pid: int, x: float, mu2: float) -> float:
        """Evaluate the table of ``pid`` at ``(x, mu2)``.

        Interpolation is bilinear in ``(log x, log mu2)`` for positive grids and
        linear otherwise; values at grid nodes are returned exactly.

        Raises:
            PidNotFoundError: If the block does not hold ``pid``.
            PartonsGridError: If the point lies outside the grid.
        """
        table = self._values[self.pid_index(pid)]
        x_low, x_high, x_weight = _locate(self._xgrid, x, "x")
        mu_low, mu_high, mu_weight = _locate(self._mu2grid, mu2, "mu2")
        low_edge = (1.0 - mu_weight) * table[x_low, mu_low] + mu_weight * table[x_low, mu_high]
        high_edge = (1.0 - mu_weight) * table[x_high, mu_low] + mu_weight * table[x_high, mu_high]
        return float((1.0 - x_weight) * low_edge + x_weight * high_edge)

    def __repr__(self) -> str:
        return (
            f"Block(pids={list(self._pids)}, x_points={self._xgrid.size}, "
            f"mu2_points={self._mu2grid.size})"
        )


def _as_grid(knots: Iterable[float] | np.ndarray, axis: str) -> np.ndarray:
    grid = np.asarray(knots if isinstance(knots, np.ndarray) else list(knots), dtype=np.float64)
    if grid.ndim != 1 or grid.size == 0:
        raise PartonsGridError(f"The {axis} grid must be a non-empty one-dimensional sequence.")
    if grid.size > 1 and not bool(np.all(np.diff(grid) > 0)):
        raise PartonsGridError(f"The {axis} grid must be strictly increasing.")
    return grid


def _locate(grid: np.ndarray, value: float, axis: str) -> tuple[int, int, float]:
    """Return bracketing knot indices and the upper-knot weight for ``value``."""
    if not grid[0] <= value <= grid[-1]:
        raise PartonsGridError(
            f"{axis}={value} is outside the grid range [{grid[0]}, {grid[-1]}]."
        )
    if grid.size == 1:
        return 0, 0, 0.0
    upper = int(np.searchsorted(grid, value, side="right"))
    upper = min(max(upper, 1), grid.size - 1)
    lower = upper - 1
    if grid[0] > 0:
        span = math.log(grid[upper]) - math.log(grid[lower])
        weight = (math.log(value) - math.log(grid[lower])) / span
    else:
        weight = (value - grid[lower]) / (grid[upper] - grid[lower])
    return lower, upper, weight
