# signorm/core/timegrid.py
"""
Time-base unification for signals sampled on different grids.

A strategy receives one elapsed-time vector and one data vector per signal
and returns a single common time vector plus the data re-expressed on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np

from .exceptions import InvalidSarray


class TimeGridStrategy(Protocol):
    def __call__(
        self, times: Sequence[np.ndarray], data: Sequence[np.ndarray]
    ) -> tuple[np.ndarray, list[np.ndarray]]: ...


def _is_float(arr: np.ndarray) -> bool:
    return np.issubdtype(arr.dtype, np.floating)


def interpolate(t: np.ndarray, v: np.ndarray, grid: np.ndarray) -> np.ndarray:
    """
    Re-express (t, v) on `grid` without extrapolating.

    Floating data is interpolated linearly; integer and boolean data
    (status words, counters) take the previous sample. Grid points outside
    [t[0], t[-1]] are NaN.
    """
    if _is_float(v):
        return np.interp(grid, t, v.astype(float), left=np.nan, right=np.nan)

    idx = np.searchsorted(t, grid, side="right") - 1
    out = v[np.clip(idx, 0, v.size - 1)].astype(float)
    out[(idx < 0) | (grid > t[-1])] = np.nan
    return out


@dataclass(frozen=True, slots=True)
class FinestGrid:
    """
    Common grid at the finest sample interval found across all signals.

    - If the signal with the most samples already spans the union of all
      time spans, its own time vector is used as the grid.
    - Otherwise a uniform grid at the finest interval is laid from the
      earliest start; the latest end is appended when it is not on the grid.
    - Signals whose time vector equals the grid pass through unchanged.
    """

    rtol: float = 1e-9

    def grid(self, times: Sequence[np.ndarray]) -> np.ndarray:
        t_start = min(float(t[0]) for t in times)
        t_end = max(float(t[-1]) for t in times)

        longest = max(range(len(times)), key=lambda k: (times[k].size, -k))
        candidate = times[longest]
        if np.isclose(candidate[0], t_start) and np.isclose(candidate[-1], t_end):
            return candidate

        steps = [np.diff(t) for t in times if t.size > 1]
        steps = [s[s > 0] for s in steps]
        step = min((float(s.min()) for s in steps if s.size), default=0.0)
        if step <= 0:
            raise InvalidSarray("Cannot resolve a common sample time: no positive intervals.")

        n = int(np.floor((t_end - t_start) / step * (1 + self.rtol))) + 1
        grid = t_start + step * np.arange(n)
        if not np.isclose(grid[-1], t_end, rtol=self.rtol, atol=step * 1e-6):
            grid = np.append(grid, t_end)
        return grid

    def __call__(
        self, times: Sequence[np.ndarray], data: Sequence[np.ndarray]
    ) -> tuple[np.ndarray, list[np.ndarray]]:
        if not times:
            raise InvalidSarray("No signals to place on a common time grid.")

        grid = self.grid(times)
        columns: list[np.ndarray] = []
        for t, v in zip(times, data):
            if t.size == grid.size and np.allclose(t, grid, rtol=self.rtol):
                columns.append(v)
            else:
                columns.append(interpolate(t, v, grid))
        return grid, columns
