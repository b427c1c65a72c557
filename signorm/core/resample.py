# signorm/core/resample.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

import numpy as np

from .dataset import TIME, Dataset
from .exceptions import InvalidArgument, InvalidDataset
from .signal_group import SignalGroup
from .validation import check_dataset


logger = logging.getLogger(__name__)

_SECOND = np.timedelta64(1, "s")


def _check_ts(ts) -> float | None:
    if ts is None:
        return None
    if np.ndim(ts) != 0 or not np.isfinite(ts) or ts <= 0:
        raise InvalidArgument("Sample time must be a positive scalar value.")
    return float(ts)


def _check_trange(trange) -> tuple | None:
    if trange is None:
        return None
    if len(trange) != 2:
        raise InvalidArgument("Input 'trange' must be a 2-element sequence.")
    lo, hi = trange
    if hi < lo:
        raise InvalidArgument("Invalid 'trange' argument: end precedes start.")
    return lo, hi


def _elapsed_seconds(time: np.ndarray) -> np.ndarray:
    return (time - time[0]) / _SECOND


def _range_mask(data: Dataset, trange: tuple) -> np.ndarray:
    """Rows of `data` inside `trange`, in the units of its time base."""
    t = data.time.values[:, 0]
    lo, hi = trange
    if data.is_absolute_time:
        if isinstance(lo, (datetime, np.datetime64)) or isinstance(lo, str):
            lo, hi = np.datetime64(lo, "ns"), np.datetime64(hi, "ns")
            return (t >= lo) & (t <= hi)
        if np.isinf(lo) or np.isinf(hi):
            raise InvalidArgument("'trange' cannot be real and infinite with date-time datasets.")
        # numbers are read as elapsed seconds from the first sample
        dt = _elapsed_seconds(t)
        return (dt >= lo) & (dt <= hi)

    if isinstance(lo, (datetime, np.datetime64, str)):
        raise InvalidArgument("Time vector has elapsed-time units. Input 'trange' not compatible.")
    return (t >= lo) & (t <= hi)


def _with_rows(data: Dataset, rows: np.ndarray, time_values: np.ndarray | None = None) -> Dataset:
    groups: dict[str, SignalGroup] = {}
    for name, group in data.items():
        if name == TIME and time_values is not None:
            groups[name] = group.with_values(time_values.reshape(-1, 1))
        else:
            groups[name] = group.with_values(group.values[rows, :])
    return data.with_groups(groups)


def limit_time_range(data: Dataset, trange: Sequence) -> Dataset:
    """Keep the rows whose time lies inside `trange` (bounds included)."""
    check_dataset(data).raise_for_invalid("Input 'data'")
    trange = _check_trange(trange)
    if trange is None:
        return data
    return _with_rows(data, _range_mask(data, trange))


def resample_dataset(data: Dataset, ts: float | None = None, trange: Sequence | None = None) -> Dataset:
    """
    Trim a dataset to `trange` and/or resample it at interval `ts`.

    With both arguments None the input is returned unchanged. Elapsed-time
    datasets are re-zeroed after trimming; date-time datasets keep their
    absolute stamps, and `ts` is then in seconds. Resampling is linear.
    """
    ts = _check_ts(ts)
    trange = _check_trange(trange)
    if ts is None and trange is None:
        return data

    check_dataset(data).raise_for_invalid("Input 'data'")
    t = data.time.values[:, 0]
    absolute = data.is_absolute_time
    axis = _elapsed_seconds(t) if absolute else t.astype(float)
    if np.any(np.diff(axis) <= 0):
        raise InvalidDataset("Time vector is non-monotonic.")

    rows = np.ones(t.size, dtype=bool) if trange is None else _range_mask(data, trange)
    if not rows.any():
        raise InvalidArgument("Input 'trange' selects no samples.")

    t = t[rows]
    if not absolute:
        t = t - t[0]
    out = _with_rows(data, rows, t)

    if ts is None:
        return out

    axis = _elapsed_seconds(t) if absolute else t.astype(float)
    grid = np.arange(axis[0], axis[-1] + ts * 1e-9, ts)
    groups: dict[str, SignalGroup] = {}
    for name, group in out.items():
        if name == TIME:
            new_t = t[0] + (grid * 1e9).astype("timedelta64[ns]") if absolute else grid
            groups[name] = group.with_values(np.asarray(new_t).reshape(-1, 1))
            continue
        values = np.empty((grid.size, group.n_signals), dtype=float)
        for k in range(group.n_signals):
            values[:, k] = np.interp(grid, axis, group.values[:, k].astype(float))
        groups[name] = group.with_values(values)

    logger.info("Resampled dataset to %d samples at %g s.", grid.size, ts)
    return out.with_groups(groups)
