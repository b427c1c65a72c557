# signorm/pipeline/collapse.py
"""
S-array -> Dataset.

Signals are placed on one common time grid, normalized to one data type and
gathered into signal groups. With a source type, the groups, scaling, units
and descriptions defined by its source tab are applied; without one, every
signal lands unchanged in a single group "All".
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

import numpy as np
import pandas as pd

from signorm.core import (
    DEFAULT_LAYER,
    TIME,
    Dataset,
    DatasetMeta,
    FinestGrid,
    SArray,
    SignalGroup,
    TimeGridStrategy,
    check_dataset,
    check_sarray,
    select_from_group,
)
from signorm.core.exceptions import InvalidArgument, InvalidSarray
from signorm.names import NameTables, OverrideRule, conversion_factor


logger = logging.getLogger(__name__)

RAW_GROUP = "All"
# numeric triggers at or above this are POSIX seconds
ABSOLUTE_TRIGGER_MIN = 1e5

_SECONDS_PER_UNIT = {
    "sec": 1.0,
    "s": 1.0,
    "msec": 1e-3,
    "ms": 1e-3,
    "min": 60.0,
    "hr": 3600.0,
    "hrs": 3600.0,
    "days": 86400.0,
}


def _trigger_key(trigger):
    if trigger is None or isinstance(trigger, (str, datetime, np.datetime64)):
        return trigger
    arr = np.asarray(trigger, dtype=float).reshape(-1)
    return tuple(arr.tolist())


def _absolute_start(trigger) -> np.datetime64 | None:
    """Start time of an absolute trigger, or None if it cannot be read."""
    try:
        if isinstance(trigger, (str, datetime, np.datetime64)):
            stamp = pd.Timestamp(trigger)
            return None if pd.isna(stamp) else stamp.to_datetime64().astype("datetime64[ns]")
        arr = np.asarray(trigger, dtype=float).reshape(-1)
        if arr.size == 1:
            seconds = math.floor(arr[0])
            return np.datetime64(seconds, "s").astype("datetime64[ns]") + np.timedelta64(round((arr[0] - seconds) * 1e9), "ns")
        if arr.size == 6:
            y, mo, d, h, mi, s = arr
            start = datetime(int(y), int(mo), int(d), int(h), int(mi)) + timedelta(seconds=float(s))
            return np.datetime64(start, "ns")
    except (ValueError, TypeError, OverflowError):
        pass
    return None


def _time_group(trigger, units_t: str, t: np.ndarray) -> SignalGroup:
    """Build the Time group for elapsed, index, offset or absolute time."""
    if not isinstance(trigger, (type(None), str, datetime, np.datetime64)):
        arr = np.asarray(trigger, dtype=float).reshape(-1)
        trigger = None if arr.size == 0 else float(arr[0]) if arr.size == 1 else arr
    elif isinstance(trigger, str) and not trigger.strip():
        trigger = None

    if trigger is None or (isinstance(trigger, float) and trigger < ABSOLUTE_TRIGGER_MIN):
        offset = 0.0 if trigger is None else trigger
        if units_t:
            if trigger is None:
                logger.info("Trigger value is empty. Assuming elapsed time starting from 0.")
            else:
                logger.info("Trigger value specifies a start time of %g %s.", offset, units_t)
            return SignalGroup.time_group(offset + t, units_t)
        if trigger is None:
            offset = 1.0
            logger.info("Trigger value is empty. Assuming index vector starting from 1.")
        else:
            logger.info("Trigger value specifies a start value of %g.", offset)
        return SignalGroup.time_group(offset + t, "", "Index vector", name="Index")

    start = _absolute_start(trigger)
    if start is None:
        logger.warning("Trigger value is invalid. Assuming time in elapsed seconds.")
        return SignalGroup.time_group(t, units_t or "sec")

    scale = _SECONDS_PER_UNIT.get(units_t)
    if scale is None:
        logger.warning("Time units '%s' not supported with supplied trigger value; assuming seconds.", units_t)
        scale = 1.0
    ns = np.round(t * scale * 1e9).astype(np.int64).astype("timedelta64[ns]")
    return SignalGroup.time_group(start + ns, "datetime")


def _common_dtype(columns: list[np.ndarray]) -> np.dtype:
    """float64 beats float32 beats integer types."""
    floats = [c.dtype for c in columns if np.issubdtype(c.dtype, np.floating)]
    if floats:
        return np.dtype(np.float32) if all(d == np.float32 for d in floats) else np.dtype(np.float64)
    return np.result_type(*[c.dtype for c in columns])


def _apply_rule(group: SignalGroup, j: int, rule: OverrideRule) -> None:
    """
    Apply one override rule to column j:
    - blank factor with units (not "*"): look up the conversion factor
    - explicit factor: scale as-is (NaN blanks the signal)
    - "*" units: assign empty units
    - non-blank description: replace
    """
    factor, units = rule.factor, rule.units
    if factor is None and units and units != "*":
        old = group.units[j]
        f = conversion_factor(old, units) if old else math.nan
        if not math.isnan(f):
            group.values[:, j] = group.values[:, j] * f
            group.units[j] = units
        else:
            logger.warning(
                "No conversion from '%s' to '%s' performed for signal '%s'.",
                old, units, group.default_names[j],
            )
    else:
        if factor is not None:
            group.values[:, j] = group.values[:, j] * factor
        if units:
            group.units[j] = "" if units == "*" else units

    if rule.description:
        group.descriptions[j] = rule.description


def collapse_sarray(
    sarray: SArray,
    sourcetype: str = "",
    *,
    tables: NameTables | None = None,
    nowarn: bool = False,
    strategy: TimeGridStrategy | None = None,
) -> Dataset:
    """
    Collapse an S-array into a dataset.

    Integer-typed signals are resampled with the previous-neighbour rule
    and floating ones linearly (see FinestGrid). Names listed in the source
    tab but absent from the array are reported unless `nowarn` is set.
    """
    result = check_sarray(sarray)
    if not result:
        raise InvalidSarray(f"Input 'sarray' is not a valid S-array: {result.message}")
    if len(sarray) == 0:
        raise InvalidSarray("Input S-array is empty.")

    if sourcetype is None:
        sourcetype = ""
    if not isinstance(sourcetype, str):
        raise InvalidArgument("Input 'sourcetype' is not valid.")
    tab = None
    if sourcetype:
        if tables is None:
            raise InvalidArgument("Name tables are required when a source type is given.")
        tab = tables.source_tab(sourcetype)

    if len({_trigger_key(s.trigger) for s in sarray}) > 1:
        raise InvalidSarray("Fields 'units_t' and 'trigger' are required to be equal for all array elements.")

    unordered = [s.name for s in sarray if np.any(np.asarray(s.dt) <= 0)]
    if unordered:
        logger.warning("Sampling is not monotonic for signal(s) %s; leaving them out.", unordered)
        sarray = SArray(tuple(s for s in sarray if not np.any(np.asarray(s.dt) <= 0)))
        if len(sarray) == 0:
            raise InvalidSarray("Input S-array has no signal with increasing time.")

    times, data = [], []
    for s in sarray:
        values = s.data
        if values.size == 1:
            values = np.repeat(values, 2)
            times.append(s.dt * np.arange(2, dtype=float) if isinstance(s.dt, float) else np.array([0.0, 1.0]))
        else:
            times.append(s.time)
        data.append(values)

    grid, columns = (strategy or FinestGrid())(times, data)
    dtype = _common_dtype(columns)

    master = SignalGroup(
        names={DEFAULT_LAYER: sarray.names},
        values=np.column_stack([c.astype(dtype, copy=False) for c in columns]),
        units=[s.units for s in sarray],
        descriptions=[s.description for s in sarray],
    )
    time = _time_group(sarray.trigger, sarray.units_t, grid)

    groups: dict[str, SignalGroup] = {TIME: time}
    if tab is None or not tab.groups:
        if tab is not None:
            logger.warning("Source tab '%s' defines no signal groups; returning all signals as '%s'.",
                           sourcetype, RAW_GROUP)
        groups[RAW_GROUP] = master
    else:
        if not np.issubdtype(master.values.dtype, np.floating) and any(
            r.factor is not None or r.units for r in tab.rules
        ):
            master = master.with_values(master.values.astype(np.float64))
        for name in tab.groups:
            group = select_from_group(tab.names_for(name), master, warn=not nowarn).signals
            for j, signal_name in enumerate(group.default_names):
                rule = tab.rule_for(name, signal_name)
                if rule is not None:
                    _apply_rule(group, j, rule)
            groups[name] = group

    out = Dataset(groups=groups, meta=DatasetMeta(sourcetype=sourcetype))
    check_dataset(out).raise_for_invalid("Collapsed S-array")
    return out
