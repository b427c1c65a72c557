# signorm/core/validation.py
"""
Structural validators for signorm containers.

Each check returns a ValidationResult instead of raising, so callers can
treat an invalid structure as fatal (`raise_for_invalid`) or advisory
(`report`). A result is "unrecognized" when the input is not even the right
kind of structure, and "invalid" when it is the right kind but breaks one of
the container invariants; the message names the first violation found.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

import numpy as np

from .dataset import TIME, Dataset, DatasetArray, SignalGroupArray
from .exceptions import InvalidDataset, InvalidSarray, InvalidSignalGroup
from .kinds import StructureKind
from .signal import SArray, Signal
from .signal_group import SignalGroup


NAME_RE = re.compile(r"^[A-Za-z]\w*$")
LAYER_SUFFIX = "Names"

_ERRORS = {
    StructureKind.SARRAY: InvalidSarray,
    StructureKind.SIGNAL_GROUP: InvalidSignalGroup,
    StructureKind.DATASET: InvalidDataset,
    StructureKind.SIGNAL_GROUP_ARRAY: InvalidSignalGroup,
    StructureKind.DATASET_ARRAY: InvalidDataset,
}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    kind: StructureKind
    recognized: bool = True
    valid: bool = True
    message: str = ""

    def __iter__(self) -> Iterator:
        return iter((self.recognized, self.valid, self.message))

    def __bool__(self) -> bool:
        return self.recognized and self.valid

    def report(self) -> str:
        """Print a one-line verdict (diagnostic mode) and return it."""
        if self:
            line = f"Input is a valid {self.kind.value}."
        else:
            line = f"Not a valid {self.kind.value}: {self.message}"
        print(line)
        return line

    def raise_for_invalid(self, label: str = "Input") -> None:
        if not self:
            raise _ERRORS[self.kind](f"{label} is not a valid {self.kind.value}: {self.message}")


def _unrecognized(kind: StructureKind, message: str) -> ValidationResult:
    return ValidationResult(kind, recognized=False, valid=False, message=message)


def _invalid(kind: StructureKind, message: str) -> ValidationResult:
    return ValidationResult(kind, recognized=True, valid=False, message=message)


def _is_str_list(items) -> bool:
    return isinstance(items, list) and all(isinstance(x, str) for x in items)


# ---------------------------------------------------------------------------
# S-array
# ---------------------------------------------------------------------------
def _valid_trigger(trigger) -> bool:
    if trigger is None or isinstance(trigger, (datetime, np.datetime64, str)):
        return True
    if isinstance(trigger, (int, float, np.integer, np.floating)) and not isinstance(trigger, bool):
        return True
    arr = np.asarray(trigger)
    return np.issubdtype(arr.dtype, np.number) and arr.size in (0, 1, 6) and arr.ndim <= 1


def check_sarray(obj: object) -> ValidationResult:
    kind = StructureKind.SARRAY
    if not isinstance(obj, SArray):
        return _unrecognized(kind, "Not an S-array.")
    if not all(isinstance(s, Signal) for s in obj):
        return _unrecognized(kind, "Array has one or more elements that are not Signals.")

    signals = list(obj)
    if any(not NAME_RE.match(s.name) for s in signals):
        return _invalid(kind, "One or more 'name' values is not valid.")

    for s in signals:
        if not (np.issubdtype(s.data.dtype, np.number) or s.data.dtype == bool):
            return _invalid(kind, "One or more 'data' values is not valid.")
        if s.data.size == 0:
            return _invalid(kind, "One or more 'data' values is empty.")
        if s.data.ndim != 1:
            return _invalid(kind, "One or more 'data' values has the wrong format.")

    for s in signals:
        if isinstance(s.dt, float):
            if not s.dt > 0:
                return _invalid(kind, "One or more 'dt' values is not positive.")
        elif s.dt.size == 0:
            return _invalid(kind, "One or more 'dt' values is empty.")
        elif s.dt.size != s.data.size - 1:
            return _invalid(kind, "One or more 'dt' values has the wrong length.")

    if not all(isinstance(s.units_t, str) for s in signals):
        return _invalid(kind, "One or more 'units_t' values is not a string.")
    if len({s.units_t for s in signals}) > 1:
        return _invalid(kind, "Array is not homogeneous: 'units_t' values differ.")
    if not all(isinstance(s.units, str) for s in signals):
        return _invalid(kind, "One or more 'units' values is not a string.")
    if not all(isinstance(s.description, str) for s in signals):
        return _invalid(kind, "One or more 'description' values is not a string.")
    if not all(_valid_trigger(s.trigger) for s in signals):
        return _invalid(kind, "One or more 'trigger' values is not valid.")

    return ValidationResult(kind)


# ---------------------------------------------------------------------------
# Signal groups
# ---------------------------------------------------------------------------
def check_signal_group(obj: object, *, time: bool = False) -> ValidationResult:
    kind = StructureKind.SIGNAL_GROUP
    if not isinstance(obj, SignalGroup):
        return _unrecognized(kind, "Not a signal group.")
    if not obj.names:
        return _unrecognized(kind, "Name layers are missing.")
    if any(not layer.endswith(LAYER_SUFFIX) for layer in obj.names):
        return _unrecognized(kind, "Contains one or more unrecognized name layers.")

    if not _is_str_list(obj.units):
        return _invalid(kind, "The 'Units' field contains one or more non-string entries.")

    values = obj.values
    absolute = len(obj.units) == 1 and obj.units[0] == "datetime"
    if absolute:
        if not np.issubdtype(values.dtype, np.datetime64):
            return _invalid(kind, "The 'Values' field of a 'datetime' group must hold date-times.")
    elif not (np.issubdtype(values.dtype, np.number) or values.dtype == bool):
        return _invalid(kind, "The 'Values' field is not of valid type.")
    if values.ndim != 2:
        return _invalid(kind, "The 'Values' field must be 2-dimensional.")

    nsignals = values.shape[1]
    for layer, names in obj.names.items():
        if len(names) != nsignals:
            return _invalid(kind, f"The '{layer}' layer has the wrong length.")
        if not _is_str_list(names):
            return _invalid(kind, f"The '{layer}' layer contains one or more non-string entries.")
        if any(n and not NAME_RE.match(n) for n in names):
            return _invalid(kind, f"The '{layer}' layer contains one or more invalid names.")

    if len(obj.units) != nsignals:
        return _invalid(kind, "The 'Units' field has the wrong length.")
    if not _is_str_list(obj.descriptions):
        return _invalid(kind, "The 'Descriptions' field contains one or more non-string entries.")
    if len(obj.descriptions) != nsignals:
        return _invalid(kind, "The 'Descriptions' field has the wrong length.")

    if time and nsignals != 1:
        return _unrecognized(kind, "'Time' signal groups must contain a single data column.")

    return ValidationResult(kind)


# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------
def check_dataset(obj: object) -> ValidationResult:
    kind = StructureKind.DATASET
    if not isinstance(obj, Dataset):
        return _unrecognized(kind, "Not a dataset.")
    if TIME not in obj.groups:
        return _unrecognized(kind, "Missing 'Time' group.")

    # (a) Time is a valid single-column group
    if not check_signal_group(obj.groups[TIME], time=True):
        return _invalid(kind, "The 'Time' group is not a valid signal group.")

    # (b) at least one non-Time group
    groups = obj.signal_groups
    if not groups:
        return _invalid(kind, "Dataset must contain at least one non-Time signal group.")

    bad = [name for name, g in groups.items() if not check_signal_group(g)]
    if bad:
        return _invalid(kind, f"Contains invalid signal group(s): {bad}.")

    # (c) identical name layers, then identical layer order
    layer_lists = [g.layers for g in obj.groups.values()]
    if any(sorted(layers) != sorted(layer_lists[0]) for layers in layer_lists):
        return _invalid(kind, "Signal group name layers do not match.")
    if any(layers != layer_lists[0] for layers in layer_lists):
        return _invalid(kind, "Order of name layers does not match across all signal groups.")

    # (d) one data type across non-Time groups
    dtypes = {g.values.dtype for g in groups.values()}
    if len(dtypes) > 1:
        return _invalid(kind, "Data types do not match across all signal groups.")

    # (e) one row count across all groups, Time included
    if len({g.n_rows for g in obj.groups.values()}) > 1:
        return _invalid(kind, "Signal groups have incompatible data lengths.")

    return ValidationResult(kind)


# ---------------------------------------------------------------------------
# Arrays
# ---------------------------------------------------------------------------
def _divergent_layers(matrices: list[dict[str, list[str]]]) -> tuple[list[str], list[int]]:
    """Layers whose names differ from element 0, and the offending element positions."""
    ref = matrices[0]
    layers: list[str] = []
    elements: list[int] = []
    for k, names in enumerate(matrices[1:], start=1):
        if names == ref and list(names) == list(ref):
            continue
        elements.append(k)
        for layer in dict.fromkeys([*ref, *names]):
            if ref.get(layer) != names.get(layer) and layer not in layers:
                layers.append(layer)
    return layers, elements


def _divergent_units(units: list[list[str]], names: list[str]) -> list[str]:
    rows = zip(*units)
    return [name for name, row in zip(names, rows) if len(set(row)) > 1]


def _check_homogeneity(
    kind: StructureKind,
    matrices: list[dict[str, list[str]]],
    units: list[list[str]],
    default_names: list[str],
    label: str,
) -> ValidationResult | None:
    if len(matrices) < 2:
        return None
    layers, elements = _divergent_layers(matrices)
    if elements:
        detail = f" on layer(s) {layers}" if layers else ""
        return _invalid(
            kind,
            f"Non-homogeneous {label}. Names and/or name orders do not match{detail} "
            f"in element(s) {elements}.",
        )
    if any(u != units[0] for u in units):
        diverging = _divergent_units(units, default_names)
        return _invalid(
            kind,
            f"Non-homogeneous {label}. These signals have inconsistent units: {diverging}.",
        )
    return None


def check_signal_group_array(obj: object, *, time: bool = False) -> ValidationResult:
    kind = StructureKind.SIGNAL_GROUP_ARRAY
    if not isinstance(obj, SignalGroupArray):
        return _unrecognized(kind, "Not a signal group array.")

    elements = list(obj)
    results = [check_signal_group(e, time=time) for e in elements]
    if not all(r.recognized for r in results):
        return _unrecognized(kind, "Not a signal group array.")
    bad = [k for k, r in enumerate(results) if not r.valid]
    if bad:
        return _invalid(kind, f"Contains one or more invalid element(s): {bad}.")

    failure = _check_homogeneity(
        kind,
        [e.names for e in elements],
        [e.units for e in elements],
        elements[0].default_names if elements else [],
        "signal group array",
    )
    if failure is not None:
        return failure

    if time and len(elements) > 1 and any(e.units != elements[0].units for e in elements):
        return _invalid(kind, "Incompatible/non-uniform time units.")

    return ValidationResult(kind)


def check_dataset_array(obj: object) -> ValidationResult:
    # local import: selection depends on this module
    from .selection import collect_signals

    kind = StructureKind.DATASET_ARRAY
    if not isinstance(obj, DatasetArray):
        return _unrecognized(kind, "Not a dataset array.")

    elements = list(obj)
    results = [check_dataset(e) for e in elements]
    if not all(r.recognized for r in results):
        return _unrecognized(kind, "Not a dataset array.")
    bad = [k for k, r in enumerate(results) if not r.valid]
    if bad:
        return _invalid(kind, f"Contains one or more invalid element(s): {bad}.")

    masters = [collect_signals(e) for e in elements]
    failure = _check_homogeneity(
        kind,
        [m.names for m in masters],
        [m.units for m in masters],
        masters[0].default_names if masters else [],
        "dataset array",
    )
    if failure is not None:
        return failure

    if len(elements) > 1 and any(e.time.units != elements[0].time.units for e in elements):
        return _invalid(kind, "Datasets have incompatible time vectors.")

    return ValidationResult(kind)
