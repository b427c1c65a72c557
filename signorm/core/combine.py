# signorm/core/combine.py
"""
Dataset-level combination.

- concat_datasets: stack homogeneous datasets along time (rows)
- merge_datasets: gather the signal groups of datasets sharing one Time group
"""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from .dataset import Dataset, DatasetArray
from .exceptions import InvalidArgument, InvalidDataset
from .metadata import DatasetMeta
from .signal_group import SignalGroup
from .validation import check_dataset, check_dataset_array


logger = logging.getLogger(__name__)


def _flatten(items: Iterable) -> list[Dataset]:
    out: list[Dataset] = []
    for item in items:
        if isinstance(item, DatasetArray):
            out.extend(item)
        elif isinstance(item, Dataset):
            out.append(item)
        else:
            raise InvalidArgument("Inputs must be datasets or dataset arrays.")
    return out


def _combined_meta(datasets: list[Dataset]) -> DatasetMeta:
    first = datasets[0].meta
    if len(datasets) == 1:
        return first.replace()

    changes = {}
    for field in ("casename", "source", "sourcetype"):
        values = [getattr(d.meta, field) for d in datasets]
        if any(v != values[0] for v in values):
            logger.warning("'%s' fields are not equal. Concatenating those.", field)
            changes[field] = "~".join(values)

    pathnames = [d.meta.pathnames for d in datasets]
    if any(p != pathnames[0] for p in pathnames):
        changes["pathnames"] = tuple(p for paths in pathnames for p in paths)
    return first.replace(**changes)


def concat_datasets(*datasets: Dataset | DatasetArray) -> Dataset:
    """
    Concatenate datasets along time, in the order given.

    Inputs may be datasets or dataset arrays (taken in column-major order).
    All must hold the same groups, names, units and time units. The Time
    group is stacked as-is, with no re-zeroing. Metadata of the first input
    is kept; fields that differ are joined ("a~b") and pathnames appended.
    """
    flat = _flatten(datasets)
    if not flat:
        raise InvalidArgument("concat_datasets() needs at least one dataset.")

    result = check_dataset_array(DatasetArray(flat))
    if not result:
        raise InvalidDataset(f"Inputs cannot be concatenated: {result.message}")
    names = list(flat[0].keys())
    if any(list(d.keys()) != names for d in flat[1:]):
        raise InvalidDataset("Inputs cannot be concatenated: signal groups do not match.")

    groups = {
        name: group.with_values(np.concatenate([d[name].values for d in flat], axis=0))
        for name, group in flat[0].items()
    }
    return Dataset(groups=groups, meta=_combined_meta(flat))


def _same_group(a: SignalGroup, b: SignalGroup) -> bool:
    if a.names != b.names or a.units != b.units or a.descriptions != b.descriptions:
        return False
    if a.values.shape != b.values.shape or a.values.dtype != b.values.dtype:
        return False
    return bool(np.array_equal(a.values, b.values, equal_nan=a.values.dtype.kind in "fc"))


def merge_datasets(*datasets: Dataset, warn: bool = True) -> Dataset:
    """
    Merge the signal groups of datasets that share an identical Time group.

    Group order follows the input sequence. When a group name repeats with
    different contents, the later one wins and the overwritten names are
    logged unless `warn` is False. Metadata comes from the first input.
    """
    if not datasets:
        raise InvalidArgument("merge_datasets() needs at least one dataset.")
    for d in datasets:
        if not isinstance(d, Dataset):
            raise InvalidArgument("merge_datasets() works for scalar datasets only.")
        check_dataset(d).raise_for_invalid("One or more inputs")

    first = datasets[0]
    layers = next(iter(first.signal_groups.values())).layers
    for d in datasets[1:]:
        if next(iter(d.signal_groups.values())).layers != layers:
            raise InvalidDataset("Inputs have incompatible name layers.")
        if d.n_rows != first.n_rows:
            raise InvalidDataset("Inputs have incompatible signal lengths.")
        if not _same_group(d.time, first.time):
            raise InvalidDataset("Inputs have incompatible 'Time' groups.")

    groups = dict(first.groups)
    conflicts: list[str] = []
    for d in datasets[1:]:
        for name, group in d.signal_groups.items():
            if name in groups and not _same_group(groups[name], group) and name not in conflicts:
                conflicts.append(name)
            groups[name] = group

    if warn and conflicts:
        logger.warning("These groups were overwritten as a result of the merge: %s", conflicts)
    return Dataset(groups=groups, meta=first.meta.replace())
