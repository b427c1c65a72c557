# signorm/core/selection.py
from __future__ import annotations

import logging
from typing import NamedTuple, Sequence, Union

import numpy as np

from .dataset import Dataset
from .exceptions import InvalidArgument, InvalidDataset, InvalidSignalGroup
from .kinds import StructureKind, kind_of
from .signal_group import SignalGroup
from .validation import check_dataset, check_signal_group


logger = logging.getLogger(__name__)

Selections = Union[str, Sequence[str], Sequence[int], np.ndarray]


class Selection(NamedTuple):
    """
    Result of a name/index selection.

    - signals: the matched signals, in request order
    - matched: one flag per request
    - index: column of each request in the searched group, -1 where unmatched
    """

    signals: SignalGroup
    matched: np.ndarray
    index: np.ndarray


def collect_signals(data: Dataset) -> SignalGroup:
    """
    Merge all non-Time groups of a dataset into one "master" group.

    Columns follow group declaration order, then column order within group.
    """
    check_dataset(data).raise_for_invalid("Input 'data'")

    groups = list(data.signal_groups.values())
    layers = groups[0].layers
    return SignalGroup(
        names={layer: [n for g in groups for n in g.names[layer]] for layer in layers},
        values=np.concatenate([g.values for g in groups], axis=1),
        units=[u for g in groups for u in g.units],
        descriptions=[d for g in groups for d in g.descriptions],
    )


def _normalize_selections(selections: Selections) -> tuple[list, bool]:
    if isinstance(selections, str):
        return [selections], False
    if isinstance(selections, np.ndarray):
        if selections.size == 0:
            return [], False
        if np.issubdtype(selections.dtype, np.integer):
            return [int(i) for i in selections.reshape(-1)], True
        if selections.dtype.kind in "US":
            return [str(s) for s in selections.reshape(-1)], False
        raise InvalidArgument("Invalid 'selections' input.")

    items = list(selections)
    if not items:
        return [], False
    if all(isinstance(x, str) for x in items):
        return items, False
    if all(isinstance(x, (int, np.integer)) and not isinstance(x, bool) for x in items):
        return [int(x) for x in items], True
    raise InvalidArgument("Invalid 'selections' input: mix names or indices, not both.")


def select_from_group(
    selections: Selections, signals: SignalGroup, *, warn: bool = True
) -> Selection:
    """
    Select signals by name (on any layer) or by column index.

    A name matches the first column carrying it on any layer. The empty
    name matches only a column whose name is empty on every layer.
    Unmatched requests are logged unless `warn` is False, in which case the
    caller is expected to inspect `matched`.
    """
    result = check_signal_group(signals)
    if not result.recognized:
        raise InvalidSignalGroup(f"Input is not a signal group: {result.message}")
    result.raise_for_invalid("Input 'signals'")

    items, by_index = _normalize_selections(selections)

    if by_index:
        n = signals.n_signals
        index = np.array([i if 0 <= i < n else -1 for i in items], dtype=int)
    else:
        rows = signals.names_matrix()
        first: dict[str, int] = {}
        empty_row = -1
        for k, row in enumerate(rows):
            if all(n == "" for n in row):
                if empty_row < 0:
                    empty_row = k
                continue
            for n in row:
                if n:
                    first.setdefault(n, k)
        index = np.array(
            [empty_row if name == "" else first.get(name, -1) for name in items],
            dtype=int,
        )

    matched = index >= 0
    if warn and not matched.all():
        unmatched = [items[k] for k in np.flatnonzero(~matched)]
        what = "selections" if by_index else "names"
        logger.warning("The following %s were not found: %s", what, unmatched)

    return Selection(signals.subset(index[matched]), matched, index)


def select_from_dataset(selections: Selections, data: Dataset, *, warn: bool = True) -> Selection:
    """Select against the flattened master group of a dataset."""
    result = check_dataset(data)
    if not result.recognized:
        raise InvalidDataset(f"Input is not a dataset: {result.message}")
    result.raise_for_invalid("Input 'data'")
    return select_from_group(selections, collect_signals(data), warn=warn)


def select(selections: Selections, obj, *, warn: bool = True):
    """
    Dispatch a selection on the container kind.

    Returns a Selection for a Dataset or SignalGroup, and a list of
    Selections (column-major element order) for the array kinds.
    """
    kind = kind_of(obj)
    if kind is StructureKind.DATASET:
        return select_from_dataset(selections, obj, warn=warn)
    if kind is StructureKind.SIGNAL_GROUP:
        return select_from_group(selections, obj, warn=warn)
    if kind is StructureKind.DATASET_ARRAY:
        return [select_from_dataset(selections, e, warn=warn) for e in obj]
    if kind is StructureKind.SIGNAL_GROUP_ARRAY:
        return [select_from_group(selections, e, warn=warn) for e in obj]
    raise InvalidArgument(f"Selection is not defined for {kind.value} inputs.")


def merge_signal_groups(*groups: SignalGroup) -> SignalGroup:
    """Concatenate signal groups column-wise; layers and row counts must agree."""
    if not groups:
        raise InvalidArgument("merge_signal_groups() needs at least one signal group.")
    for g in groups:
        check_signal_group(g).raise_for_invalid("One or more inputs")

    merged = groups[0].copy()
    for g in groups[1:]:
        merged.insert(g)
    return merged


def names_matrix(obj) -> tuple[list[tuple[str, ...]], list[str]]:
    """Names of every signal on every layer, with the layer list."""
    group = collect_signals(obj) if isinstance(obj, Dataset) else obj
    check_signal_group(group).raise_for_invalid("Input")
    return group.names_matrix(), group.layers
