# signorm/pipeline/batch.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from signorm.core import (
    SArray,
    Signal,
    SignalGroup,
    StructureKind,
    check_dataset,
    check_dataset_array,
    check_signal_group_array,
    collect_signals,
    kind_of,
    merge_signal_groups,
    select_from_dataset,
    select_from_group,
)
from signorm.core.exceptions import FileNotFound, InvalidArgument, InvalidLayer
from signorm.io.filetypes import is_file_type, rootname, sarray_path
from signorm.io.native import is_native_file, read_native_file
from signorm.io.sarray_file import write_sarray_file
from signorm.names import source_to_layer
from signorm.pipeline.extract import read_raw_file


logger = logging.getLogger(__name__)


def _input_paths(inputs, filetype: str | None) -> list[Path]:
    if filetype is not None:
        folder = Path(inputs)
        if not folder.is_dir():
            raise FileNotFound(f"Folder \"{folder}\" does not exist.")
        return sorted(p for p in folder.iterdir() if p.is_file() and is_file_type(p, filetype))

    if isinstance(inputs, (str, os.PathLike)):
        inputs = [inputs]
    paths = [Path(p) for p in inputs]
    for p in paths:
        if not p.is_file():
            raise FileNotFound(f"File \"{p}\" does not exist.")
    return paths


def dataset_to_sarray(data, layer: str | None = None) -> SArray:
    """
    Flatten a dataset into an S-array.

    Names come from `layer` (default: the first layer). Absolute time gives
    a date-time trigger with `dt` in seconds; elapsed time keeps its units
    and its first value as the trigger. Columns without a name on the
    chosen layer are left out.
    """
    check_dataset(data).raise_for_invalid("Input 'data'")

    t = data.time.values[:, 0]
    if data.is_absolute_time:
        dt = np.diff(t) / np.timedelta64(1, "s")
        units_t, trigger = "sec", t[0]
    else:
        dt = np.diff(t.astype(float))
        units_t, trigger = data.time.units[0], float(t[0])

    if dt.size == 0:
        dt = 1.0
    elif np.any(dt <= 0):
        logger.warning("Sampling is not monotonic.")
    elif (dt.max() - dt.min()) / dt.min() < 1e-6:
        dt = float(dt[0])

    master = collect_signals(data)
    if layer:
        layer = source_to_layer(layer)
        if layer not in master.names:
            raise InvalidLayer(layer)
        names = master.names[layer]
    else:
        names = master.default_names

    unnamed = [k for k, name in enumerate(names) if not name]
    if unnamed:
        logger.warning("Leaving out %d signal(s) with no name on the selected layer.", len(unnamed))

    return SArray(
        Signal(
            name=name,
            data=master.values[:, k],
            dt=dt,
            units_t=units_t,
            units=master.units[k],
            description=master.descriptions[k],
            trigger=trigger,
        )
        for k, name in enumerate(names)
        if name
    )


def convert_to_sarray(
    inputs: str | os.PathLike | Iterable[str | os.PathLike],
    filetype: str | None = None,
    names: Sequence[str] | None = None,
) -> list[Path]:
    """
    Convert raw files to S-array files (S_<rootname>.mat, next to each input).

    `inputs` is one file, a list of files, or a folder when `filetype` is
    given. Files sharing a rootname are converted once, first occurrence
    first; S-array inputs are skipped. With `names`, only those signals are
    kept. Returns the files written.
    """
    if names is not None:
        names = [names] if isinstance(names, str) else list(names)
        if not all(isinstance(n, str) for n in names):
            raise InvalidArgument("Input 'names' must be a list of strings.")

    written: list[Path] = []
    seen: set[str] = set()
    for path in _input_paths(inputs, filetype):
        root = rootname(path)
        if root in seen:
            logger.info("Skipping \"%s\": rootname '%s' already converted.", path, root)
            continue
        seen.add(root)

        if is_file_type(path, "S-array"):
            logger.info("File \"%s\" is already in S-array format.", path)
            continue

        if is_native_file(path):
            sarray = dataset_to_sarray(read_native_file(path))
        else:
            sarray = read_raw_file(path)

        if names is not None:
            sarray, missing = sarray.select(names)
            if missing:
                logger.warning("The following names were not found in \"%s\": %s", path, missing)
            if len(sarray) == 0:
                logger.warning("None of the selected names were found in \"%s\"; nothing written.", path)
                continue

        written.append(write_sarray_file(sarray_path(path), sarray))
    return written


def group_signal_from_array(name: str, array) -> tuple[SignalGroup, list[str]]:
    """
    Gather one named signal from every element of a dataset or signal-group array.

    Columns follow the column-major order of the array. The identifiers are
    the datasets' `source` values when all are set, else zero-padded
    sequence numbers; they are empty when no signal was found.
    """
    if not isinstance(name, str):
        raise InvalidArgument("Input 'name' is not valid.")

    kind = kind_of(array)
    if kind is StructureKind.DATASET_ARRAY:
        check_dataset_array(array).raise_for_invalid("Input 'array'")
        selections = [select_from_dataset(name, e) for e in array]
    elif kind is StructureKind.SIGNAL_GROUP_ARRAY:
        check_signal_group_array(array).raise_for_invalid("Input 'array'")
        selections = [select_from_group(name, e) for e in array]
    else:
        raise InvalidArgument("Input must be a dataset array or a signal group array.")

    signals = merge_signal_groups(*(s.signals for s in selections))
    if signals.n_signals == 0:
        return signals, []

    n = len(array)
    if kind is StructureKind.DATASET_ARRAY and all(e.source for e in array):
        ids = [e.source for e in array]
    else:
        width = len(str(n))
        ids = [f"{k:0{width}d}" for k in range(1, n + 1)]
    return signals, ids
