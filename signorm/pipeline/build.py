# signorm/pipeline/build.py
from __future__ import annotations

import logging
import os
from typing import Sequence

import numpy as np

from signorm.core import TIME, Dataset, DatasetMeta, SignalGroup, collect_signals, concat_datasets, select_from_group
from signorm.core.exceptions import InvalidArgument, InvalidDataset, InvalidGroup, InvalidLayer
from signorm.names import NameTables, layer_to_source, source_to_layer
from signorm.pipeline.extract import extract_data


logger = logging.getLogger(__name__)


def _str_list(value, label: str) -> list[str]:
    items = [value] if isinstance(value, str) else list(value) if value is not None else []
    if not items or not all(isinstance(x, str) for x in items):
        raise InvalidArgument(f"Input '{label}' is invalid or not specified.")
    return list(dict.fromkeys(items))


def _path_list(pathnames) -> list[str]:
    if isinstance(pathnames, (str, os.PathLike)):
        pathnames = [pathnames]
    try:
        items = [os.fspath(p) for p in pathnames]
    except TypeError as e:
        raise InvalidArgument("Input 'pathnames' is invalid.") from e
    if not items:
        raise InvalidArgument("Input 'pathnames' is invalid.")
    return items


def _populate(
    tables: NameTables,
    group: str,
    layers: list[str],
    primary: str,
    master: SignalGroup,
) -> SignalGroup:
    """One requested group, filled from the flattened file contents by primary-layer name."""
    names = tables.names_for(group, primary)
    n = len(names)
    empty = np.array([name == "" for name in names], dtype=bool)
    if empty.any():
        logger.warning(
            "There are %d empty name(s) on layer '%s' in signal group '%s'. Substituting NaNs.",
            int(empty.sum()), primary, group,
        )

    dtype = master.values.dtype if np.issubdtype(master.values.dtype, np.floating) else np.float64
    values = np.full((master.n_rows, n), np.nan, dtype=dtype)
    units = [""] * n
    descriptions = [""] * n

    selection = select_from_group(names, master, warn=False)
    matched = selection.matched & ~empty
    unavailable = [name for name, ok, e in zip(names, matched, empty) if not ok and not e]
    if unavailable:
        logger.warning(
            "These names for signal group '%s' are not available. Substituting NaNs: %s",
            group, unavailable,
        )

    for k in np.flatnonzero(matched):
        col = selection.index[k]
        values[:, k] = master.values[:, col]
        units[k] = master.units[col]
        descriptions[k] = master.descriptions[col]

    return SignalGroup(
        names={layer: tables.names_for(group, layer) for layer in layers},
        values=values,
        units=units,
        descriptions=descriptions,
    )


def _fill_blank_columns(per_file: list[dict[str, SignalGroup]]) -> None:
    # columns a file lacks carry blank units; take them from the files that have them
    for name in per_file[0]:
        groups = [built[name] for built in per_file]
        units = list(groups[0].units)
        descriptions = list(groups[0].descriptions)
        for g in groups[1:]:
            for k, (u, d) in enumerate(zip(g.units, g.descriptions)):
                if not units[k] and u:
                    units[k] = u
                if not descriptions[k] and d:
                    descriptions[k] = d
        for built, g in zip(per_file, groups):
            built[name] = SignalGroup(names=g.names, values=g.values, units=list(units), descriptions=list(descriptions))


def build_dataset(
    tables: NameTables,
    casename: str,
    pathnames: str | os.PathLike | Sequence[str | os.PathLike],
    groups: str | Sequence[str],
    layers: str | Sequence[str],
    source: str | None = None,
) -> Dataset:
    """
    Build one multi-group, multi-layer dataset from one or more files.

    Each file is read with the source type of the primary ("source") layer,
    and every requested group is filled by matching the names on that layer.
    Names that are empty or missing from a file give all-NaN columns.
    Files are concatenated along time, in the order given. Layers follow
    the column order of the MASTER sheet; "Time" is always the first group.
    """
    if not isinstance(casename, str):
        raise InvalidArgument("Input 'casename' is invalid.")
    paths = _path_list(pathnames)
    groups = _str_list(groups, "groups")
    layers = [source_to_layer(layer) for layer in _str_list(layers, "layers")]

    signal_groups = [g for g in groups if g != TIME]
    if not signal_groups:
        raise InvalidArgument("Input 'groups' must name at least one signal group besides 'Time'.")

    bad_groups = [g for g in signal_groups if g not in tables.groups]
    if bad_groups:
        raise InvalidGroup(bad_groups)
    bad_layers = [layer for layer in layers if layer not in tables.layers]
    if bad_layers:
        raise InvalidLayer(bad_layers)

    if source is not None:
        primary = source_to_layer(source)
        if primary not in tables.layers:
            raise InvalidLayer(primary)
        if primary not in layers:
            layers.insert(0, primary)
    else:
        primary = layers[0]
        logger.warning("Input 'source' not specified. Assuming '%s' as source.", primary)
    source = layer_to_source(primary)
    layers = [layer for layer in tables.layers if layer in layers]

    sourcetype = tables.source_type_for(primary)
    if not sourcetype:
        logger.info("Source type is ''.")

    meta = DatasetMeta(casename=casename, source=source, sourcetype=sourcetype)
    per_file: list[dict[str, SignalGroup]] = []
    for path in paths:
        logger.info("Reading file \"%s\" for source type '%s'.", path, sourcetype)
        data = extract_data(path, sourcetype, nowarn=True, tables=tables)
        master = collect_signals(data)

        time = data.time
        built = {
            TIME: SignalGroup(
                names={layer: [TIME] for layer in layers},
                values=time.values,
                units=list(time.units),
                descriptions=list(time.descriptions),
            )
        }
        logger.info("Populating signal groups ...")
        for group in signal_groups:
            built[group] = _populate(tables, group, layers, primary, master)

        if per_file and built[TIME].units != per_file[0][TIME].units:
            raise InvalidDataset(f"File \"{path}\" has a time vector incompatible with the previous files.")
        per_file.append(built)

    _fill_blank_columns(per_file)
    data = concat_datasets(*(Dataset(groups=built, meta=meta) for built in per_file))
    return data.with_meta(pathnames=tuple(paths))
