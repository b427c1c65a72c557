# signorm/io/native.py
"""
Native (already normalized) dataset files.

A native file is a MAT-5 container holding one variable per field of the
dataset: `sourcetype` and `Time` first, then one struct per signal group
(one cell array per name layer, plus Values, Units and Descriptions), then
`casename`, `pathnames` and `source`. Absolute time is stored as POSIX
seconds.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import numpy as np
from scipy.io import savemat

from signorm.core import TIME, Dataset, DatasetMeta, SignalGroup, check_dataset
from signorm.core.exceptions import FileNotFound, InvalidArgument, InvalidFileContents
from signorm.io import matfile
from signorm.io.filetypes import NATIVE_SUFFIX, is_file_type


logger = logging.getLogger(__name__)

_META = ("sourcetype", "casename", "pathnames", "source")
_GROUP_FIELDS = ("Values", "Units", "Descriptions")
_NS_PER_SECOND = 10**9


def is_native_file(path: str | os.PathLike) -> bool:
    """True for .sds files, and for .mat files that record a `sourcetype`."""
    path = Path(path)
    if is_file_type(path, "native"):
        return True
    if is_file_type(path, ".mat") and not is_file_type(path, "S-array") and path.is_file():
        return "sourcetype" in matfile.variable_names(path)
    return False


def _group_out(group: SignalGroup, absolute: bool = False) -> dict:
    values = group.values
    if absolute:
        values = values.astype("datetime64[ns]").astype(np.int64) / _NS_PER_SECOND
    out = {layer: matfile.cell(names) for layer, names in group.names.items()}
    out["Values"] = values
    out["Units"] = matfile.cell(group.units)
    out["Descriptions"] = matfile.cell(group.descriptions)
    return out


def _group_in(name: str, struct, n_rows: int | None) -> SignalGroup:
    fields = list(struct._fieldnames)
    if not all(f in fields for f in _GROUP_FIELDS):
        raise InvalidFileContents(f"Variable '{name}' is not a signal group.")

    units = matfile.as_str_list(struct.Units)
    descriptions = matfile.as_str_list(struct.Descriptions)
    layers = {f: matfile.as_str_list(getattr(struct, f)) for f in fields if f not in _GROUP_FIELDS}

    ncols = len(units)
    values = np.asarray(struct.Values)
    if ncols == 0:
        values = np.zeros((n_rows or 0, 0), dtype=values.dtype)
    else:
        values = values.reshape(-1, ncols)

    if units == ["datetime"]:
        seconds = np.floor(values.astype(float))
        ns = seconds.astype(np.int64) * _NS_PER_SECOND + np.round((values - seconds) * _NS_PER_SECOND).astype(np.int64)
        values = ns.astype("datetime64[ns]")
    return SignalGroup(names=layers, values=values, units=units, descriptions=descriptions)


def write_native_file(path: str | os.PathLike, data: Dataset) -> Path:
    """Save a dataset whole; ".sds" is appended when `path` has no suffix."""
    path = Path(path)
    if not path.suffix:
        path = path.with_suffix(NATIVE_SUFFIX)
    if not is_file_type(path, "native") and not is_file_type(path, ".mat"):
        raise InvalidArgument(f"Native files must be saved as '{NATIVE_SUFFIX}' (or '.mat').")
    check_dataset(data).raise_for_invalid("Input 'data'")

    contents: dict = {"sourcetype": data.sourcetype}
    contents[TIME] = _group_out(data.time, absolute=data.is_absolute_time)
    for name, group in data.signal_groups.items():
        contents[name] = _group_out(group)
    contents["casename"] = data.casename
    contents["pathnames"] = matfile.cell(list(data.pathnames))
    contents["source"] = data.source

    logger.info("Writing file \"%s\".", path)
    savemat(str(path), contents, appendmat=False, oned_as="column")
    return path


def read_native_file(path: str | os.PathLike) -> Dataset:
    """Load a native dataset file as written by `write_native_file`."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFound(f"File \"{path}\" does not exist.")

    contents = matfile.load(path)
    if TIME not in contents:
        raise InvalidFileContents(f"File \"{path}\" has no '{TIME}' group.")

    try:
        time = _group_in(TIME, contents[TIME], None)
        groups = {TIME: time}
        for name, value in contents.items():
            if name in _META or name == TIME:
                continue
            if not hasattr(value, "_fieldnames"):
                logger.debug("Ignoring variable '%s' in \"%s\".", name, path)
                continue
            groups[name] = _group_in(name, value, time.n_rows)

        meta = DatasetMeta(
            casename=matfile.as_str(contents.get("casename", "")),
            pathnames=tuple(matfile.as_str_list(contents.get("pathnames", []))),
            source=matfile.as_str(contents.get("source", "")),
            sourcetype=matfile.as_str(contents.get("sourcetype", "")),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidFileContents(f"File \"{path}\" is not a valid native file: {e}") from e

    data = Dataset(groups=groups, meta=meta)
    result = check_dataset(data)
    if not result:
        raise InvalidFileContents(f"File \"{path}\" does not hold a valid dataset: {result.message}")
    return data
