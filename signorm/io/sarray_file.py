# signorm/io/sarray_file.py
from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
from scipy.io import savemat

from signorm.core import SArray, Signal, check_sarray
from signorm.core.exceptions import FileNotFound, InvalidArgument, InvalidFileContents
from signorm.io import matfile
from signorm.io.filetypes import is_file_type


logger = logging.getLogger(__name__)

FIELDS = ("name", "data", "dt", "unitsT", "units", "description", "trigger")


def _trigger_out(trigger):
    if trigger is None:
        return np.empty((0,))
    if isinstance(trigger, np.datetime64):
        trigger = trigger.astype("datetime64[us]").item()
    if isinstance(trigger, datetime):
        seconds = trigger.second + trigger.microsecond / 1e6
        return np.array([trigger.year, trigger.month, trigger.day, trigger.hour, trigger.minute, seconds])
    if isinstance(trigger, str):
        return trigger
    return np.asarray(trigger, dtype=float)


def _trigger_in(value):
    if isinstance(value, str):
        return value or None
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.size == 0:
        return None
    if arr.size == 1:
        return float(arr[0])
    y, mo, d, h, mi, s = arr
    return datetime(int(y), int(mo), int(d), int(h), int(mi)) + timedelta(seconds=float(s))


def write_sarray_file(path: str | os.PathLike, sarray: SArray) -> Path:
    """
    Save an S-array as struct array `S` in a MAT file named S_<name>.mat.

    ".mat" is appended when `path` has no suffix.
    """
    path = Path(path)
    if not path.suffix:
        path = path.with_suffix(".mat")
    if not is_file_type(path, "S-array"):
        raise InvalidArgument(f"File name '{path.name}' does not match the S-array naming standard (S_<name>.mat).")
    check_sarray(sarray).raise_for_invalid("Input 'sarray'")

    records = np.empty((len(sarray),), dtype=[(f, object) for f in FIELDS])
    for k, s in enumerate(sarray):
        records[k] = (s.name, s.data, s.dt, s.units_t, s.units, s.description, _trigger_out(s.trigger))

    logger.info("Writing file \"%s\".", path)
    savemat(str(path), {"S": records}, appendmat=False, oned_as="column")
    return path


def read_sarray_file(path: str | os.PathLike) -> SArray:
    """Load the S-array stored in an S-array MAT file."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFound(f"File \"{path}\" does not exist.")
    if not is_file_type(path, "S-array"):
        raise InvalidArgument("Accepts S-array format .mat files only.")

    data = matfile.load(path)
    if set(data) != {"S"}:
        raise InvalidFileContents(f"File \"{path}\" must hold a single variable 'S'.")

    records = data["S"]
    records = list(records.reshape(-1)) if isinstance(records, np.ndarray) else [records]
    try:
        signals = [
            Signal(
                name=matfile.as_str(r.name),
                data=np.atleast_1d(np.asarray(r.data)),
                dt=r.dt,
                units_t=matfile.as_str(r.unitsT),
                units=matfile.as_str(r.units),
                description=matfile.as_str(r.description),
                trigger=_trigger_in(r.trigger),
            )
            for r in records
        ]
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidFileContents(f"Contents 'S' of file \"{path}\" are not valid: {e}") from e

    sarray = SArray(signals)
    result = check_sarray(sarray)
    if not result:
        raise InvalidFileContents(f"Contents 'S' of file \"{path}\" is not a valid S-array: {result.message}")
    return sarray
