# signorm/io/matfile.py
"""Helpers for values coming back from scipy.io.loadmat(squeeze_me=True)."""

from __future__ import annotations

import os
from typing import Any, Sequence

import numpy as np
from scipy.io import loadmat, whosmat


LOAD_OPTIONS = dict(squeeze_me=True, struct_as_record=False, chars_as_strings=True, appendmat=False)


def load(path: str | os.PathLike) -> dict[str, Any]:
    """Variables of a MAT file, in file order, without the "__" header entries."""
    data = loadmat(str(path), **LOAD_OPTIONS)
    return {k: v for k, v in data.items() if not k.startswith("__")}


def variable_names(path: str | os.PathLike) -> list[str]:
    return [name for name, _shape, _cls in whosmat(str(path), appendmat=False)]


def as_str(value: Any) -> str:
    """Char array -> str; empty arrays (MATLAB '' or []) -> ""."""
    if isinstance(value, str):
        return value
    arr = np.asarray(value)
    if arr.size == 0:
        return ""
    if arr.size == 1 and arr.dtype.kind in "US":
        return str(arr.reshape(-1)[0])
    if arr.size == 1 and arr.dtype == object:
        return as_str(arr.reshape(-1)[0])
    raise TypeError(f"Expected a character value, found {arr.dtype} of shape {arr.shape}.")


def as_str_list(value: Any) -> list[str]:
    """Cell array of char -> list of str; a squeezed 1-element cell is a bare str."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, np.ndarray) and value.dtype != object:
        # a squeezed 1-element cell holding ''
        if value.size == 0:
            return [""]
        return [str(v) for v in value.reshape(-1)]
    arr = np.asarray(value, dtype=object)
    return [as_str(v) for v in arr.reshape(-1)]


def cell(items: Sequence[str]) -> np.ndarray:
    """list of str -> object array, written by savemat as a cell array."""
    out = np.empty((len(items),), dtype=object)
    for k, item in enumerate(items):
        out[k] = item
    return out
