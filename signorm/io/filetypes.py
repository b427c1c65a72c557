# signorm/io/filetypes.py
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable

from signorm.core.exceptions import InvalidArgument


NATIVE_SUFFIX = ".sds"
SARRAY_PREFIX = "S_"

_SUFFIXES = {
    "native": {NATIVE_SUFFIX},
    "xls": {".xls", ".xlsx"},
    "csv": {".csv"},
    "mdf": {".mf4", ".mdf"},
}

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[\\/:\-.]")
_BRACKETS = re.compile(r"[()\[\]<>{}]")
_OTHER = re.compile(r"\W")


def is_file_type(path: str | os.PathLike, filetype: str) -> bool:
    """
    Check a pathname against a file type, by name only.

    filetype:
      - "native": normalized dataset file (.sds)
      - "S-array": .mat file whose name starts with "S_"
      - "xls", "csv", "mdf": raw formats
      - ".ext": any literal suffix
    """
    if not isinstance(filetype, str) or not filetype:
        raise InvalidArgument("Input 'filetype' must be a non-empty string.")
    p = Path(path)
    suffix = p.suffix.lower()
    key = filetype.lower()

    if key in ("s-array", "sarray"):
        return suffix == ".mat" and p.name.startswith(SARRAY_PREFIX)
    if key in _SUFFIXES:
        return suffix in _SUFFIXES[key]
    if key.startswith("."):
        return suffix == key
    raise InvalidArgument(f"Unknown file type '{filetype}'.")


def file_type(path: str | os.PathLike) -> str | None:
    """Name-based file type of `path`, or None when no reader applies."""
    for filetype in ("native", "S-array", "xls", "csv", "mdf"):
        if is_file_type(path, filetype):
            return filetype
    return None


def rootname(path: str | os.PathLike) -> str:
    """File name without folder, suffix, or the "S_" prefix of S-array files."""
    p = Path(path)
    stem = p.stem
    if is_file_type(p, "S-array"):
        stem = stem[len(SARRAY_PREFIX):]
    return stem


def sarray_path(path: str | os.PathLike, folder: str | os.PathLike | None = None) -> Path:
    """S-array file name matching a raw file: folder/S_<rootname>.mat."""
    p = Path(path)
    return Path(folder if folder is not None else p.parent) / f"{SARRAY_PREFIX}{rootname(p)}.mat"


def clean_names(names: Iterable[str]) -> list[str]:
    """
    Turn free-text column headers into signal names.

    Brackets are dropped and any other non-word character becomes "_".
    Names not starting with a letter get an "x" prefix; repeated names are
    suffixed with "_1" until unique.
    """
    out: list[str] = []
    for name in names:
        name = _WHITESPACE.sub("_", str(name).strip())
        name = _SEPARATORS.sub("_", name)
        name = _OTHER.sub("_", _BRACKETS.sub("", name))
        if not re.match(r"[A-Za-z]", name):
            name = "x" + name
        while name in out:
            name += "_1"
        out.append(name)
    return out
