# signorm/pipeline/extract.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from signorm.core import Dataset, SArray, resample_dataset
from signorm.core.exceptions import (
    FileNotFound,
    InvalidArgument,
    SourceTypeMismatch,
    UnknownSourceType,
    UnrecognizedFileFormat,
)
from signorm.io.filetypes import file_type, is_file_type
from signorm.io.native import is_native_file, read_native_file
from signorm.io.sarray_file import read_sarray_file
from signorm.io.xls_reader import read_xls_file
from signorm.names import NameTables
from signorm.pipeline.collapse import collapse_sarray


logger = logging.getLogger(__name__)


def _read_mdf(path: Path) -> SArray:
    # asammdf is an optional dependency, needed only for MDF files
    from signorm.io.mdf_reader import read_mdf_file

    return read_mdf_file(path)


_READERS = {
    "S-array": read_sarray_file,
    "xls": read_xls_file,
    "csv": read_xls_file,
    "mdf": _read_mdf,
}


def _check_path(pathname) -> Path:
    if not isinstance(pathname, (str, os.PathLike)) or not str(pathname):
        raise InvalidArgument("Input 'pathname' is not valid.")
    path = Path(pathname)
    if not path.is_file():
        raise FileNotFound(f"File \"{path}\" does not exist.")
    return path


def read_raw_file(pathname: str | os.PathLike) -> SArray:
    """Read any raw (non-native) file into an S-array, dispatching on its type."""
    path = _check_path(pathname)
    reader = _READERS.get(file_type(path))
    if reader is None:
        raise UnrecognizedFileFormat(f"Unrecognized file format: \"{path}\".")
    logger.info("Reading file \"%s\".", path)
    return reader(path)


def extract_data(
    pathname: str | os.PathLike,
    sourcetype: str = "",
    ts: float | None = None,
    trange: Sequence | None = None,
    *,
    nowarn: bool = False,
    tables: NameTables | None = None,
) -> Dataset:
    """
    Read one file of any supported format as a dataset.

    Native files are loaded as they are; their recorded source type must
    agree with `sourcetype` when both are given. Raw files are read into an
    S-array and collapsed with `sourcetype`. Resampling (`ts`) and time
    trimming (`trange`) are applied last, in both cases.
    """
    path = _check_path(pathname)
    if sourcetype is None:
        sourcetype = ""
    if not isinstance(sourcetype, str):
        raise InvalidArgument("Input 'sourcetype' is not valid.")

    if is_native_file(path):
        if is_file_type(path, ".mat"):
            logger.warning("File \"%s\" has native layout; reading it as a native file.", path)
        data = read_native_file(path)
        recorded = data.sourcetype
        if recorded and sourcetype and recorded != sourcetype:
            raise SourceTypeMismatch(
                f"File \"{path}\" was built for source type '{recorded}', not '{sourcetype}'."
            )
        logger.info("Native file \"%s\": no units conversions or description changes applied.", path)
    else:
        if sourcetype:
            if tables is None:
                raise InvalidArgument("Name tables are required when a source type is given.")
            if sourcetype not in tables.list_source_types():
                raise UnknownSourceType(
                    f"Source type '{sourcetype}' is not registered. "
                    f"Available source types: {tables.list_source_types()}"
                )
        sarray = read_raw_file(path)
        data = collapse_sarray(sarray, sourcetype, tables=tables, nowarn=nowarn)
        data = data.with_meta(pathnames=(str(path),))

    return resample_dataset(data, ts, trange)
