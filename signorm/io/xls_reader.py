# signorm/io/xls_reader.py
from __future__ import annotations

import io
import logging
import math
import os
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd

from signorm.core import SArray, Signal
from signorm.core.exceptions import FileNotFound, InvalidArgument, InvalidFileContents
from signorm.io.filetypes import clean_names, is_file_type


logger = logging.getLogger(__name__)

EMPTY, NUMBER, DATE, TEXT = "empty", "number", "date", "text"

# spreadsheet serial day 0
EXCEL_EPOCH = np.datetime64("1899-12-30", "ns")
# numeric Time columns holding only values at or above this are serial dates
SERIAL_DATE_MIN = 1e4


def _classify(value) -> tuple[str, object]:
    if value is None:
        return EMPTY, math.nan
    if isinstance(value, (bool, np.bool_)):
        return NUMBER, float(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        return (EMPTY, math.nan) if math.isnan(value) else (NUMBER, float(value))
    if isinstance(value, (datetime, np.datetime64)):
        return (EMPTY, math.nan) if pd.isna(value) else (DATE, value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return EMPTY, math.nan
        try:
            return NUMBER, float(text)
        except ValueError:
            return TEXT, text
    return TEXT, value


def _read_frame(path: Path) -> pd.DataFrame:
    if is_file_type(path, "csv"):
        text = path.read_text(encoding="utf-8-sig", errors="replace")
        lines = [ln for ln in text.splitlines() if ln.strip() and not ln.lstrip().startswith("#")]
        if not lines:
            return pd.DataFrame()
        return pd.read_csv(
            io.StringIO("\n".join(lines)),
            header=None,
            dtype=str,
            keep_default_na=False,
            sep=None,
            engine="python",
        )

    frame = pd.read_excel(path, sheet_name=0, header=None, dtype=object)
    frame = frame.dropna(how="all")
    first = frame.iloc[:, 0] if frame.shape[1] else pd.Series(dtype=object)
    comment = first.map(lambda x: isinstance(x, str) and x.lstrip().startswith("#"))
    return frame[~comment.astype(bool)]


def _time_column(cells: list[tuple[str, object]]) -> tuple[np.ndarray, bool]:
    """Parse the Time column; returns (values, is_absolute)."""
    kinds = {kind for kind, _ in cells if kind != EMPTY}
    if kinds <= {NUMBER}:
        t = np.array([v for _, v in cells], dtype=float)
        if np.any(t < SERIAL_DATE_MIN):
            return t, False
        ns = np.round(t * 86400e9).astype(np.int64).astype("timedelta64[ns]")
        return EXCEL_EPOCH + ns, True
    if NUMBER not in kinds:
        try:
            stamps = pd.to_datetime([v if k != EMPTY else None for k, v in cells])
        except (ValueError, TypeError) as e:
            raise InvalidFileContents(f"Time data column is not valid: {e}") from e
        return stamps.to_numpy(dtype="datetime64[ns]"), True
    raise InvalidFileContents("Time data column is not valid.")


def read_xls_file(path: str | os.PathLike) -> SArray:
    """
    Read a spreadsheet (.xls, .xlsx) or CSV file into an S-array.

    The first non-comment row holds the column names; rows whose first
    cell starts with "#" are skipped. A column named "Time" (any case)
    gives the time base, either in seconds, as serial dates, or as date
    strings. Without one, samples are indexed from 1.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFound(f"File \"{path}\" does not exist.")
    if not (is_file_type(path, "xls") or is_file_type(path, "csv")):
        raise InvalidArgument("Accepts spreadsheet format (.xls, .xlsx or .csv) files only.")

    rows = _read_frame(path).values.tolist()
    if not rows:
        raise InvalidFileContents(f"File \"{path}\" holds no data.")

    header = [_classify(h) for h in rows[0]]
    if any(kind not in (TEXT, DATE) for kind, _ in header):
        raise InvalidFileContents("Header row is missing or defective.")
    labels = [str(h).strip() for _, h in header]

    time_cols = [k for k, h in enumerate(labels) if h.lower() == "time"]
    if len(time_cols) > 1:
        raise InvalidFileContents("Multiple 'Time' columns detected.")
    names = clean_names(labels)

    body = rows[1:]
    if len(body) < 2:
        raise InvalidFileContents("Must include at least two data rows.")
    columns = [[_classify(row[k]) for row in body] for k in range(len(labels))]

    incomplete = [names[k] for k, col in enumerate(columns) if any(kind == EMPTY for kind, _ in col)]
    if incomplete:
        logger.warning("Empty cells assigned NaN in column(s): %s", incomplete)

    if time_cols:
        k = time_cols[0]
        time, absolute = _time_column(columns[k])
        dt = np.diff(time) / np.timedelta64(1, "s") if absolute else np.diff(time)
        if np.any(dt <= 0):
            logger.warning("Sampling is not monotonic in \"%s\".", path)
        elif (dt.max() - dt.min()) / dt.min() < 1e-6:
            dt = float(dt[0])
        units_t = "sec"
        trigger = time[0] if absolute else float(time[0])
    else:
        dt, units_t, trigger = 1.0, "", 1.0

    signals = []
    mixed, text = [], []
    for k, col in enumerate(columns):
        if k in time_cols:
            continue
        kinds = {kind for kind, _ in col if kind != EMPTY}
        if len(kinds) > 1 and NUMBER in kinds:
            mixed.append(names[k])
        if kinds - {NUMBER}:
            text.append(names[k])
        data = np.array([v if kind == NUMBER else math.nan for kind, v in col], dtype=float)
        signals.append(Signal(name=names[k], data=data, dt=dt, units_t=units_t, trigger=trigger))

    if mixed:
        logger.warning("Data of mixed type found in column(s): %s", mixed)
    if text:
        logger.warning("Replacing text with NaN values in column(s): %s", text)

    logger.info("Read %d row(s) and %d column(s) from \"%s\".", len(body), len(labels), path)
    return SArray(signals)
