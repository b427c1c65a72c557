# signorm/io/mdf_reader.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

from asammdf import MDF  # pivotal dependency for MDF file handling
import numpy as np

from signorm.core import SArray, Signal
from signorm.core.exceptions import FileNotFound, InvalidArgument, InvalidFileContents
from signorm.io.filetypes import clean_names, is_file_type


logger = logging.getLogger(__name__)


@dataclass
class RawChannel:
    """One non-master channel of an MDF file, fully loaded."""

    name: str
    unit: str
    comment: str
    timestamps: np.ndarray
    samples: np.ndarray
    group_index: int
    channel_index: int


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _iter_channels(mdf: MDF) -> Iterator[RawChannel]:
    masters = getattr(mdf, "masters_db", {})
    for group_index, group in enumerate(mdf.groups):
        for channel_index, channel in enumerate(group.channels):
            if masters.get(group_index) == channel_index:
                continue
            sig = mdf.get(group=group_index, index=channel_index)
            # asammdf Signal interface: timestamps & samples
            yield RawChannel(
                name=sig.name,
                unit=_text(sig.unit),
                comment=_text(sig.comment),
                timestamps=np.asarray(sig.timestamps, dtype=float),
                samples=np.asarray(sig.samples),
                group_index=group_index,
                channel_index=channel_index,
            )


def _start_time(mdf: MDF) -> datetime | None:
    start = getattr(mdf, "start_time", None)
    if not isinstance(start, datetime):
        return None
    if start.tzinfo is not None:
        start = start.astimezone(timezone.utc).replace(tzinfo=None)
    return start


def _sample_time(t: np.ndarray) -> float | np.ndarray:
    if t.size < 2:
        return 1.0
    dt = np.diff(t)
    if np.all(dt > 0) and (dt.max() - dt.min()) / dt.min() < 1e-6:
        return float(dt[0])
    return dt


def read_mdf_file(path: str | os.PathLike) -> SArray:
    """
    Read every numeric, one-dimensional channel of an MDF file into an S-array.

    Master (time) channels are skipped. Channel names are cleaned into
    signal names; the trigger is the measurement start time shifted by the
    earliest channel timestamp, and every channel is taken to start there.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFound(f"File \"{path}\" does not exist.")
    if not is_file_type(path, "mdf"):
        raise InvalidArgument("Accepts MDF format (.mf4 or .mdf) files only.")

    with MDF(str(path)) as mdf:
        start = _start_time(mdf)
        channels = []
        skipped = []
        for ch in _iter_channels(mdf):
            if ch.samples.ndim != 1 or ch.samples.size == 0 or not (
                np.issubdtype(ch.samples.dtype, np.number) or ch.samples.dtype == bool
            ):
                skipped.append(ch.name)
                continue
            channels.append(ch)

    if skipped:
        logger.warning("Skipped non-numeric or empty channel(s): %s", skipped)
    if not channels:
        raise InvalidFileContents(f"File \"{path}\" holds no numeric channels.")

    t0 = min(float(ch.timestamps[0]) for ch in channels)
    if start is not None:
        trigger = start + timedelta(seconds=t0)
    else:
        trigger = t0

    names = clean_names(ch.name for ch in channels)
    signals = [
        Signal(
            name=name,
            data=ch.samples,
            dt=_sample_time(ch.timestamps),
            units_t="sec",
            units=ch.unit,
            description=ch.comment,
            trigger=trigger,
        )
        for name, ch in zip(names, channels)
    ]
    logger.info("Read %d channel(s) from \"%s\".", len(signals), path)
    return SArray(signals)
