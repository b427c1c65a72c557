# test/conftest.py
import math

import numpy as np
import pandas as pd
import pytest

from signorm.core import Dataset, DatasetMeta, SignalGroup
from signorm.names import NameTables

NaN = math.nan

MASTER_ROWS = [
    ["Group", "Tag", "Eng", "<--- comments"],
    ["SourceType", "TagSrc", NaN, NaN],
    ["Sensors", "temp", "Temperature", "coolant"],
    ["Sensors", "press", "Pressure", NaN],
    ["Sensors", NaN, "Spare", "not wired"],
    ["Drive", "speed", "EngineSpeed", NaN],
]

TAB_ROWS = [
    ["Group", "Signal", "Factor", "Units", "Descriptions", "Comments"],
    ["Sensors", "temp", NaN, NaN, "Coolant temperature", NaN],
    ["Sensors", "press", NaN, "kPa", NaN, NaN],
    ["Drive", "speed", 2.0, "rpm", NaN, "gearbox side"],
]


@pytest.fixture
def master_frame():
    return pd.DataFrame(MASTER_ROWS)


@pytest.fixture
def tab_frame():
    return pd.DataFrame(TAB_ROWS)


@pytest.fixture
def tables(master_frame, tab_frame):
    return NameTables.from_frames(master_frame, {"MASTER": master_frame, "TagSrc": tab_frame})


@pytest.fixture
def write_csv(tmp_path):
    """Write a CSV file from a header and rows; returns its path."""

    def _write(name, header, rows, comments=()):
        lines = [f"# {c}" for c in comments]
        lines.append(",".join(header))
        lines.extend(",".join(str(v) for v in row) for row in rows)
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


def make_dataset(n=4, layers=("Names",), groups=None, casename="case", source="", sourcetype=""):
    """Small valid elapsed-time dataset: groups maps name -> list of signal names."""
    groups = groups or {"G": ["a", "b"]}
    t = np.arange(n, dtype=float).reshape(-1, 1)
    out = {"Time": SignalGroup(names={l: ["Time"] for l in layers}, values=t, units=["sec"], descriptions=["Time vector"])}
    k = 0
    for gname, names in groups.items():
        cols = []
        for _ in names:
            cols.append(np.arange(n, dtype=float) * 10 + k)
            k += 1
        out[gname] = SignalGroup(
            names={l: list(names) for l in layers},
            values=np.column_stack(cols) if cols else np.zeros((n, 0)),
            units=["m"] * len(names),
            descriptions=[f"{x} desc" for x in names],
        )
    return Dataset(groups=out, meta=DatasetMeta(casename=casename, source=source, sourcetype=sourcetype))
