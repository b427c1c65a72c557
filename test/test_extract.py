# test/test_extract.py
import logging

import numpy as np
import pytest

from signorm.core import (
    FileNotFound,
    InvalidArgument,
    SourceTypeMismatch,
    UnknownSourceType,
    UnrecognizedFileFormat,
)
from signorm.io.native import write_native_file
from signorm.pipeline import extract_data, read_raw_file

from conftest import make_dataset


ROWS = [[0, 20.0, 1000.0, 100.0], [1, 21.0, 2000.0, 200.0], [2, 22.0, 3000.0, 300.0]]


@pytest.fixture
def run_csv(write_csv):
    return write_csv("run.csv", ["Time", "temp", "press", "speed"], ROWS)


def test_raw_file_without_source_type(run_csv):
    ds = extract_data(run_csv)
    assert list(ds.keys()) == ["Time", "All"]
    assert ds.pathnames == (str(run_csv),)
    assert ds["All"].default_names == ["temp", "press", "speed"]


def test_raw_file_with_source_type(run_csv, tables):
    ds = extract_data(run_csv, "TagSrc", tables=tables)
    assert ds.sourcetype == "TagSrc"
    assert list(ds.keys()) == ["Time", "Sensors", "Drive"]
    assert np.allclose(ds["Drive"].values[:, 0], [200.0, 400.0, 600.0])


def test_resample_and_trim_are_applied_last(run_csv):
    ds = extract_data(run_csv, ts=0.5, trange=(1.0, 2.0))
    assert np.allclose(ds.time.values[:, 0], [0.0, 0.5, 1.0])
    assert np.allclose(ds["All"].values[:, 0], [21.0, 21.5, 22.0])


def test_source_type_checks(run_csv, tables):
    with pytest.raises(UnknownSourceType):
        extract_data(run_csv, "Other", tables=tables)
    with pytest.raises(InvalidArgument):
        extract_data(run_csv, "TagSrc")
    with pytest.raises(InvalidArgument):
        extract_data(run_csv, ["TagSrc"], tables=tables)


def test_native_file_source_type_rules(tmp_path):
    path = write_native_file(tmp_path / "nat", make_dataset(sourcetype="TagSrc"))
    assert extract_data(path).sourcetype == "TagSrc"
    assert extract_data(path, "TagSrc").sourcetype == "TagSrc"
    with pytest.raises(SourceTypeMismatch):
        extract_data(path, "Other")

    blank = write_native_file(tmp_path / "blank", make_dataset())
    assert extract_data(blank, "TagSrc").sourcetype == ""


def test_native_mat_file_warns(tmp_path, caplog):
    path = write_native_file(tmp_path / "legacy.mat", make_dataset())
    with caplog.at_level(logging.WARNING, logger="signorm.pipeline.extract"):
        ds = extract_data(path)
    assert ds["G"].default_names == ["a", "b"]
    assert "native layout" in caplog.text


def test_unreadable_inputs(tmp_path):
    with pytest.raises(FileNotFound):
        extract_data(tmp_path / "none.csv")
    with pytest.raises(InvalidArgument):
        extract_data(42)

    notes = tmp_path / "notes.txt"
    notes.write_text("hello\n")
    with pytest.raises(UnrecognizedFileFormat):
        read_raw_file(notes)
    with pytest.raises(UnrecognizedFileFormat):
        extract_data(notes)
