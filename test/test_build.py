# test/test_build.py
import logging

import numpy as np
import pytest

from signorm.core import InvalidArgument, InvalidDataset, InvalidGroup, InvalidLayer, check_dataset
from signorm.pipeline import build_dataset


HEADER = ["Time", "temp", "press", "speed"]


def _rows(start):
    return [[start + k, 20.0 + k, 1.0 + k, 100.0 * (k + 1)] for k in range(3)]


@pytest.fixture
def two_runs(write_csv):
    return [write_csv("a.csv", HEADER, _rows(0)), write_csv("b.csv", HEADER, _rows(3))]


def test_concatenates_files_along_time(tables, two_runs, caplog):
    with caplog.at_level(logging.WARNING, logger="signorm.pipeline.build"):
        ds = build_dataset(tables, "runs", two_runs, ["Sensors"], ["Tag", "Eng"], source="Tag")

    assert check_dataset(ds)
    assert list(ds.keys()) == ["Time", "Sensors"]
    assert np.allclose(ds.time.values[:, 0], np.arange(6.0))
    assert ds.time.names == {"TagNames": ["Time"], "EngNames": ["Time"]}

    sensors = ds["Sensors"]
    assert sensors.names == {"TagNames": ["temp", "press", ""], "EngNames": ["Temperature", "Pressure", "Spare"]}
    assert sensors.values.shape == (6, 3)
    assert np.allclose(sensors.values[:, 0], [20.0, 21.0, 22.0, 20.0, 21.0, 22.0])
    assert np.isnan(sensors.values[:, 2]).all()
    assert sensors.descriptions[0] == "Coolant temperature"

    assert (ds.casename, ds.source, ds.sourcetype) == ("runs", "Tag", "TagSrc")
    assert ds.pathnames == tuple(str(p) for p in two_runs)
    assert "There are 1 empty name(s) on layer 'TagNames' in signal group 'Sensors'" in caplog.text


def test_layers_follow_master_order_and_source_is_added(tables, two_runs):
    ds = build_dataset(tables, "runs", two_runs[0], "Drive", ["Eng"], source="Tag")
    assert ds["Drive"].layers == ["TagNames", "EngNames"]
    assert np.allclose(ds["Drive"].values[:, 0], [200.0, 400.0, 600.0])
    assert ds["Drive"].units == ["rpm"]


def test_implicit_source_is_reported(tables, two_runs, caplog):
    with caplog.at_level(logging.WARNING, logger="signorm.pipeline.build"):
        ds = build_dataset(tables, "runs", two_runs[0], ["Drive"], ["Tag"])
    assert ds.source == "Tag"
    assert "Input 'source' not specified" in caplog.text


def test_unavailable_names_become_nan(tables, write_csv, caplog):
    path = write_csv("partial.csv", ["Time", "temp"], [[0, 1.0], [1, 2.0]])
    with caplog.at_level(logging.WARNING, logger="signorm.pipeline.build"):
        ds = build_dataset(tables, "p", path, ["Sensors"], ["Tag"], source="Tag")
    assert np.allclose(ds["Sensors"].values[:, 0], [1.0, 2.0])
    assert np.isnan(ds["Sensors"].values[:, 1]).all()
    assert "not available. Substituting NaNs: ['press']" in caplog.text


def test_argument_errors(tables, two_runs):
    with pytest.raises(InvalidGroup):
        build_dataset(tables, "x", two_runs, ["Nope"], ["Tag"], source="Tag")
    with pytest.raises(InvalidLayer):
        build_dataset(tables, "x", two_runs, ["Sensors"], ["Other"], source="Tag")
    with pytest.raises(InvalidLayer):
        build_dataset(tables, "x", two_runs, ["Sensors"], ["Tag"], source="Other")
    with pytest.raises(InvalidArgument):
        build_dataset(tables, "x", two_runs, ["Time"], ["Tag"], source="Tag")
    with pytest.raises(InvalidArgument):
        build_dataset(tables, 1, two_runs, ["Sensors"], ["Tag"], source="Tag")
    with pytest.raises(InvalidArgument):
        build_dataset(tables, "x", [], ["Sensors"], ["Tag"], source="Tag")


def test_time_units_must_agree(tables, write_csv, two_runs):
    indexed = write_csv("idx.csv", ["temp", "press", "speed"], [[1, 2, 3], [4, 5, 6]])
    with pytest.raises(InvalidDataset):
        build_dataset(tables, "x", [two_runs[0], indexed], ["Sensors"], ["Tag"], source="Tag")
