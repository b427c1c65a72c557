# test/test_validation.py
import numpy as np
import pytest

from signorm.core import (
    Dataset,
    DatasetArray,
    SArray,
    Signal,
    SignalGroup,
    SignalGroupArray,
    StructureKind,
    check_dataset,
    check_dataset_array,
    check_sarray,
    check_signal_group,
    check_signal_group_array,
)
from signorm.core import InvalidDataset

from conftest import make_dataset


# ---- S-array ----
def test_valid_sarray():
    sa = SArray([Signal("a", [1.0, 2.0, 3.0], dt=[0.1, 0.2], units_t="sec"), Signal("b", [1], units_t="sec")])
    assert tuple(check_sarray(sa)) == (True, True, "")


@pytest.mark.parametrize(
    "signals, fragment",
    [
        ([Signal("1a", [1.0])], "'name'"),
        ([Signal("a", ["x", "y"])], "'data'"),
        ([Signal("a", [])], "empty"),
        ([Signal("a", [1.0, 2.0], dt=0.0)], "not positive"),
        ([Signal("a", [1.0, 2.0, 3.0], dt=[0.1, 0.1, 0.1])], "wrong length"),
        ([Signal("a", [1.0], units_t="sec"), Signal("b", [1.0], units_t="min")], "units_t"),
    ],
)
def test_invalid_sarray(signals, fragment):
    recognized, valid, message = check_sarray(SArray(signals))
    assert recognized and not valid
    assert fragment in message


def test_unrecognized_sarray():
    assert not check_sarray([Signal("a", [1.0])]).recognized


# ---- signal groups ----
def test_signal_group_checks():
    g = SignalGroup(names={"Names": ["a", "b"]}, values=np.zeros((3, 2)), units=["m", "m"], descriptions=["", ""])
    assert check_signal_group(g)
    assert not check_signal_group(g, time=True).recognized

    bad_layer = SignalGroup(names={"Tags": ["a", "b"]}, values=np.zeros((3, 2)), units=["m", "m"], descriptions=["", ""])
    assert not check_signal_group(bad_layer).recognized

    short = SignalGroup(names={"Names": ["a"]}, values=np.zeros((3, 2)), units=["m", "m"], descriptions=["", ""])
    result = check_signal_group(short)
    assert result.recognized and not result.valid
    assert "'Names' layer has the wrong length" in result.message


def test_empty_names_are_allowed_in_groups():
    g = SignalGroup(names={"Names": ["a", ""]}, values=np.zeros((3, 2)), units=["", ""], descriptions=["", ""])
    assert check_signal_group(g)


# ---- datasets ----
def test_valid_dataset_triple():
    assert tuple(check_dataset(make_dataset())) == (True, True, "")


def test_dataset_unrecognized_without_time():
    ds = make_dataset()
    no_time = Dataset(groups={"G": ds["G"]})
    result = check_dataset(no_time)
    assert not result.recognized
    assert "Time" in result.message


def test_dataset_requires_a_signal_group():
    ds = make_dataset()
    result = check_dataset(Dataset(groups={"Time": ds["Time"]}))
    assert result.recognized and not result.valid
    assert "at least one non-Time" in result.message


def test_dataset_fail_fast_reports_first_violation():
    ds = make_dataset(groups={"A": ["x"], "B": ["y"]})
    # layer mismatch (c), class mismatch (d) and row mismatch (e) all at once
    b = SignalGroup(names={"OtherNames": ["y"]}, values=np.zeros((7, 1), dtype=np.float32), units=["m"], descriptions=[""])
    result = check_dataset(ds.with_groups({"Time": ds["Time"], "A": ds["A"], "B": b}))
    assert "name layers do not match" in result.message

    # (d) before (e)
    b = SignalGroup(names={"Names": ["y"]}, values=np.zeros((7, 1), dtype=np.float32), units=["m"], descriptions=[""])
    result = check_dataset(ds.with_groups({"Time": ds["Time"], "A": ds["A"], "B": b}))
    assert "Data types do not match" in result.message

    b = SignalGroup(names={"Names": ["y"]}, values=np.zeros((7, 1)), units=["m"], descriptions=[""])
    result = check_dataset(ds.with_groups({"Time": ds["Time"], "A": ds["A"], "B": b}))
    assert "incompatible data lengths" in result.message


def test_dataset_layer_order_must_match():
    ds = make_dataset(layers=("TagNames", "EngNames"), groups={"A": ["x"], "B": ["y"]})
    b = ds["B"]
    swapped = SignalGroup(
        names={"EngNames": b.names["EngNames"], "TagNames": b.names["TagNames"]},
        values=b.values, units=b.units, descriptions=b.descriptions,
    )
    result = check_dataset(ds.with_groups({"Time": ds["Time"], "A": ds["A"], "B": swapped}))
    assert "Order of name layers" in result.message


def test_report_prints_verdict(capsys):
    check_dataset(make_dataset()).report()
    check_dataset("nope").report()
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Input is a valid dataset."
    assert out[1].startswith("Not a valid dataset:")


def test_raise_for_invalid():
    with pytest.raises(InvalidDataset):
        check_dataset(42).raise_for_invalid()


# ---- arrays ----
def _tag_dataset(names):
    return make_dataset(layers=("TagNames",), groups={"Sensors": names})


def test_dataset_array_layer_mismatch_is_named():
    arr = DatasetArray([_tag_dataset(["A", "B", "C"]), _tag_dataset(["A", "B", "C"]), _tag_dataset(["A", "B", "D"])])
    recognized, valid, message = check_dataset_array(arr)
    assert recognized and not valid
    assert "TagNames" in message
    assert "[2]" in message


def test_dataset_array_checks_elements_first():
    ds = _tag_dataset(["A"])
    broken = ds.with_groups({"Time": ds["Time"]})
    result = check_dataset_array(DatasetArray([ds, broken]))
    assert result.recognized and not result.valid
    assert "invalid element(s): [1]" in result.message


def test_dataset_array_units_and_time_units():
    a = _tag_dataset(["A", "B"])
    b = a.copy()
    b["Sensors"].units[1] = "mm"
    result = check_dataset_array(DatasetArray([a, b]))
    assert "inconsistent units: ['B']" in result.message

    c = a.copy()
    c["Time"].units[0] = "min"
    result = check_dataset_array(DatasetArray([a, c]))
    assert "incompatible time vectors" in result.message

    assert check_dataset_array(DatasetArray([a, a.copy()]))
    assert check_dataset_array(DatasetArray([a])).kind is StructureKind.DATASET_ARRAY


def test_signal_group_array():
    g = SignalGroup(names={"Names": ["a"]}, values=np.zeros((3, 1)), units=["sec"], descriptions=[""])
    h = SignalGroup(names={"Names": ["a"]}, values=np.zeros((5, 1)), units=["min"], descriptions=[""])
    assert check_signal_group_array(SignalGroupArray([g, g.copy()]), time=True)

    result = check_signal_group_array(SignalGroupArray([g, h]))
    assert "inconsistent units" in result.message
    assert not check_signal_group_array([g, h]).recognized
