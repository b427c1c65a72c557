# test/test_sarray_file.py
from datetime import datetime

import numpy as np
import pytest
from scipy.io import savemat

from signorm.core import SArray, Signal
from signorm.core import FileNotFound, InvalidArgument, InvalidFileContents
from signorm.io.sarray_file import read_sarray_file, write_sarray_file


START = datetime(2024, 1, 2, 3, 4, 5)


def _sarray():
    return SArray([
        Signal("a", [1.0, 2.0, 3.0], dt=0.5, units_t="sec", units="m", description="alpha", trigger=START),
        Signal("b", np.array([1, 2, 3], dtype=np.int32), dt=[0.5, 0.25], units_t="sec", trigger=START),
    ])


def test_write_then_read(tmp_path):
    path = write_sarray_file(tmp_path / "S_run", _sarray())
    assert path.name == "S_run.mat"

    sa = read_sarray_file(path)
    assert sa.names == ["a", "b"]
    a, b = sa
    assert np.allclose(a.data, [1.0, 2.0, 3.0])
    assert a.dt == 0.5
    assert a.units == "m"
    assert a.description == "alpha"
    assert a.trigger == START
    assert b.data.dtype == np.int32
    assert np.allclose(b.dt, [0.5, 0.25])
    assert b.units == ""


def test_single_signal_and_empty_trigger(tmp_path):
    path = write_sarray_file(tmp_path / "S_one.mat", SArray([Signal("x", [4.0, 5.0], units_t="sec")]))
    (x,) = read_sarray_file(path)
    assert x.trigger is None
    assert x.units_t == "sec"


def test_naming_standard_enforced(tmp_path):
    with pytest.raises(InvalidArgument):
        write_sarray_file(tmp_path / "run.mat", _sarray())
    (tmp_path / "run.mat").write_bytes(b"")
    with pytest.raises(InvalidArgument):
        read_sarray_file(tmp_path / "run.mat")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFound):
        read_sarray_file(tmp_path / "S_none.mat")


def test_file_must_hold_only_s(tmp_path):
    path = tmp_path / "S_bad.mat"
    savemat(str(path), {"X": 1.0, "Y": 2.0})
    with pytest.raises(InvalidFileContents):
        read_sarray_file(path)
