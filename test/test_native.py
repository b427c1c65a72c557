# test/test_native.py
import numpy as np
import pytest
from scipy.io import savemat

from signorm.core import SignalGroup
from signorm.core import FileNotFound, InvalidArgument, InvalidFileContents
from signorm.io.native import is_native_file, read_native_file, write_native_file

from conftest import make_dataset


def test_write_then_read(tmp_path):
    ds = make_dataset(layers=("TagNames", "EngNames"), groups={"A": ["x", "y"], "B": ["z"]},
                      casename="run", source="Tag", sourcetype="TagSrc")
    ds = ds.with_meta(pathnames=("one.csv", "two.csv"))
    path = write_native_file(tmp_path / "run", ds)
    assert path.suffix == ".sds"
    assert is_native_file(path)

    out = read_native_file(path)
    assert list(out.keys()) == ["Time", "A", "B"]
    assert out["A"].names == {"TagNames": ["x", "y"], "EngNames": ["x", "y"]}
    assert np.allclose(out["A"].values, ds["A"].values)
    assert out["B"].values.shape == (4, 1)
    assert out["B"].descriptions == ["z desc"]
    assert out.time.units == ["sec"]
    assert (out.casename, out.source, out.sourcetype) == ("run", "Tag", "TagSrc")
    assert out.pathnames == ("one.csv", "two.csv")


def test_absolute_time_is_kept(tmp_path):
    ds = make_dataset()
    stamps = np.datetime64("2024-05-06T07:08:09", "ns") + np.arange(4) * np.timedelta64(500, "ms")
    ds = ds.with_groups({"Time": SignalGroup.time_group(stamps, "datetime"), "G": ds["G"]})

    out = read_native_file(write_native_file(tmp_path / "abs.sds", ds))
    assert out.is_absolute_time
    assert np.array_equal(out.time.values[:, 0], stamps)


def test_mat_with_sourcetype_is_native(tmp_path):
    path = write_native_file(tmp_path / "legacy.mat", make_dataset())
    assert is_native_file(path)

    plain = tmp_path / "plain.mat"
    savemat(str(plain), {"x": 1.0})
    assert not is_native_file(plain)
    assert not is_native_file(tmp_path / "S_run.mat")


def test_errors(tmp_path):
    with pytest.raises(FileNotFound):
        read_native_file(tmp_path / "none.sds")
    with pytest.raises(InvalidArgument):
        write_native_file(tmp_path / "run.csv", make_dataset())

    path = tmp_path / "bad.sds"
    savemat(str(path), {"sourcetype": "", "x": 1.0}, appendmat=False)
    with pytest.raises(InvalidFileContents):
        read_native_file(path)
