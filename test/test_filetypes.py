# test/test_filetypes.py
from pathlib import Path

import pytest

from signorm.io.filetypes import clean_names, file_type, is_file_type, rootname, sarray_path
from signorm.core import InvalidArgument


@pytest.mark.parametrize(
    "name, expected",
    [
        ("run.sds", "native"),
        ("S_run.mat", "S-array"),
        ("run.XLSX", "xls"),
        ("run.xls", "xls"),
        ("run.csv", "csv"),
        ("run.mf4", "mdf"),
        ("run.mat", None),
        ("run.txt", None),
    ],
)
def test_file_type(name, expected):
    assert file_type(name) == expected


def test_is_file_type_literal_suffix_and_unknown():
    assert is_file_type("a/b/run.mat", ".mat")
    assert is_file_type("S_run.mat", "sarray")
    with pytest.raises(InvalidArgument):
        is_file_type("run.csv", "spreadsheet")
    with pytest.raises(InvalidArgument):
        is_file_type("run.csv", "")


def test_rootname_and_sarray_path(tmp_path):
    assert rootname("data/S_run1.mat") == "run1"
    assert rootname("data/run1.csv") == "run1"
    assert sarray_path("data/run1.csv") == Path("data/S_run1.mat")
    assert sarray_path("data/run1.csv", tmp_path) == tmp_path / "S_run1.mat"


def test_clean_names():
    assert clean_names(["Eng Speed (rpm)", "a-b.c", "1st", "x", "x", "p%"]) == [
        "Eng_Speed_rpm",
        "a_b_c",
        "x1st",
        "x",
        "x_1",
        "p_",
    ]
