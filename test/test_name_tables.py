# test/test_name_tables.py
import math

import pandas as pd
import pytest

from signorm.names import NameTables, OverrideRule, SourceTab, layer_to_source, source_to_layer
from signorm.names.name_tables import ENV_VAR
from signorm.core import (
    FileNotFound,
    InvalidArgument,
    InvalidFileContents,
    InvalidGroup,
    InvalidLayer,
    UnknownSourceType,
)

from conftest import MASTER_ROWS, TAB_ROWS


def test_source_and_layer_strings():
    assert source_to_layer("Tag") == "TagNames"
    assert source_to_layer("TagNames") == "TagNames"
    assert layer_to_source("EngNames") == "Eng"
    with pytest.raises(InvalidArgument):
        source_to_layer("1Tag")
    with pytest.raises(InvalidArgument):
        layer_to_source("Tag")


def test_master_sheet_parsing(tables):
    assert tables.layers == ("TagNames", "EngNames")
    assert tables.groups == ["Sensors", "Drive"]
    assert tables.source_types == {"TagNames": "TagSrc", "EngNames": ""}
    assert tables.names_for("Sensors", "Tag") == ["temp", "press", ""]
    assert tables.names_for("Sensors", "EngNames") == ["Temperature", "Pressure", "Spare"]
    assert tables.source_type_for("Tag") == "TagSrc"
    assert tables.source_for("TagNames") == "Tag"
    assert tables.list_source_types() == ["TagSrc"]


def test_lookup_errors(tables):
    with pytest.raises(InvalidGroup):
        tables.names_for("Nope", "Tag")
    with pytest.raises(InvalidLayer):
        tables.names_for("Sensors", "Other")
    with pytest.raises(UnknownSourceType):
        tables.source_tab("Other")


def test_source_tab_rules(tables):
    tab = tables.source_tab("TagSrc")
    assert tab.groups == ["Sensors", "Drive"]
    assert tab.names_for("Sensors") == ["temp", "press"]
    assert tab.rule_for("Sensors", "temp") == OverrideRule("Sensors", "temp", None, "", "Coolant temperature")
    assert tab.rule_for("Drive", "speed").factor == 2.0
    assert tab.rule_for("Drive", "nope") is None


def test_factor_star_and_bad_factor():
    rows = [list(TAB_ROWS[0]), ["G", "a", "*", "*", "", ""]]
    rule = SourceTab.from_frame("X", pd.DataFrame(rows)).rules[0]
    assert math.isnan(rule.factor)
    assert rule.units == "*"

    rows[1][2] = "fast"
    with pytest.raises(InvalidFileContents):
        SourceTab.from_frame("X", pd.DataFrame(rows))


def test_missing_tab_headers():
    with pytest.raises(InvalidFileContents):
        SourceTab.from_frame("X", pd.DataFrame([["Group", "Signal"], ["G", "a"]]))


def test_unlabeled_master_column(master_frame):
    frame = master_frame.copy()
    frame.iloc[0, 2] = math.nan
    with pytest.raises(InvalidFileContents):
        NameTables.from_frames(frame, {})


def test_check_reports_unregistered_names(master_frame, tab_frame):
    tables = NameTables.from_frames(master_frame, {"TagSrc": tab_frame})
    assert tables.check() == []

    thin = pd.DataFrame(TAB_ROWS[:3])
    errors = NameTables.from_frames(master_frame, {"TagSrc": thin}).check()
    assert errors == ["MASTER: layer 'TagNames': group 'Drive': unregistered names: ['speed']."]

    errors = NameTables.from_frames(master_frame, {}).check()
    assert "missing source tab 'TagSrc'" in errors[0]


def _write_workbook(path):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(MASTER_ROWS).to_excel(writer, sheet_name="MASTER", header=False, index=False)
        pd.DataFrame(TAB_ROWS).to_excel(writer, sheet_name="TagSrc", header=False, index=False)
    return path


def test_load_workbook(tmp_path, tables):
    path = _write_workbook(tmp_path / "tables.xlsx")
    loaded = NameTables.load(path)
    assert loaded.layers == tables.layers
    assert loaded.names == tables.names
    assert loaded.source_tab("TagSrc").rule_for("Drive", "speed").factor == 2.0


def test_load_uses_environment(tmp_path, monkeypatch):
    path = _write_workbook(tmp_path / "env.xlsx")
    monkeypatch.setenv(ENV_VAR, str(path))
    assert NameTables.load().list_source_types() == ["TagSrc"]


def test_load_missing_workbook(tmp_path):
    with pytest.raises(FileNotFound):
        NameTables.load(tmp_path / "none.xlsx")
