# signorm/names/name_tables.py
"""
Name lookup tables.

A NameTables object maps (group, layer) to the canonical signal names of
each naming scheme, maps each layer to the source type that produces it,
and holds one SourceTab of unit/description override rules per source type.
It is loaded once from a workbook and then passed explicitly to every
pipeline function that needs it.

Workbook layout
---------------
MASTER sheet:
    row 1: label cell, one header per source (or layer), optional
           trailing comment columns whose header starts with "<"
    row 2: label cell, the source type under each layer ("" for none)
    rows : group name, then one signal name per layer
Every other sheet is a source tab named after its source type, with
headers Group, Signal, Factor, Units, Descriptions (plus optional Comments).
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

from signorm.core.exceptions import (
    FileNotFound,
    InvalidArgument,
    InvalidFileContents,
    InvalidGroup,
    InvalidLayer,
    UnknownSourceType,
)


logger = logging.getLogger(__name__)

MASTER = "MASTER"
ENV_VAR = "SIGNORM_NAME_TABLES"
DEFAULT_FILE = "NameTables.xlsx"
TAB_HEADERS = ("Group", "Signal", "Factor", "Units", "Descriptions")

_SOURCE_RE = re.compile(r"^[A-Za-z]\w*$")
_LAYER_RE = re.compile(r"^[A-Za-z]\w*Names$")


def source_to_layer(source: str) -> str:
    """'Tag' -> 'TagNames'; layer strings are returned unchanged."""
    if not isinstance(source, str) or not _SOURCE_RE.match(source):
        raise InvalidArgument(f"Input {source!r} is not a valid source or name layer string.")
    return source if source.endswith("Names") else source + "Names"


def layer_to_source(layer: str) -> str:
    """'TagNames' -> 'Tag'."""
    if not isinstance(layer, str) or not _LAYER_RE.match(layer):
        raise InvalidArgument(f"Input {layer!r} is not a valid name layer string.")
    return layer[: -len("Names")]


def _cell(value: Any) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).strip()


def _factor(value: Any, where: str) -> float | None:
    text = _cell(value)
    if not text:
        return None
    if text == "*":
        return math.nan
    try:
        return float(text)
    except ValueError as e:
        raise InvalidFileContents(f"{where}: invalid factor {text!r}.") from e


@dataclass(frozen=True, slots=True)
class OverrideRule:
    """
    One row of a source tab.

    factor: None when blank, NaN for "*" (blank out the signal)
    units: "" when blank, "*" to assign empty units
    """
    group: str
    name: str
    factor: float | None = None
    units: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class SourceTab:
    sourcetype: str
    rules: tuple[OverrideRule, ...] = ()

    @property
    def groups(self) -> list[str]:
        return list(dict.fromkeys(r.group for r in self.rules))

    def names_for(self, group: str) -> list[str]:
        return [r.name for r in self.rules if r.group == group]

    def rules_for(self, group: str) -> list[OverrideRule]:
        return [r for r in self.rules if r.group == group]

    def rule_for(self, group: str, name: str) -> OverrideRule | None:
        for r in self.rules:
            if r.group == group and r.name == name:
                return r
        return None

    @classmethod
    def from_frame(cls, sourcetype: str, frame: pd.DataFrame) -> "SourceTab":
        """Parse a raw (header-less) source-tab sheet."""
        rows = frame.values.tolist()
        if not rows:
            raise InvalidFileContents(f"Source tab '{sourcetype}' is empty.")

        header = [_cell(h) for h in rows[0]]
        missing = [h for h in TAB_HEADERS if h not in header]
        if missing:
            raise InvalidFileContents(
                f"Source tab '{sourcetype}' has invalid or missing headers: {missing}."
            )
        col = {h: header.index(h) for h in TAB_HEADERS}

        rules = []
        for k, row in enumerate(rows[1:], start=2):
            group = _cell(row[col["Group"]])
            if not group:
                continue
            rules.append(
                OverrideRule(
                    group=group,
                    name=_cell(row[col["Signal"]]),
                    factor=_factor(row[col["Factor"]], f"Source tab '{sourcetype}', row {k}"),
                    units=_cell(row[col["Units"]]),
                    description=_cell(row[col["Descriptions"]]),
                )
            )
        return cls(sourcetype=sourcetype, rules=tuple(rules))


@dataclass(frozen=True, slots=True)
class NameTables:
    """
    Immutable name and override lookup.

    - layers: name layers in workbook column order ("TagNames", ...)
    - source_types: layer -> source type ("" when the layer has none)
    - names: group -> layer -> one name per signal ("" where undefined)
    - source_tabs: source type -> SourceTab
    """
    layers: tuple[str, ...]
    source_types: dict[str, str]
    names: dict[str, dict[str, list[str]]]
    source_tabs: dict[str, SourceTab] = field(default_factory=dict)

    # ---- lookups ----
    @property
    def groups(self) -> list[str]:
        return list(self.names)

    def list_source_types(self) -> list[str]:
        return sorted(self.source_tabs)

    def _layer(self, layer: str) -> str:
        layer = source_to_layer(layer)
        if layer not in self.layers:
            raise InvalidLayer(layer)
        return layer

    def names_for(self, group: str, layer: str) -> list[str]:
        if group not in self.names:
            raise InvalidGroup(group)
        return list(self.names[group][self._layer(layer)])

    def source_type_for(self, layer: str) -> str:
        return self.source_types[self._layer(layer)]

    def layer_for(self, source: str) -> str:
        return self._layer(source)

    def source_for(self, layer: str) -> str:
        return layer_to_source(self._layer(layer))

    def source_tab(self, sourcetype: str) -> SourceTab:
        try:
            return self.source_tabs[sourcetype]
        except KeyError:
            raise UnknownSourceType(
                f"Source type '{sourcetype}' is not defined. "
                f"Available source types: {self.list_source_types()}"
            ) from None

    def check(self) -> list[str]:
        """
        Cross-check the MASTER sheet against the source tabs.

        Returns a list of problems; an empty list means the tables are
        consistent.
        """
        errors = []
        for layer in self.layers:
            sourcetype = self.source_types[layer]
            if not sourcetype:
                continue
            if sourcetype not in self.source_tabs:
                errors.append(f"MASTER: layer '{layer}' refers to missing source tab '{sourcetype}'.")
                continue
            registered = {r.name for r in self.source_tabs[sourcetype].rules}
            for group, by_layer in self.names.items():
                unregistered = [n for n in by_layer[layer] if n and n not in registered]
                if unregistered:
                    errors.append(
                        f"MASTER: layer '{layer}': group '{group}': unregistered names: {unregistered}."
                    )
        return errors

    # ---- construction ----
    @classmethod
    def from_frames(cls, master: pd.DataFrame, tabs: Mapping[str, pd.DataFrame]) -> "NameTables":
        """Build from raw (header-less) sheets, as returned by read_excel(header=None)."""
        rows = master.values.tolist()
        if len(rows) < 2:
            raise InvalidFileContents("MASTER sheet must hold a header row and a source-type row.")

        header = [_cell(h) for h in rows[0]]
        columns = [
            j for j in range(1, len(header))
            if not header[j].startswith("<") and any(_cell(r[j]) for r in rows)
        ]
        if any(not header[j] for j in columns):
            raise InvalidFileContents("MASTER: one or more name columns is not labeled.")

        layers = tuple(source_to_layer(header[j]) for j in columns)
        if len(set(layers)) != len(layers):
            raise InvalidFileContents(f"MASTER: duplicate name layers in {list(layers)}.")
        source_types = {layer: _cell(rows[1][j]) for layer, j in zip(layers, columns)}

        names: dict[str, dict[str, list[str]]] = {}
        for row in rows[2:]:
            group = _cell(row[0])
            if not group:
                continue
            by_layer = names.setdefault(group, {layer: [] for layer in layers})
            for layer, j in zip(layers, columns):
                by_layer[layer].append(_cell(row[j]))

        source_tabs = {
            name: SourceTab.from_frame(name, frame)
            for name, frame in tabs.items()
            if name != MASTER
        }
        return cls(layers=layers, source_types=source_types, names=names, source_tabs=source_tabs)

    @classmethod
    def load(cls, path: str | os.PathLike | None = None) -> "NameTables":
        """
        Read the lookup workbook.

        Without `path`, the SIGNORM_NAME_TABLES environment variable is
        used, then NameTables.xlsx in the working directory.
        """
        path = Path(path or os.environ.get(ENV_VAR) or DEFAULT_FILE)
        if not path.is_file():
            raise FileNotFound(f"Name tables workbook not found: {path}")

        sheets = pd.read_excel(path, sheet_name=None, header=None, dtype=object)
        if MASTER not in sheets:
            raise InvalidFileContents(f"Workbook {path} has no '{MASTER}' sheet.")

        tables = cls.from_frames(sheets[MASTER], sheets)
        logger.info(
            "Loaded name tables from %s: %d group(s), %d layer(s), %d source type(s).",
            path, len(tables.names), len(tables.layers), len(tables.source_tabs),
        )
        return tables
