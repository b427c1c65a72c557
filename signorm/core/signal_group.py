# signorm/core/signal_group.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, Mapping, Sequence

import numpy as np

from .exceptions import InvalidSignalGroup, SignalNotFound
from .kinds import StructureKind


DEFAULT_LAYER = "Names"


@dataclass(slots=True)
class SignalGroup:
    """
    Uniform-rate signal container.

    - names: ordered mapping, name layer -> one name per column
    - values: 2D matrix, rows = samples, columns = signals
    - units, descriptions: one entry per column

    Column-count consistency is not enforced here; it is checked by
    `check_signal_group`, since groups are edited in place while being built.
    """

    names: dict[str, list[str]]
    values: np.ndarray = field(repr=False)
    units: list[str] = field(default_factory=list)
    descriptions: list[str] = field(default_factory=list)

    kind: ClassVar[StructureKind] = StructureKind.SIGNAL_GROUP

    def __post_init__(self) -> None:
        if not isinstance(self.names, Mapping):
            raise InvalidSignalGroup("SignalGroup.names must be a mapping of layer -> names.")
        normalized: dict[str, list[str]] = {}
        for layer, names in self.names.items():
            if not isinstance(layer, str):
                raise InvalidSignalGroup("SignalGroup name layers must be strings.")
            if isinstance(names, str):
                raise InvalidSignalGroup(f"Layer '{layer}' must be a sequence of names.")
            normalized[layer] = list(names)
        self.names = normalized
        self.values = np.asarray(self.values)
        self.units = list(self.units)
        self.descriptions = list(self.descriptions)

    # ---- shape ----
    @property
    def layers(self) -> list[str]:
        return list(self.names)

    @property
    def n_signals(self) -> int:
        return int(self.values.shape[1]) if self.values.ndim == 2 else 0

    @property
    def n_rows(self) -> int:
        return int(self.values.shape[0]) if self.values.ndim >= 1 else 0

    def __len__(self) -> int:
        return self.n_signals

    @property
    def default_names(self) -> list[str]:
        """Names on the first layer."""
        return next(iter(self.names.values()), [])

    def names_matrix(self) -> list[tuple[str, ...]]:
        """One tuple of names per signal, across layers in layer order."""
        return list(zip(*self.names.values()))

    # ---- lookup ----
    def index(self, name: str) -> int:
        """Column of the first signal carrying `name` on any layer."""
        for k, row in enumerate(self.names_matrix()):
            if name in row:
                return k
        raise SignalNotFound(name)

    def __contains__(self, name: object) -> bool:
        return any(name in row for row in self.names_matrix())

    def column(self, name: str) -> np.ndarray:
        return self.values[:, self.index(name)]

    # ---- copies ----
    def subset(self, indices: Sequence[int]) -> "SignalGroup":
        """Return a new group holding the given columns, in the given order."""
        idx = np.asarray(indices, dtype=int).reshape(-1)
        return SignalGroup(
            names={layer: [names[i] for i in idx] for layer, names in self.names.items()},
            values=self.values[:, idx],
            units=[self.units[i] for i in idx],
            descriptions=[self.descriptions[i] for i in idx],
        )

    def copy(self) -> "SignalGroup":
        return SignalGroup(
            names={layer: list(names) for layer, names in self.names.items()},
            values=self.values.copy(),
            units=list(self.units),
            descriptions=list(self.descriptions),
        )

    def with_values(self, values: np.ndarray) -> "SignalGroup":
        return SignalGroup(
            names={layer: list(names) for layer, names in self.names.items()},
            values=values,
            units=list(self.units),
            descriptions=list(self.descriptions),
        )

    # ---- in-place edits ----
    def rename(self, layer: str, old: str, new: str) -> None:
        """Substitute `new` for every occurrence of `old` on `layer`."""
        if layer not in self.names:
            raise InvalidSignalGroup(f"Layer '{layer}' is not present.")
        names = self.names[layer]
        if old not in names:
            raise SignalNotFound(old)
        self.names[layer] = [new if n == old else n for n in names]

    def keep(self, mask: Iterable[bool]) -> None:
        """Drop the columns where `mask` is False."""
        m = np.asarray(list(mask), dtype=bool)
        if m.size != self.n_signals:
            raise InvalidSignalGroup(f"Mask length {m.size} does not match {self.n_signals} signals.")
        idx = np.flatnonzero(m)
        self.names = {layer: [names[i] for i in idx] for layer, names in self.names.items()}
        self.values = self.values[:, idx]
        self.units = [self.units[i] for i in idx]
        self.descriptions = [self.descriptions[i] for i in idx]

    def insert(self, other: "SignalGroup", position: int | None = None) -> None:
        """Insert the columns of `other` before `position` (default: append)."""
        if other.layers != self.layers:
            raise InvalidSignalGroup("Inputs have incompatible name layers.")
        if other.n_rows != self.n_rows:
            raise InvalidSignalGroup("Inputs have incompatible signal lengths.")
        pos = self.n_signals if position is None else int(position)
        for layer in self.names:
            self.names[layer][pos:pos] = other.names[layer]
        self.values = np.concatenate(
            [self.values[:, :pos], other.values, self.values[:, pos:]], axis=1
        )
        self.units[pos:pos] = other.units
        self.descriptions[pos:pos] = other.descriptions

    # ---- constructors ----
    @classmethod
    def time_group(
        cls,
        values: np.ndarray,
        units: str,
        description: str = "Time vector",
        *,
        name: str = "Time",
        layers: Sequence[str] = (DEFAULT_LAYER,),
    ) -> "SignalGroup":
        """Single-column group holding a time base."""
        return cls(
            names={layer: [name] for layer in layers},
            values=np.asarray(values).reshape(-1, 1),
            units=[units],
            descriptions=[description],
        )

    @classmethod
    def empty(cls, layers: Sequence[str], n_rows: int, dtype=float) -> "SignalGroup":
        return cls(
            names={layer: [] for layer in layers},
            values=np.zeros((n_rows, 0), dtype=dtype),
        )
