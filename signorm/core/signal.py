# signorm/core/signal.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Iterable, Iterator, Sequence, Union

import numpy as np

from .exceptions import InvalidSarray, InvalidSignal
from .kinds import StructureKind


# None, a relative start value, an absolute start (datetime, numpy datetime64,
# date string), or a 6-element [Y, M, D, h, m, s] date vector.
Trigger = Union[None, float, datetime, np.datetime64, str, Sequence[float]]


@dataclass(frozen=True, slots=True)
class Signal:
    """
    One named, independently sampled sequence as produced by a file reader.

    `dt` is either a scalar sample interval or a vector of N-1 intervals.
    """

    name: str
    data: np.ndarray = field(repr=False)
    dt: float | np.ndarray = 1.0
    units_t: str = ""
    units: str = ""
    description: str = ""
    trigger: Trigger = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise InvalidSignal("Signal.name must be a string.")

        object.__setattr__(self, "data", np.asarray(self.data))

        dt = np.asarray(self.dt)
        if not np.issubdtype(dt.dtype, np.number):
            raise InvalidSignal(f"Signal '{self.name}': dt must be numeric.")
        if dt.size == 1:
            object.__setattr__(self, "dt", float(dt.reshape(-1)[0]))
        else:
            object.__setattr__(self, "dt", dt.astype(float).reshape(-1))

        for name in ("units_t", "units", "description"):
            if getattr(self, name) is None:
                object.__setattr__(self, name, "")

    @property
    def n(self) -> int:
        return int(self.data.size)

    @property
    def time(self) -> np.ndarray:
        """Elapsed-time vector implied by `dt`, starting at zero."""
        if isinstance(self.dt, float):
            return self.dt * np.arange(self.n, dtype=float)
        return np.concatenate(([0.0], np.cumsum(self.dt)))

    def with_data(self, data: np.ndarray, dt: float | np.ndarray | None = None) -> "Signal":
        return Signal(
            name=self.name,
            data=data,
            dt=self.dt if dt is None else dt,
            units_t=self.units_t,
            units=self.units,
            description=self.description,
            trigger=self.trigger,
        )


@dataclass(frozen=True, slots=True)
class SArray:
    """
    Variable-rate raw container: an ordered sequence of Signals.

    The trigger and time units of the whole array are taken from its
    first element.
    """

    signals: tuple[Signal, ...] = ()
    kind: ClassVar[StructureKind] = StructureKind.SARRAY

    def __post_init__(self) -> None:
        if isinstance(self.signals, Signal):
            raise InvalidSarray("SArray.signals must be a sequence of Signals, not a single Signal.")
        try:
            signals = tuple(self.signals)
        except TypeError as e:
            raise InvalidSarray("SArray.signals must be iterable.") from e
        object.__setattr__(self, "signals", signals)

    def __len__(self) -> int:
        return len(self.signals)

    def __iter__(self) -> Iterator[Signal]:
        return iter(self.signals)

    def __getitem__(self, index: int) -> Signal:
        return self.signals[index]

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.signals]

    @property
    def trigger(self) -> Trigger:
        return self.signals[0].trigger if self.signals else None

    @property
    def units_t(self) -> str:
        return self.signals[0].units_t if self.signals else ""

    def select(self, names: Iterable[str]) -> tuple["SArray", list[str]]:
        """
        Keep the named signals, in the order requested.

        Returns the reduced array and the list of names that were not found.
        """
        index = {}
        for k, s in enumerate(self.signals):
            index.setdefault(s.name, k)

        kept: list[Signal] = []
        missing: list[str] = []
        for name in names:
            if name in index:
                kept.append(self.signals[index[name]])
            else:
                missing.append(name)
        return SArray(tuple(kept)), missing
