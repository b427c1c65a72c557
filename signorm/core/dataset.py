# signorm/core/dataset.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, Iterator, Mapping, Sequence

import numpy as np

from .exceptions import GroupNotFound, InvalidDataset
from .kinds import StructureKind
from .metadata import DatasetMeta
from .signal_group import SignalGroup


TIME = "Time"


@dataclass(slots=True)
class Dataset:
    """
    Dataset = named SignalGroups sharing one mandatory "Time" group.

    Group order is the order of `groups`; the Time group is always kept
    first. Structural invariants are checked by `check_dataset`.
    """

    groups: Mapping[str, SignalGroup] = field(default_factory=dict, repr=False)
    meta: DatasetMeta = field(default_factory=DatasetMeta)

    kind: ClassVar[StructureKind] = StructureKind.DATASET

    def __post_init__(self) -> None:
        if not isinstance(self.groups, Mapping):
            raise InvalidDataset("Dataset.groups must be a mapping (e.g., dict).")
        if not isinstance(self.meta, DatasetMeta):
            raise InvalidDataset("Dataset.meta must be a DatasetMeta instance.")

        normalized: dict[str, SignalGroup] = {}
        if TIME in self.groups:
            normalized[TIME] = self.groups[TIME]
        for key, group in self.groups.items():
            if not isinstance(key, str) or not key.strip():
                raise InvalidDataset("Dataset group names must be non-empty strings.")
            if not isinstance(group, SignalGroup):
                raise InvalidDataset(f"Dataset group '{key}' is not a SignalGroup.")
            normalized[key] = group
        self.groups = normalized

    # ---- dict-like API ----
    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[str]:
        return iter(self.groups)

    def __contains__(self, name: object) -> bool:
        return name in self.groups

    def keys(self) -> Iterable[str]:
        return self.groups.keys()

    def items(self) -> Iterable[tuple[str, SignalGroup]]:
        return self.groups.items()

    def values(self) -> Iterable[SignalGroup]:
        return self.groups.values()

    def __getitem__(self, name: str) -> SignalGroup:
        try:
            return self.groups[name]
        except KeyError as e:
            raise GroupNotFound(name) from e

    def get(self, name: str, default: SignalGroup | None = None) -> SignalGroup | None:
        return self.groups.get(name, default)

    # ---- structure ----
    @property
    def time(self) -> SignalGroup:
        return self[TIME]

    @property
    def signal_groups(self) -> dict[str, SignalGroup]:
        """All groups except Time, in declaration order."""
        return {k: g for k, g in self.groups.items() if k != TIME}

    @property
    def group_names(self) -> list[str]:
        return list(self.signal_groups)

    @property
    def n_rows(self) -> int:
        return self.time.n_rows

    @property
    def is_absolute_time(self) -> bool:
        return bool(self.time.units) and self.time.units[0] == "datetime"

    @property
    def casename(self) -> str:
        return self.meta.casename

    @property
    def source(self) -> str:
        return self.meta.source

    @property
    def sourcetype(self) -> str:
        return self.meta.sourcetype

    @property
    def pathnames(self) -> tuple[str, ...]:
        return self.meta.pathnames

    # ---- transformations ----
    def with_groups(self, groups: Mapping[str, SignalGroup]) -> "Dataset":
        return Dataset(groups=dict(groups), meta=self.meta.replace())

    def with_meta(self, **changes) -> "Dataset":
        return Dataset(groups=dict(self.groups), meta=self.meta.replace(**changes))

    def copy(self) -> "Dataset":
        return Dataset(
            groups={k: g.copy() for k, g in self.groups.items()},
            meta=self.meta.replace(),
        )

    def drop(self, names: str | Iterable[str], *, missing: str = "raise") -> "Dataset":
        """
        Drop one or more signal groups (Time cannot be dropped).

        missing:
          - "raise": error if any name is missing
          - "ignore": skip missing names
        """
        names_set = {names} if isinstance(names, str) else set(names)
        if TIME in names_set:
            raise InvalidDataset("The 'Time' group cannot be dropped.")

        new_groups = dict(self.groups)
        for n in names_set:
            if n in new_groups:
                del new_groups[n]
            elif missing == "raise":
                raise GroupNotFound(n)
        return self.with_groups(new_groups)

    def keep_groups(self, names: Sequence[str], *, missing: str = "raise") -> "Dataset":
        """Keep Time plus the given groups, in the order given."""
        selected: dict[str, SignalGroup] = {TIME: self.time}
        for n in names:
            if n == TIME:
                continue
            if n in self.groups:
                selected[n] = self.groups[n]
            elif missing == "raise":
                raise GroupNotFound(n)
        return self.with_groups(selected)


class _ContainerArray:
    """Homogeneous N-d array of containers, enumerated in column-major order."""

    __slots__ = ("elements",)

    def __init__(self, elements) -> None:
        arr = np.empty(len(elements), dtype=object) if isinstance(elements, (list, tuple)) else None
        if arr is not None:
            for k, e in enumerate(elements):
                arr[k] = e
        else:
            arr = np.asarray(elements, dtype=object)
            if arr.ndim == 0:
                arr = arr.reshape(1)
        self.elements = arr

    @property
    def shape(self) -> tuple[int, ...]:
        return self.elements.shape

    def __len__(self) -> int:
        return int(self.elements.size)

    def __iter__(self) -> Iterator:
        return iter(self.elements.ravel(order="F"))

    def __getitem__(self, index: int):
        return self.elements.ravel(order="F")[index]


class DatasetArray(_ContainerArray):
    kind: ClassVar[StructureKind] = StructureKind.DATASET_ARRAY


class SignalGroupArray(_ContainerArray):
    kind: ClassVar[StructureKind] = StructureKind.SIGNAL_GROUP_ARRAY
