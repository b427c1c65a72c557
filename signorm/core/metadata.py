# signorm/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidDataset


@dataclass(frozen=True, slots=True)
class DatasetMeta:
    """
    Metadata attached to a Dataset.

    - casename: free label chosen by the caller
    - pathnames: file(s) the dataset was built from, in read order
    - source: primary source (name layer without its "Names" suffix)
    - sourcetype: key into the name tables' override tabs, or ""
    - attrs: arbitrary additional fields
    """
    casename: str = ""
    pathnames: tuple[str, ...] = ()
    source: str = ""
    sourcetype: str = ""
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        for name in ("casename", "source", "sourcetype"):
            value = getattr(self, name)
            if value is None:
                object.__setattr__(self, name, "")
            elif not isinstance(value, str):
                raise InvalidDataset(f"DatasetMeta.{name} must be a string.")

        pathnames = self.pathnames
        if isinstance(pathnames, str):
            pathnames = (pathnames,)
        object.__setattr__(self, "pathnames", tuple(str(p) for p in pathnames))

        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidDataset("DatasetMeta.attrs must be a dict.")

    def replace(self, **changes: Any) -> "DatasetMeta":
        values = {
            "casename": self.casename,
            "pathnames": self.pathnames,
            "source": self.source,
            "sourcetype": self.sourcetype,
            "attrs": self.attrs.copy(),
        }
        values.update(changes)
        return DatasetMeta(**values)
