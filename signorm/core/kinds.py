# signorm/core/kinds.py
from __future__ import annotations

from enum import Enum

from .exceptions import InvalidArgument


class StructureKind(Enum):
    """Closed set of container shapes handled by the pipeline."""

    SARRAY = "S-array"
    SIGNAL_GROUP = "signal group"
    DATASET = "dataset"
    SIGNAL_GROUP_ARRAY = "signal group array"
    DATASET_ARRAY = "dataset array"


def kind_of(obj: object) -> StructureKind:
    """Return the structure kind carried by `obj`, or raise InvalidArgument."""
    kind = getattr(type(obj), "kind", None)
    if not isinstance(kind, StructureKind):
        raise InvalidArgument(f"Object of type {type(obj).__name__} is not a signorm container.")
    return kind
