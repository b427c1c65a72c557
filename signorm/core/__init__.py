# signorm/core/__init__.py
"""
Core data model for signorm.

This module defines the format-agnostic containers and their pure operations:
- Signal / SArray: variable-rate raw signals as produced by file readers
- SignalGroup: uniform-rate signals with one or more name layers
- Dataset: named signal groups sharing a mandatory Time group
- DatasetArray / SignalGroupArray: homogeneous arrays of the above
- validators, selection, time-grid strategies and resampling
- concatenation and merging of whole datasets

The core layer is independent from I/O and from the name tables.
"""

from .signal import Signal, SArray, Trigger
from .signal_group import SignalGroup, DEFAULT_LAYER
from .dataset import Dataset, DatasetArray, SignalGroupArray, TIME
from .metadata import DatasetMeta
from .kinds import StructureKind, kind_of
from .validation import (
    ValidationResult,
    check_sarray,
    check_signal_group,
    check_dataset,
    check_signal_group_array,
    check_dataset_array,
)
from .selection import (
    Selection,
    collect_signals,
    select_from_group,
    select_from_dataset,
    select,
    merge_signal_groups,
    names_matrix,
)
from .timegrid import TimeGridStrategy, FinestGrid, interpolate
from .resample import resample_dataset, limit_time_range
from .combine import concat_datasets, merge_datasets
from .exceptions import (
    CoreError,
    InvalidArgument,
    InvalidSignal,
    InvalidSarray,
    InvalidSignalGroup,
    InvalidDataset,
    InvalidFileContents,
    UnknownSourceType,
    InvalidSourceType,
    UnsupportedSourceType,
    InvalidGroup,
    InvalidLayer,
    GroupNotFound,
    SignalNotFound,
    SourceTypeMismatch,
    UnrecognizedFileFormat,
    FileNotFound,
)


__all__ = [
    # containers
    "Signal",
    "SArray",
    "Trigger",
    "SignalGroup",
    "DEFAULT_LAYER",
    "Dataset",
    "DatasetArray",
    "SignalGroupArray",
    "TIME",
    "DatasetMeta",
    "StructureKind",
    "kind_of",

    # validators
    "ValidationResult",
    "check_sarray",
    "check_signal_group",
    "check_dataset",
    "check_signal_group_array",
    "check_dataset_array",

    # selection
    "Selection",
    "collect_signals",
    "select_from_group",
    "select_from_dataset",
    "select",
    "merge_signal_groups",
    "names_matrix",

    # time base
    "TimeGridStrategy",
    "FinestGrid",
    "interpolate",
    "resample_dataset",
    "limit_time_range",
    "concat_datasets",
    "merge_datasets",

    # exceptions
    "CoreError",
    "InvalidArgument",
    "InvalidSignal",
    "InvalidSarray",
    "InvalidSignalGroup",
    "InvalidDataset",
    "InvalidFileContents",
    "UnknownSourceType",
    "InvalidSourceType",
    "UnsupportedSourceType",
    "InvalidGroup",
    "InvalidLayer",
    "GroupNotFound",
    "SignalNotFound",
    "SourceTypeMismatch",
    "UnrecognizedFileFormat",
    "FileNotFound",
]
