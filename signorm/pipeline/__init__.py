# signorm/pipeline/__init__.py
"""
Ingestion pipeline: raw files -> S-arrays -> datasets.

- collapse_sarray: S-array -> Dataset, with optional source-type overrides
- extract_data: format-dispatching single-file entry point
- build_dataset: multi-file, multi-group, multi-layer datasets
- convert_to_sarray, dataset_to_sarray, group_signal_from_array: batch utilities
"""

from .collapse import collapse_sarray
from .extract import extract_data, read_raw_file
from .build import build_dataset
from .batch import convert_to_sarray, dataset_to_sarray, group_signal_from_array


__all__ = [
    "collapse_sarray",
    "extract_data",
    "read_raw_file",
    "build_dataset",
    "convert_to_sarray",
    "dataset_to_sarray",
    "group_signal_from_array",
]
