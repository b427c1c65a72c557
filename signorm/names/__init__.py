# signorm/names/__init__.py
"""
Name lookup for signorm: name layers, source types, override rules and
unit conversion factors.
"""

from .name_tables import (
    NameTables,
    SourceTab,
    OverrideRule,
    source_to_layer,
    layer_to_source,
)
from .units import conversion_factor


__all__ = [
    "NameTables",
    "SourceTab",
    "OverrideRule",
    "source_to_layer",
    "layer_to_source",
    "conversion_factor",
]
