# signorm/names/units.py
from __future__ import annotations

import math
import re

from signorm.core.exceptions import InvalidArgument


_PREFIXES = {
    "G": 1e9,
    "M": 1e6,
    "k": 1e3,
    "c": 1e-2,
    "m": 1e-3,
    "u": 1e-6,
    "n": 1e-9,
}

# (from, to) -> multiply values in `from` units by the factor to get `to` units
_CONVERSIONS = {
    ("deg", "rad"): math.pi / 180,
    ("rpm", "rad/s"): 2 * math.pi / 60,
    ("rpm/s", "rad/s^2"): 2 * math.pi / 60,
    ("rpm", "deg/s"): 6.0,
    ("rpm/s", "deg/s^2"): 6.0,
    ("in", "mm"): 25.4,
    ("in", "m"): 0.0254,
    ("ft", "m"): 0.3048,
    ("mi", "ft"): 5280.0,
    ("mi", "m"): 1609.344,
    ("mi", "km"): 1.609344,
    ("mph", "km/h"): 1.609344,
    ("mph", "ft/s"): 1.466667,
    ("nmi", "km"): 1.852,
    ("mi", "nmi"): 0.8684,
    ("lb", "kg"): 0.4536,
    ("qt", "lt"): 0.9463,
    ("mbar", "Pa"): 100.0,
    ("hr", "sec"): 3600.0,
    ("hrs", "sec"): 3600.0,
    ("min", "sec"): 60.0,
    ("hr", "min"): 60.0,
    ("hrs", "min"): 60.0,
}

_DENOMINATOR = re.compile(r"/[A-Za-z0-9\-\^]+$")


def conversion_factor(units_from: str, units_to: str) -> float:
    """
    Factor converting values expressed in `units_from` into `units_to`.

    Handles identical units, SI prefixes on the same base unit, and a table
    of common engineering conversions in either direction. Returns NaN when
    no conversion is known.
    """
    if not isinstance(units_from, str) or not isinstance(units_to, str):
        raise InvalidArgument("Units must be character strings.")
    if not units_from or not units_to:
        raise InvalidArgument("Empty units strings are not valid.")

    if units_from == units_to:
        return 1.0

    if len(units_from) > len(units_to) and units_from[1:] == units_to and units_from[0] in _PREFIXES:
        return _PREFIXES[units_from[0]]
    if len(units_to) > len(units_from) and units_to[1:] == units_from and units_to[0] in _PREFIXES:
        return 1.0 / _PREFIXES[units_to[0]]

    # a shared denominator ("/s", "/sec^2") does not change the factor
    den_from = _DENOMINATOR.search(units_from)
    den_to = _DENOMINATOR.search(units_to)
    if den_from and den_to and den_from.group() == den_to.group():
        units_from = units_from[: den_from.start()]
        units_to = units_to[: den_to.start()]

    if (units_from, units_to) in _CONVERSIONS:
        return _CONVERSIONS[(units_from, units_to)]
    if (units_to, units_from) in _CONVERSIONS:
        return 1.0 / _CONVERSIONS[(units_to, units_from)]
    return math.nan
