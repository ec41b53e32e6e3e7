# Authors: Alexander John Balagso, Marc Aaron Africano

"""Field-name tables for the NYC collisions dataset and the column resolver.

The same logical field shows up under several names depending on which export
produced the CSV (``CRASH_DATE``, ``CRASH DATE``, ``crash_date``, ``crashDate``).
Every read in the package goes through :func:`get_value` so each field has
exactly one ordered list of accepted names.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

# Ordered alias lists, first present-and-non-empty value wins.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "borough": ("BOROUGH", "Borough", "borough"),
    "crash_date": ("CRASH_DATE", "CRASH DATE", "crash_date", "crashDate", "Crash_Date", "DATE", "date"),
    "crash_time": ("CRASH_TIME", "CRASH TIME", "crash_time", "crashTime"),
    "latitude": ("LATITUDE", "Latitude", "latitude", "lat"),
    "longitude": ("LONGITUDE", "Longitude", "longitude", "lon", "lng"),
    "vehicle_type": (
        "VEHICLE_TYPE_CODE_1",
        "VEHICLE TYPE CODE 1",
        "vehicle_type_code1",
        "VEHICLE_TYPE_CODE1",
        "vehicle_type",
        "vehicleType",
        "VEHICLE_TYPE",
    ),
    "contributing_factor": (
        "CONTRIBUTING_FACTOR_VEHICLE_1",
        "CONTRIBUTING FACTOR VEHICLE 1",
        "contributing_factor_vehicle_1",
        "CONTRIBUTING_FACTOR_1",
        "contributing_factor",
        "contributingFactor",
    ),
    "persons_injured": (
        "NUMBER_OF_PERSONS_INJURED",
        "NUMBER OF PERSONS INJURED",
        "number_of_persons_injured",
        "personsInjured",
        "injuries",
    ),
    "persons_killed": (
        "NUMBER_OF_PERSONS_KILLED",
        "NUMBER OF PERSONS KILLED",
        "number_of_persons_killed",
        "personsKilled",
        "fatalities",
    ),
    "pedestrians_injured": ("NUMBER_OF_PEDESTRIANS_INJURED", "NUMBER OF PEDESTRIANS INJURED", "number_of_pedestrians_injured"),
    "pedestrians_killed": ("NUMBER_OF_PEDESTRIANS_KILLED", "NUMBER OF PEDESTRIANS KILLED", "number_of_pedestrians_killed"),
    "cyclists_injured": ("NUMBER_OF_CYCLIST_INJURED", "NUMBER OF CYCLIST INJURED", "number_of_cyclist_injured"),
    "cyclists_killed": ("NUMBER_OF_CYCLIST_KILLED", "NUMBER OF CYCLIST KILLED", "number_of_cyclist_killed"),
    "motorists_injured": ("NUMBER_OF_MOTORIST_INJURED", "NUMBER OF MOTORIST INJURED", "number_of_motorist_injured"),
    "motorists_killed": ("NUMBER_OF_MOTORIST_KILLED", "NUMBER OF MOTORIST KILLED", "number_of_motorist_killed"),
    "injury_severity": ("INJURY_SEVERITY", "INJURY SEVERITY", "injurySeverity", "INJURY_TYPE", "injuryType"),
    "year": ("YEAR", "Year", "year"),
    "month": ("MONTH", "Month", "month"),
    "collision_id": ("COLLISION_ID", "COLLISION ID", "collision_id"),
}

BOROUGH_ORDER: Tuple[str, ...] = ("MANHATTAN", "BROOKLYN", "QUEENS", "BRONX", "STATEN ISLAND")

_NON_ALNUM = re.compile(r"[^0-9a-z]")


def _norm_key(name: str) -> str:
    return _NON_ALNUM.sub("", name.lower())


def is_missing(value: Any) -> bool:
    """True for None, blank strings and pandas missing markers (NaN, NaT, NA)."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return pd.api.types.is_scalar(value) and bool(pd.isna(value))


def get_value(row: Any, field: str) -> Any:
    """Return the value of logical `field` from `row`, or None when absent.

    Aliases are tried in table order. When none is present the row keys are
    compared case- and separator-insensitively, so ``Crash Time`` still
    resolves ``crash_time``.
    """
    if not isinstance(row, Mapping):
        return None
    aliases = FIELD_ALIASES.get(field, (field,))
    for name in aliases:
        value = row.get(name)
        if not is_missing(value):
            return value

    targets = {_norm_key(name) for name in aliases}
    for key, value in row.items():
        if isinstance(key, str) and _norm_key(key) in targets and not is_missing(value):
            return value
    return None


def to_int(value: Any) -> int:
    """Coerce a count column to a non-negative int, 0 when absent or unparseable."""
    if is_missing(value) or isinstance(value, bool):
        return 0
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)


def to_float(value: Any) -> Optional[float]:
    """Coerce a coordinate to float, None when absent or unparseable."""
    if is_missing(value) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def get_label(row: Any, field: str) -> Optional[str]:
    """Return the trimmed, upper-cased text of `field`, None when blank."""
    value = get_value(row, field)
    if value is None:
        return None
    label = str(value).strip().upper()
    return label or None


def get_borough(row: Any) -> Optional[str]:
    return get_label(row, "borough")


def get_counts(row: Any) -> Tuple[int, int]:
    """Return ``(persons_injured, persons_killed)`` for a row."""
    return to_int(get_value(row, "persons_injured")), to_int(get_value(row, "persons_killed"))


def missing_columns(columns: Iterable[str]) -> List[str]:
    """Return the logical fields none of whose aliases appear in `columns`."""
    present = {_norm_key(str(c)) for c in columns}
    missing = []
    for field in ("borough", "crash_date", "crash_time", "latitude", "longitude",
                  "vehicle_type", "contributing_factor", "persons_injured", "persons_killed"):
        if not any(_norm_key(alias) in present for alias in FIELD_ALIASES[field]):
            missing.append(field)
    return missing


__all__ = [
    "FIELD_ALIASES",
    "BOROUGH_ORDER",
    "is_missing",
    "get_value",
    "get_label",
    "get_borough",
    "get_counts",
    "to_int",
    "to_float",
    "missing_columns",
]
