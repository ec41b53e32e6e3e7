"""Data-pull utilities for the collisions CSV.

Loads the CSV into a list of row dicts, parses the loosely typed date and time
columns, and applies the filter predicate the web layer and the CLI share.
"""

from __future__ import annotations

import logging
import math
import numbers
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd
from dateutil.parser import parse as _parse_date

from . import crashes_dictionaries as cd
from .search import INJURY_TYPES

logger = logging.getLogger(__name__)

# Upper bound on rows returned by the JSON endpoints.
MAX_RESULTS = 5000

_TIME_TOKEN = re.compile(r"(\d{1,2}):(\d{2})")
_HAS_YEAR = re.compile(r"\d{4}")
# Distinct in year, month and day.
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 2, 2))
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})")

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def read_accidents_csv(path: str, nrows: Optional[int] = None) -> List[Dict[str, Any]]:
    """Read the collisions CSV and return a list of row dicts.

    Every column is read as text; blanks become ``None`` so rows serialize
    straight to JSON. Malformed lines are skipped with a warning.
    """
    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        df = pd.read_csv(path_obj, dtype=str, nrows=nrows, low_memory=False)
    except pd.errors.ParserError:
        df = pd.read_csv(path_obj, dtype=str, nrows=nrows, engine="python", on_bad_lines="skip")
        logger.warning("Some CSV lines in %s were malformed and were skipped during parsing.", path)

    missing = cd.missing_columns(df.columns)
    if missing:
        logger.warning("Columns not found in %s: %s", path, ", ".join(missing))

    df = df.astype(object).where(pd.notna(df), None)
    rows = df.to_dict(orient="records")
    logger.info("Loaded %d records from %s", len(rows), path)
    return rows


def as_rows(data: Any) -> List[Any]:
    """Return `data` as a list of rows without touching the rows themselves.

    Accepts any iterable of mappings or a pandas DataFrame. ``None``, strings
    and a single mapping are caller errors and raise ``TypeError``.
    """
    if data is None or isinstance(data, (str, bytes, Mapping)):
        raise TypeError(f"records must be an iterable of mappings, got {type(data).__name__}")
    if isinstance(data, pd.DataFrame):
        return data.to_dict(orient="records")
    try:
        return list(data)
    except TypeError as exc:
        raise TypeError(f"records must be an iterable of mappings, got {type(data).__name__}") from exc


def parse_crash_date(value: Any) -> Optional[date]:
    """Parse a crash date from ISO, US ``MM/DD/YYYY`` or native values.

    Strategies are tried in order and a failure falls through to the next one;
    None is returned when all of them fail.
    """
    if cd.is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    head = re.split(r"[T ]", text, maxsplit=1)[0]
    try:
        return date.fromisoformat(head)
    except ValueError:
        pass

    match = _US_DATE.match(text)
    if match:
        month, day, year = (int(g) for g in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            pass

    parsed = _parse_free_text(text)
    if parsed is not None and parsed[0] == parsed[1]:
        return parsed[0]
    return None


def _parse_free_text(value: Any) -> Optional[Tuple[date, date]]:
    """Parse free-form date text with dateutil under two different defaults.

    dateutil fills the parts the text leaves out from its default, so a part
    is only real when both results agree on it.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if len(text) < 8 or not _HAS_YEAR.search(text):
        return None
    try:
        first, second = (_parse_date(text, default=d).date() for d in _PARSE_DEFAULTS)
    except (ValueError, OverflowError):
        return None
    return first, second


def _crash_month(row: Any) -> Optional[Tuple[int, int]]:
    value = cd.get_value(row, "crash_date")
    parsed = parse_crash_date(value)
    if parsed is not None:
        return parsed.year, parsed.month
    # "March 2021" has no day but still names a month
    partial = _parse_free_text(value)
    if partial is not None:
        first, second = partial
        if (first.year, first.month) == (second.year, second.month):
            return first.year, first.month
    return None


def parse_crash_hour(value: Any) -> Optional[int]:
    """Return the hour 0-23 of a crash time, or None.

    ``"14:30"``/``"14:30:00"`` use the digits before the colon; packed numbers
    (``905``, ``1430`` or the digit strings ``"0905"``) use ``value // 100``.
    """
    if cd.is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, time)):
        return value.hour

    hour: Optional[int] = None
    if isinstance(value, numbers.Real):
        if value >= 0:
            hour = int(math.floor(value / 100))
    elif isinstance(value, str):
        text = value.strip()
        match = _TIME_TOKEN.search(text)
        if match:
            hour = int(match.group(1))
        else:
            try:
                packed = float(text)
            except ValueError:
                return None
            if packed == packed and packed >= 0:
                hour = int(math.floor(packed / 100))

    if hour is None or not 0 <= hour <= 23:
        return None
    return hour


def month_index(value: Any) -> Optional[int]:
    """Return a 1-12 month number from a number or a (possibly abbreviated) month name."""
    if cd.is_missing(value) or isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        text = str(value).strip().lower()
        if len(text) < 3:
            return None
        for i, name in enumerate(MONTH_NAMES, 1):
            if name.lower().startswith(text):
                return i
        return None
    return number if 1 <= number <= 12 else None


def month_key(row: Any) -> Optional[str]:
    """Return the ``YYYY-MM`` key of a row, or None.

    The crash date is preferred; explicit year and month fields are the fallback.
    """
    crash_month = _crash_month(row)
    if crash_month is not None:
        year, month = crash_month
        return f"{year}-{month:02d}"

    year = cd.to_int(cd.get_value(row, "year"))
    month = month_index(cd.get_value(row, "month"))
    if year and month:
        return f"{year}-{month:02d}"
    return None


def record_year(row: Any) -> Optional[int]:
    crash_month = _crash_month(row)
    if crash_month is not None:
        return crash_month[0]
    return cd.to_int(cd.get_value(row, "year")) or None


def _has_any(*fields: str) -> Callable[[Any], bool]:
    def predicate(row: Any) -> bool:
        return any(cd.to_int(cd.get_value(row, f)) > 0 for f in fields)
    return predicate


INJURY_PREDICATES: Dict[str, Callable[[Any], bool]] = {
    "FATAL": _has_any("persons_killed"),
    "INJURED": _has_any("persons_injured"),
    "PEDESTRIAN": _has_any("pedestrians_injured", "pedestrians_killed"),
    "CYCLIST": _has_any("cyclists_injured", "cyclists_killed"),
    "MOTORIST": _has_any("motorists_injured", "motorists_killed"),
}


def _injury_matches(row: Any, injury: str) -> bool:
    predicate = INJURY_PREDICATES.get(injury)
    if predicate is not None:
        return predicate(row)
    return cd.get_label(row, "injury_severity") == injury


def _clean(value: Any) -> Optional[str]:
    if cd.is_missing(value):
        return None
    return str(value).strip()


def filter_records(
    data: Any,
    borough: Optional[str] = None,
    year: Optional[Any] = None,
    vehicle: Optional[str] = None,
    factor: Optional[str] = None,
    injury: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Any]:
    """Return the rows of `data` matching every given filter value.

    Blank or missing filter values mean "no constraint". Vehicle and factor
    match as case-insensitive substrings of the primary vehicle type and
    contributing factor. `limit` caps the number of rows returned.
    """
    rows = as_rows(data)
    borough = _clean(borough)
    vehicle = _clean(vehicle)
    factor = _clean(factor)
    injury = _clean(injury)
    year_s = _clean(year)

    want_year: Optional[int] = None
    if year_s is not None:
        try:
            want_year = int(year_s)
        except ValueError:
            # an unparseable year cannot match any record
            return []

    out: List[Any] = []
    for row in rows:
        if limit is not None and len(out) >= limit:
            break
        if borough and cd.get_borough(row) != borough.upper():
            continue
        if want_year is not None and record_year(row) != want_year:
            continue
        if vehicle and vehicle.upper() not in (cd.get_label(row, "vehicle_type") or ""):
            continue
        if factor and factor.upper() not in (cd.get_label(row, "contributing_factor") or ""):
            continue
        if injury and not _injury_matches(row, injury.upper()):
            continue
        out.append(row)
    return out


def filter_options(data: Any, top_n: int = 50) -> Dict[str, List[Any]]:
    """Return the distinct values offered by the filter dropdowns."""
    rows = as_rows(data)
    boroughs: Dict[str, int] = {}
    years = set()
    vehicles: Dict[str, int] = {}
    factors: Dict[str, int] = {}
    for r in rows:
        b = cd.get_borough(r)
        if b:
            boroughs[b] = boroughs.get(b, 0) + 1
        y = record_year(r)
        if y:
            years.add(y)
        v = cd.get_label(r, "vehicle_type")
        if v:
            vehicles[v] = vehicles.get(v, 0) + 1
        f = cd.get_label(r, "contributing_factor")
        if f and f not in ("UNSPECIFIED", "UNKNOWN"):
            factors[f] = factors.get(f, 0) + 1

    ordered = [b for b in cd.BOROUGH_ORDER if b in boroughs]
    ordered += [b for b in boroughs if b not in cd.BOROUGH_ORDER]
    return {
        "boroughs": ordered,
        "years": [str(y) for y in sorted(years, reverse=True)],
        "vehicle_types": [k for k, _ in sorted(vehicles.items(), key=lambda kv: kv[1], reverse=True)[:top_n]],
        "factors": [k for k, _ in sorted(factors.items(), key=lambda kv: kv[1], reverse=True)[:top_n]],
        "injury_types": list(INJURY_TYPES),
    }


__all__ = [
    "MAX_RESULTS",
    "MONTH_NAMES",
    "read_accidents_csv",
    "as_rows",
    "parse_crash_date",
    "parse_crash_hour",
    "month_index",
    "month_key",
    "record_year",
    "filter_records",
    "filter_options",
]
