# Authors: Alexander John Balagso, Marc Aaron Africano

"""Category and matrix series for the dashboard charts.

Each function takes an iterable of collision rows (or a DataFrame) and returns
a plain dict the plotting layer can use as-is:

- category series: ``{"labels": [...], "values": [...]}``
- matrix series: ``{"row_labels": [...], "col_labels": [...], "matrix": [[...]]}``

Rows whose field does not resolve are skipped by that chart only. Input rows
are never modified.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import crashes_dictionaries as cd
from . import geo
from .datapull import MONTH_NAMES, as_rows, month_key, parse_crash_date, parse_crash_hour

logger = logging.getLogger(__name__)

DAYS_OF_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
HOURS = list(range(24))
EXCLUDED_FACTORS = frozenset({"UNSPECIFIED", "UNKNOWN"})
TOP_N = 10

# Per-chart fatality weight for the borough bubble chart.
BUBBLE_FATALITY_WEIGHT = 5


def _tally(labels: Iterable[Optional[str]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for label in labels:
        if label:
            counts[label] = counts.get(label, 0) + 1
    return counts


def _top(counts: Dict[str, int], top_n: int) -> List[Tuple[str, int]]:
    # sorted() is stable, so equal counts keep first-seen order
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:top_n]


def _series(pairs: Iterable[Tuple[Any, int]]) -> Dict[str, List[Any]]:
    pairs = list(pairs)
    return {"labels": [k for k, _ in pairs], "values": [v for _, v in pairs]}


def _factor(row: Any) -> Optional[str]:
    factor = cd.get_label(row, "contributing_factor")
    if factor in EXCLUDED_FACTORS:
        return None
    return factor


def _canonical_order(counts: Dict[str, Any]) -> List[str]:
    ordered = [b for b in cd.BOROUGH_ORDER if b in counts]
    return ordered + [b for b in counts if b not in cd.BOROUGH_ORDER]


def borough_counts(data: Any) -> Dict[str, List[Any]]:
    """Collisions per borough for the bar and pie charts.

    The five boroughs come first in their usual order, then any other borough
    values in the order they were first seen.
    """
    rows = as_rows(data)
    counts = _tally(cd.get_borough(r) for r in rows)
    logger.debug("borough_counts: %d of %d rows resolved", sum(counts.values()), len(rows))
    return _series((b, counts[b]) for b in _canonical_order(counts))


def borough_hotspot_ranking(data: Any) -> Dict[str, List[Any]]:
    """Borough counts ranked from most to fewest collisions."""
    counts = _tally(cd.get_borough(r) for r in as_rows(data))
    return _series(_top(counts, len(counts)))


def top_contributing_factors(data: Any, top_n: int = TOP_N) -> Dict[str, List[Any]]:
    """Top contributing factors for a horizontal bar chart.

    "Unspecified" and "Unknown" are dropped. The top `top_n` are returned in
    ascending order so the largest bar is plotted last (at the top).
    """
    counts = _tally(_factor(r) for r in as_rows(data))
    top = _top(counts, top_n)
    top.reverse()
    return _series(top)


def format_month_label(key: str) -> str:
    """``"2021-03"`` -> ``"March 2021"``."""
    year, _, month = key.partition("-")
    try:
        return f"{MONTH_NAMES[int(month) - 1]} {year}"
    except (ValueError, IndexError):
        return key


def monthly_trend(data: Any) -> Dict[str, List[Any]]:
    """Collisions per ``YYYY-MM``, oldest month first."""
    counts = _tally(month_key(r) for r in as_rows(data))
    keys = sorted(counts)
    series = _series((k, counts[k]) for k in keys)
    series["display_labels"] = [format_month_label(k) for k in keys]
    return series


def hourly_trend(data: Any) -> Dict[str, List[int]]:
    """Collisions per hour of day; always 24 values, zero-filled."""
    values = [0] * 24
    for row in as_rows(data):
        hour = parse_crash_hour(cd.get_value(row, "crash_time"))
        if hour is not None:
            values[hour] += 1
    return {"labels": list(HOURS), "values": values}


def vehicle_type_distribution(data: Any, top_n: int = TOP_N) -> Dict[str, List[Any]]:
    """The `top_n` most frequent primary vehicle types, most frequent first."""
    counts = _tally(cd.get_label(r, "vehicle_type") for r in as_rows(data))
    return _series(_top(counts, top_n))


def injury_severity_distribution(data: Any) -> Dict[str, List[Any]]:
    counts = _tally(cd.get_label(r, "injury_severity") for r in as_rows(data))
    return _series(_top(counts, len(counts)))


def hour_day_heatmap(data: Any) -> Dict[str, List[Any]]:
    """Collisions by day of week (rows, Monday first) and hour (columns).

    The matrix is always 7 x 24. A row counts only when both its date and its
    time resolve.
    """
    matrix = [[0] * 24 for _ in DAYS_OF_WEEK]
    for row in as_rows(data):
        day = parse_crash_date(cd.get_value(row, "crash_date"))
        hour = parse_crash_hour(cd.get_value(row, "crash_time"))
        if day is None or hour is None:
            continue
        # weekday() is already Monday=0
        matrix[day.weekday()][hour] += 1
    return {"row_labels": list(DAYS_OF_WEEK), "col_labels": list(HOURS), "matrix": matrix}


def vehicle_factor_heatmap(data: Any, top_n: int = TOP_N) -> Dict[str, List[Any]]:
    """Co-occurrence of primary vehicle type (rows) and contributing factor (columns).

    The top vehicles and top factors are chosen independently from their own
    counts; a cell is zero when the pair never occurs together.
    """
    vehicles: Dict[str, int] = {}
    factors: Dict[str, int] = {}
    pairs: Dict[Tuple[str, str], int] = {}
    for row in as_rows(data):
        vehicle = cd.get_label(row, "vehicle_type")
        factor = _factor(row)
        if vehicle:
            vehicles[vehicle] = vehicles.get(vehicle, 0) + 1
        if factor:
            factors[factor] = factors.get(factor, 0) + 1
        if vehicle and factor:
            pairs[(vehicle, factor)] = pairs.get((vehicle, factor), 0) + 1

    top_vehicles = [v for v, _ in _top(vehicles, top_n)]
    top_factors = [f for f, _ in _top(factors, top_n)]
    matrix = [[pairs.get((v, f), 0) for f in top_factors] for v in top_vehicles]
    return {"row_labels": top_vehicles, "col_labels": top_factors, "matrix": matrix}


def monthly_borough_heatmap(data: Any) -> Dict[str, List[Any]]:
    """Collisions by borough (rows, alphabetical) and calendar month (columns)."""
    cells: Dict[str, List[int]] = {}
    for row in as_rows(data):
        borough = cd.get_borough(row)
        key = month_key(row)
        if not borough or key is None:
            continue
        cells.setdefault(borough, [0] * 12)[int(key[-2:]) - 1] += 1
    boroughs = sorted(cells)
    return {
        "row_labels": boroughs,
        "col_labels": list(MONTH_NAMES),
        "matrix": [cells[b] for b in boroughs],
    }


def borough_injury_fatality_bubbles(data: Any) -> Dict[str, List[Dict[str, Any]]]:
    """Injury and fatality totals per borough for the bubble chart.

    ``severity_score = injuries + fatalities * 5``. Boroughs with neither
    injuries nor fatalities are left out. Entries are sorted by severity,
    highest first, and carry a bubble ``size`` scaled from
    ``injuries + fatalities``.
    """
    totals: Dict[str, List[int]] = {}
    for row in as_rows(data):
        borough = cd.get_borough(row)
        if not borough:
            continue
        injured, killed = cd.get_counts(row)
        entry = totals.setdefault(borough, [0, 0])
        entry[0] += injured
        entry[1] += killed

    bubbles = []
    for borough in _canonical_order(totals):
        injuries, fatalities = totals[borough]
        if injuries == 0 and fatalities == 0:
            continue
        bubbles.append({
            "borough": borough,
            "injuries": injuries,
            "fatalities": fatalities,
            "severity_score": injuries + fatalities * BUBBLE_FATALITY_WEIGHT,
        })
    bubbles.sort(key=lambda b: b["severity_score"], reverse=True)

    sizes = geo.scale_marker_sizes([b["injuries"] + b["fatalities"] for b in bubbles], 10, 50, 10)
    for bubble, size in zip(bubbles, sizes):
        bubble["size"] = size
    return {"boroughs": bubbles}


# Chart name -> builder, used by the web app and the CLI.
CHARTS: Dict[str, Callable[[Any], Dict[str, Any]]] = {
    "borough_counts": borough_counts,
    "borough_hotspot_ranking": borough_hotspot_ranking,
    "top_contributing_factors": top_contributing_factors,
    "monthly_trend": monthly_trend,
    "hourly_trend": hourly_trend,
    "vehicle_type_distribution": vehicle_type_distribution,
    "injury_severity_distribution": injury_severity_distribution,
    "hour_day_heatmap": hour_day_heatmap,
    "vehicle_factor_heatmap": vehicle_factor_heatmap,
    "monthly_borough_heatmap": monthly_borough_heatmap,
    "borough_injury_fatality_bubbles": borough_injury_fatality_bubbles,
    "collision_hotspots": geo.collision_hotspots,
    "crash_density": geo.crash_density,
    "injury_fatality_map": geo.injury_fatality_map,
}


__all__ = [
    "DAYS_OF_WEEK",
    "CHARTS",
    "borough_counts",
    "borough_hotspot_ranking",
    "top_contributing_factors",
    "format_month_label",
    "monthly_trend",
    "hourly_trend",
    "vehicle_type_distribution",
    "injury_severity_distribution",
    "hour_day_heatmap",
    "vehicle_factor_heatmap",
    "monthly_borough_heatmap",
    "borough_injury_fatality_bubbles",
]
