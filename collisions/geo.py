# Authors: Alexander John Balagso, Marc Aaron Africano

"""Point series for the map charts.

Every function validates coordinates against one NYC bounding box, attaches a
per-point weight and caps the output with deterministic stride sampling, so
repeated calls on the same records return the same points.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import crashes_dictionaries as cd
from .datapull import as_rows

logger = logging.getLogger(__name__)

# lat in [40, 41], lon in [-75, -73]; the wider longitude bound keeps western Staten Island.
LAT_RANGE = (40.0, 41.0)
LON_RANGE = (-75.0, -73.0)

MAX_POINTS = 10000

# Per-chart fatality weights.
DENSITY_FATALITY_WEIGHT = 2
SEVERITY_FATALITY_WEIGHT = 10


def get_coordinates(row: Any) -> Optional[Tuple[float, float]]:
    """Return ``(lat, lon)`` when both resolve and fall inside NYC, else None."""
    lat = cd.to_float(cd.get_value(row, "latitude"))
    lon = cd.to_float(cd.get_value(row, "longitude"))
    if lat is None or lon is None:
        return None
    if not (LAT_RANGE[0] <= lat <= LAT_RANGE[1] and LON_RANGE[0] <= lon <= LON_RANGE[1]):
        return None
    return lat, lon


def stride_sample(items: Sequence[Any], cap: int = MAX_POINTS) -> List[Any]:
    """Keep every ``ceil(len/cap)``-th item starting at index 0, at most `cap` items."""
    items = list(items)
    if len(items) <= cap:
        return items
    step = math.ceil(len(items) / cap)
    return items[::step][:cap]


def scale_marker_sizes(
    weights: Sequence[float],
    min_size: float = 6,
    max_size: float = 14,
    fallback: float = 8,
) -> List[float]:
    """Map `weights` linearly from ``[min, max]`` onto ``[min_size, max_size]``.

    When every weight is equal the range is degenerate and each marker gets
    `fallback` instead.
    """
    if not weights:
        return []
    low, high = min(weights), max(weights)
    if high == low:
        return [fallback] * len(weights)
    span = high - low
    return [min_size + (w - low) / span * (max_size - min_size) for w in weights]


def collision_hotspots(data: Any, cap: int = MAX_POINTS) -> Dict[str, List[Dict[str, Any]]]:
    """Every valid collision location with a uniform weight of 1."""
    points = []
    for row in as_rows(data):
        coords = get_coordinates(row)
        if coords is None:
            continue
        points.append({"lat": coords[0], "lon": coords[1], "weight": 1})
    return {"points": stride_sample(points, cap)}


def crash_density(data: Any, cap: int = MAX_POINTS) -> Dict[str, List[Dict[str, Any]]]:
    """Collisions bucketed on a ~100m grid (coordinates rounded to 3 decimals).

    Each record adds ``max(injured + killed * 2, 1)`` to its bucket, so
    collisions without casualties still register.
    """
    buckets: Dict[Tuple[float, float], int] = {}
    for row in as_rows(data):
        coords = get_coordinates(row)
        if coords is None:
            continue
        injured, killed = cd.get_counts(row)
        key = (round(coords[0], 3), round(coords[1], 3))
        buckets[key] = buckets.get(key, 0) + max(injured + killed * DENSITY_FATALITY_WEIGHT, 1)

    points = [{"lat": lat, "lon": lon, "weight": w} for (lat, lon), w in buckets.items()]
    points = stride_sample(points, cap)
    for point, size in zip(points, scale_marker_sizes([p["weight"] for p in points], 6, 14, 8)):
        point["size"] = size
    logger.debug("crash_density: %d buckets", len(buckets))
    return {"points": points}


def injury_fatality_map(data: Any, cap: int = MAX_POINTS) -> Dict[str, List[Dict[str, Any]]]:
    """Locations of collisions with casualties, weighted ``injured + killed * 10``.

    Collisions without injuries or fatalities are left out of this series.
    """
    points = []
    for row in as_rows(data):
        coords = get_coordinates(row)
        if coords is None:
            continue
        injured, killed = cd.get_counts(row)
        weight = injured + killed * SEVERITY_FATALITY_WEIGHT
        if weight == 0:
            continue
        points.append({
            "lat": coords[0],
            "lon": coords[1],
            "weight": weight,
            "injured": injured,
            "killed": killed,
        })

    points = stride_sample(points, cap)
    for point, size in zip(points, scale_marker_sizes([p["weight"] for p in points], 5, 20, 12)):
        point["size"] = size
    return {"points": points}


__all__ = [
    "LAT_RANGE",
    "LON_RANGE",
    "MAX_POINTS",
    "get_coordinates",
    "stride_sample",
    "scale_marker_sizes",
    "collision_hotspots",
    "crash_density",
    "injury_fatality_map",
]
