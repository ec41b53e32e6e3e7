"""Free-text search parsing.

Turns a query such as ``"Brooklyn 2022 pedestrian crashes"`` into the
structured filter values the record filter understands. Each field is looked
up independently with keyword tables; a field that does not match is left
out of the result, which callers read as "no constraint".
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

# (keyword, canonical value); table order breaks ties, first match wins.
BOROUGH_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("manhattan", "MANHATTAN"),
    ("brooklyn", "BROOKLYN"),
    ("bklyn", "BROOKLYN"),
    ("queens", "QUEENS"),
    ("bronx", "BRONX"),
    ("staten island", "STATEN ISLAND"),
    ("staten", "STATEN ISLAND"),
)

YEAR_PATTERN = re.compile(r"\b(19\d{2}|20[0-2]\d)\b")

# Longer, more specific terms come before the terms they contain
# ("motorbike" before "bike", "e-bike" before "bike").
VEHICLE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("motorcycle", "MOTORCYCLE"),
    ("motorbike", "MOTORCYCLE"),
    ("e-bike", "E-BIKE"),
    ("ebike", "E-BIKE"),
    ("scooter", "E-SCOOTER"),
    ("moped", "MOPED"),
    ("bicycle", "BICYCLE"),
    ("bike", "BICYCLE"),
    ("cyclist", "BICYCLE"),
    ("taxi", "TAXI"),
    ("cab", "TAXI"),
    ("ambulance", "AMBULANCE"),
    ("bus", "BUS"),
    ("truck", "TRUCK"),
    ("suv", "STATION WAGON/SPORT UTILITY VEHICLE"),
    ("sedan", "SEDAN"),
    ("car", "PASSENGER VEHICLE"),
)

FACTOR_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("distract", "Driver Inattention/Distraction"),
    ("inattention", "Driver Inattention/Distraction"),
    ("cell phone", "Cell Phone (hand-Held)"),
    ("texting", "Cell Phone (hand-Held)"),
    ("alcohol", "Alcohol Involvement"),
    ("drunk", "Alcohol Involvement"),
    ("speed", "Unsafe Speed"),
    ("yield", "Failure to Yield Right-of-Way"),
    ("tailgat", "Following Too Closely"),
    ("following too", "Following Too Closely"),
    ("slippery", "Pavement Slippery"),
    ("weather", "Pavement Slippery"),
    ("snow", "Pavement Slippery"),
    ("fatigue", "Fatigued/Drowsy"),
    ("drowsy", "Fatigued/Drowsy"),
    ("asleep", "Fell Asleep"),
    ("red light", "Traffic Control Disregarded"),
    ("traffic control", "Traffic Control Disregarded"),
    ("backing", "Backing Unsafely"),
    ("lane chang", "Passing or Lane Usage Improper"),
    ("lane usage", "Passing or Lane Usage Improper"),
    ("improper lane", "Passing or Lane Usage Improper"),
    ("inexperience", "Driver Inexperience"),
    ("road rage", "Aggressive Driving/Road Rage"),
    ("aggressive", "Aggressive Driving/Road Rage"),
    ("obstructed", "View Obstructed/Limited"),
)

# Short keywords that also occur inside ordinary words ("carroll", "business")
# only match as whole words, plurals included.
WHOLE_WORD_KEYWORDS = frozenset({"car", "cab", "bus"})

# Checked in priority order: fatal terms, then injury terms, then road users.
INJURY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("FATAL", ("fatal", "killed", "death", "deadly", "dead", "died")),
    ("INJURED", ("injur", "hurt", "wounded")),
    ("PEDESTRIAN", ("pedestrian", "walker", "walking")),
    ("CYCLIST", ("bicyclist", "cyclist")),
    ("MOTORIST", ("motorist",)),
)

INJURY_TYPES: Tuple[str, ...] = tuple(value for value, _ in INJURY_KEYWORDS)


def _contains(query: str, keyword: str) -> bool:
    if keyword in WHOLE_WORD_KEYWORDS:
        return re.search(rf"\b{keyword}(?:s|es)?\b", query) is not None
    return keyword in query


def _find(query: str, table: Tuple[Tuple[str, str], ...]) -> Optional[str]:
    for keyword, value in table:
        if _contains(query, keyword):
            return value
    return None


def _find_injury(query: str) -> Optional[str]:
    for value, terms in INJURY_KEYWORDS:
        if any(term in query for term in terms):
            return value
    return None


def parse_search_query(text: Optional[str]) -> Dict[str, str]:
    """Extract structured filters from a free-text search string.

    Returns a dict holding only the fields that matched, out of ``borough``,
    ``year``, ``vehicle_type``, ``contributing_factor`` and ``injury_type``.
    Empty or unrecognised text gives ``{}``.
    """
    if text is None:
        return {}
    if not isinstance(text, str):
        raise TypeError(f"search text must be a string, got {type(text).__name__}")

    query = text.strip().lower()
    if not query:
        return {}

    found: Dict[str, Optional[str]] = {
        "borough": _find(query, BOROUGH_KEYWORDS),
        "year": None,
        "vehicle_type": _find(query, VEHICLE_KEYWORDS),
        "contributing_factor": _find(query, FACTOR_KEYWORDS),
        "injury_type": _find_injury(query),
    }
    match = YEAR_PATTERN.search(query)
    if match:
        found["year"] = match.group(1)
    return {k: v for k, v in found.items() if v is not None}


def as_filter_params(parsed: Dict[str, str]) -> Dict[str, str]:
    """Map a parsed query onto the keyword arguments of ``filter_records``."""
    names = {
        "borough": "borough",
        "year": "year",
        "vehicle_type": "vehicle",
        "contributing_factor": "factor",
        "injury_type": "injury",
    }
    return {names[k]: v for k, v in parsed.items() if k in names}


__all__ = [
    "BOROUGH_KEYWORDS",
    "VEHICLE_KEYWORDS",
    "FACTOR_KEYWORDS",
    "INJURY_KEYWORDS",
    "INJURY_TYPES",
    "parse_search_query",
    "as_filter_params",
]
