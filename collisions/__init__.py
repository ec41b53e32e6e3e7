"""NYC collisions package

Chart aggregations, free-text search parsing and the thin loading/serving
layers around them.
"""

from . import crashes_dictionaries, datapull, geo, search, statistics
from .search import parse_search_query

__all__ = ["crashes_dictionaries", "datapull", "geo", "search", "statistics", "parse_search_query"]
