# Authors: Alexander John Balagso, Marc Aaron Africano

"""Flask JSON service for the collisions dashboard.

The front end fetches filtered rows from ``/data`` and ``/search`` and builds
its charts client side; ``/charts/<name>`` serves the same aggregations
server side for clients that prefer it.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from .datapull import MAX_RESULTS, filter_options, filter_records, read_accidents_csv
from .search import as_filter_params, parse_search_query
from .statistics import CHARTS

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_mapping(
    DATA_PATH=os.environ.get("NYC_COLLISIONS_CSV", "data/sample_collisions.csv"),
    MAX_RESULTS=int(os.environ.get("NYC_COLLISIONS_MAX_RESULTS", MAX_RESULTS)),
)

# Rows loaded at startup; read-only afterwards.
loaded_data: Optional[List[Dict[str, Any]]] = None

FILTER_PARAMS = ("borough", "year", "vehicle", "factor", "injury")


def load_initial_data(path: Optional[str] = None) -> None:
    """Load the CSV named by `path` (or ``DATA_PATH``) into ``loaded_data``."""
    global loaded_data
    path = path or app.config["DATA_PATH"]
    try:
        loaded_data = read_accidents_csv(path)
    except FileNotFoundError:
        logger.error("Data file %s not found; endpoints will answer 503", path)
        loaded_data = None


def _request_filters() -> Dict[str, str]:
    return {name: request.args[name] for name in FILTER_PARAMS if request.args.get(name)}


def _no_data():
    return jsonify({"error": "No data loaded"}), 503


@app.route("/data")
def data():
    """Rows matching the query-string filters, capped at ``MAX_RESULTS``."""
    if loaded_data is None:
        return _no_data()
    rows = filter_records(loaded_data, limit=app.config["MAX_RESULTS"], **_request_filters())
    return jsonify(rows)


@app.route("/search")
def search():
    """Rows matching the filters parsed from the free-text ``q`` parameter."""
    if loaded_data is None:
        return _no_data()
    parsed = parse_search_query(request.args.get("q", ""))
    logger.info("search %r parsed as %s", request.args.get("q", ""), parsed)
    rows = filter_records(loaded_data, limit=app.config["MAX_RESULTS"], **as_filter_params(parsed))
    return jsonify(rows)


@app.route("/parse")
def parse():
    return jsonify(parse_search_query(request.args.get("q", "")))


@app.route("/filters")
def filters():
    if loaded_data is None:
        return _no_data()
    return jsonify(filter_options(loaded_data))


@app.route("/charts/<name>")
def chart(name: str):
    """Aggregated series for chart `name` over the filtered rows."""
    builder = CHARTS.get(name)
    if builder is None:
        return jsonify({"error": f"Unknown chart: {name}", "charts": sorted(CHARTS)}), 404
    if loaded_data is None:
        return _no_data()
    rows = filter_records(loaded_data, **_request_filters())
    return jsonify(builder(rows))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    load_initial_data()
    app.run(debug=True, host="0.0.0.0", port=5001)
