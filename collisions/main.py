"""Command-line entry point: load the collisions CSV, filter it and print chart series.

Usage example:
    nyc-collisions data/sample_collisions.csv --search "brooklyn 2022 pedestrian" --chart borough_counts

Without ``--chart`` every chart is printed. Output is JSON on stdout.
"""

import argparse
import json
import logging
import sys

from .datapull import filter_records, read_accidents_csv
from .search import as_filter_params, parse_search_query
from .statistics import CHARTS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aggregate NYC collision records into chart series")
    parser.add_argument("file", help="Path to the collisions CSV file")
    parser.add_argument("--search", "-q", help="Free-text search, e.g. 'Queens taxi accidents 2021'")
    parser.add_argument("--borough", help="Borough filter (e.g. BROOKLYN)")
    parser.add_argument("--year", help="Crash year filter")
    parser.add_argument("--vehicle", help="Vehicle type filter (substring)")
    parser.add_argument("--factor", help="Contributing factor filter (substring)")
    parser.add_argument("--injury", help="Injury type filter (FATAL, INJURED, PEDESTRIAN, CYCLIST, MOTORIST)")
    parser.add_argument("--chart", "-c", action="append", choices=sorted(CHARTS),
                        help="Chart to compute; may be repeated (default: all)")
    parser.add_argument("--nrows", type=int, help="Read only the first N rows of the CSV")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, stream=sys.stderr)

    try:
        rows = read_accidents_csv(args.file, nrows=args.nrows)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1

    params = {k: getattr(args, k) for k in ("borough", "year", "vehicle", "factor", "injury")}
    parsed = {}
    if args.search:
        parsed = parse_search_query(args.search)
        logger.info("Search %r parsed as %s", args.search, parsed)
        # explicit options win over values parsed from the search text
        for key, value in as_filter_params(parsed).items():
            if not params.get(key):
                params[key] = value

    filtered = filter_records(rows, **params)
    logger.info("%d of %d records match", len(filtered), len(rows))

    charts = args.chart or sorted(CHARTS)
    output = {
        "query": parsed,
        "records": len(filtered),
        "charts": {name: CHARTS[name](filtered) for name in charts},
    }
    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
