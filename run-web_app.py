#!/usr/bin/env python3
"""Entry point to run the Flask JSON service.

Usage:
    python3 run-web_app.py [path/to/collisions.csv]
"""

import logging
import sys

from collisions.web_app import app, load_initial_data

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    load_initial_data(sys.argv[1] if len(sys.argv) > 1 else None)
    print("Open your browser to: http://localhost:5001/filters")
    app.run(debug=True, host="0.0.0.0", port=5001)
