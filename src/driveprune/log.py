from __future__ import annotations

import logging
import sys

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup(level=logging.INFO, stream=None):
    """Send all records to stderr; stdout is left to the authorization prompt."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    if level > logging.DEBUG:
        logging.getLogger("googleapiclient").setLevel(logging.WARNING)
