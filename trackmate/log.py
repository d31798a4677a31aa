"""Logging setup shared by the API server and the CLI"""

import logging
import sys

LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s %(message)s'


def configure_logging(level: str = 'INFO') -> None:
    """Install a single stream handler on the root logger"""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
