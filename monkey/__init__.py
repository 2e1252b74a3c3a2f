"""Monkey — a small dynamically-typed, C-like expression language."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
