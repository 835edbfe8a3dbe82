# src/firehose/db/time.py
"""Time utilities for database models."""

import time
from collections.abc import Callable

Clock = Callable[[], int]

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


def now_epoch() -> int:
    """Return the current UTC time as whole epoch seconds."""
    return int(time.time())
