"""
Timestamp normalization.

Chat platforms deliver timestamps either as unix seconds or unix
milliseconds, as numbers or numeric strings. Magnitude decides:
anything below SECONDS_MS_THRESHOLD (year 2001 expressed in ms) is
treated as seconds.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from .constants import SECONDS_MS_THRESHOLD
from .domain_types import Timestamp

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_timestamp(value: Timestamp) -> Optional[int]:
    """
    Integer value of a raw timestamp, or None when unparseable.
    Strings are read up to the first non-digit ("1700000000.5" -> 1700000000).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def normalize_timestamp_ms(value: Timestamp) -> Optional[int]:
    """Timestamp in milliseconds, or None when unparseable."""
    num = parse_timestamp(value)
    if num is None:
        return None
    if num < SECONDS_MS_THRESHOLD:
        return num * 1000
    return num
