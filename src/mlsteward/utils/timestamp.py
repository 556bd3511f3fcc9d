"""Timestamp normalization utilities.

The MLflow REST API expresses every timestamp (run start/end, metric
timestamps) as UNIX milliseconds. These helpers turn what callers commonly
hold into that form and raise ValueError for anything else.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Return the current time as UNIX milliseconds."""
    return int(time.time() * 1000)


def _parse_iso(text: str) -> datetime:
    text = text.strip()
    if not text:
        raise ValueError("Timestamp string cannot be empty")

    # fromisoformat only learned the 'Z' suffix in 3.11
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"

    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp format: {text!r}. Expected ISO 8601 string or UNIX milliseconds.") from exc


def parse_to_ms(ts_value: str | int | float | datetime) -> int:
    """Normalize a timestamp to UNIX milliseconds.

    Args:
        ts_value: One of
            - int/float: already UNIX milliseconds, truncated to int
            - datetime: naive values are taken as UTC
            - str: ISO 8601, with or without offset

    Returns:
        int: UNIX timestamp in milliseconds.

    Raises:
        ValueError: If input is None, a bool, an empty string, or cannot be parsed.
    """
    if ts_value is None:
        raise ValueError("Timestamp cannot be None")
    if isinstance(ts_value, bool):
        raise ValueError("Timestamp cannot be a boolean")
    if isinstance(ts_value, (int, float)):
        return int(ts_value)

    if isinstance(ts_value, datetime):
        moment = ts_value
    elif isinstance(ts_value, str):
        moment = _parse_iso(ts_value)
    else:
        raise ValueError(f"Unsupported timestamp type: {type(ts_value).__name__}. Expected datetime, int, float, or ISO 8601 string.")

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)
