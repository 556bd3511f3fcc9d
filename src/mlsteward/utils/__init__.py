"""Utility helpers for mlsteward."""

from mlsteward.utils.timestamp import now_ms, parse_to_ms

__all__ = ["now_ms", "parse_to_ms"]
