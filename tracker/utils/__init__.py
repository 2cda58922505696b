"""Shared utilities."""

from .timestamps import ensure_utc, format_timestamp, parse_timestamp, start_of_day, utc_now

__all__ = [
    "utc_now",
    "ensure_utc",
    "start_of_day",
    "format_timestamp",
    "parse_timestamp",
]
