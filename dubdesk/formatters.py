"""Pure formatting helpers for timestamps and sizes."""

import logging
import math
from typing import Any

logger = logging.getLogger("dubdesk")

EMPTY_TIMESTAMP = "00:00.000"

_BYTE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``mm:ss.mmm``. Minutes are not folded into hours.

    Sub-millisecond precision is truncated, not rounded.
    """
    if seconds is None or seconds < 0 or math.isnan(seconds):
        return EMPTY_TIMESTAMP
    # Epsilon keeps 1.005 from flooring to 1004 ms
    total_ms = math.floor(seconds * 1000 + 1e-6)
    minutes, rem_ms = divmod(total_ms, 60_000)
    secs, ms = divmod(rem_ms, 1000)
    return f"{minutes:02d}:{secs:02d}.{ms:03d}"


def format_bytes(size: float, decimals: int = 2) -> str:
    """Human readable byte size using a 1024 base."""
    if size <= 0:
        return "0 Bytes"
    decimals = max(decimals, 0)
    index = 0
    while size >= 1024 ** (index + 1) and index < len(_BYTE_UNITS) - 1:
        index += 1
    value = round(size / (1024 ** index), decimals)
    # Drop trailing zeros the way parseFloat(x.toFixed(n)) would
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".") if decimals else f"{value:.0f}"
    return f"{text} {_BYTE_UNITS[index]}"


def parse_timestamp(text: str | None) -> float:
    """Parse ``mm:ss.mmm``, ``hh:mm:ss.mmm`` or ``hh:mm:ss:mmm`` into seconds.

    Anything unparseable yields 0.0 and a warning.
    """
    if not text or not isinstance(text, str):
        return 0.0

    parts = text.strip().split(":")
    try:
        if len(parts) == 4:
            hours, minutes, secs, millis = (float(p) for p in parts)
            return hours * 3600 + minutes * 60 + secs + millis / 1000
        if len(parts) == 3:
            hours, minutes = float(parts[0]), float(parts[1])
            return hours * 3600 + minutes * 60 + float(parts[2])
        if len(parts) == 2:
            return float(parts[0]) * 60 + float(parts[1])
        if len(parts) == 1:
            return float(parts[0])
    except ValueError:
        pass

    logger.warning("Invalid time format: %r", text)
    return 0.0


def normalize_time(value: Any) -> str:
    """Normalize a stage-dependent time value to the display form.

    Numeric seconds are formatted; strings are re-formatted after parsing;
    empty values render as ``00:00.000``.
    """
    if value is None or value == "":
        return EMPTY_TIMESTAMP
    value = get_number_value(value) if isinstance(value, dict) else value
    if isinstance(value, (int, float)):
        return format_timestamp(float(value))
    return format_timestamp(parse_timestamp(str(value)))


def calculate_duration(time_start: Any, time_end: Any) -> float:
    """Seconds between two time values, rounded to milliseconds."""
    start = parse_timestamp(normalize_time(time_start))
    end = parse_timestamp(normalize_time(time_end))
    return round(end - start, 3)


def get_number_value(value: Any) -> float:
    """Unwrap Mongo extended-JSON numbers (``$numberInt``/``$numberDouble``)."""
    if isinstance(value, dict):
        if "$numberInt" in value:
            return float(value["$numberInt"])
        if "$numberDouble" in value:
            return float(value["$numberDouble"])
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
