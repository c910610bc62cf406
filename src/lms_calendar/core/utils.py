# Utility functions for the calendar event service
# Timestamp parsing, time window conditions, filter parameter parsing

from datetime import datetime, timezone
from typing import Any, Optional, Union
from dateutil import parser as date_parser

from .errors import InvalidParameterError


# ============================================================================
# TIMESTAMPS
# ============================================================================


def to_timestamp(dt: datetime) -> int:
    """Convert a datetime to a unix timestamp, treating naive values as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def parse_timestamp(value: Union[str, int, datetime], name: str = "timestamp") -> int:
    """
    Parse a timestamp given as epoch seconds or as an RFC3339 string.

    Raises:
        InvalidParameterError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise InvalidParameterError(name, f"{name} must be a timestamp")
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        return to_timestamp(value)

    raw = str(value).strip()
    if raw.lstrip("-").isdigit():
        return int(raw)
    try:
        return to_timestamp(date_parser.isoparse(raw))
    except (ValueError, OverflowError):
        raise InvalidParameterError(
            name, f"{name} must be epoch seconds or an RFC3339 timestamp"
        )


# ============================================================================
# TIME WINDOW
# ============================================================================


def build_time_window_conditions(
    time_start: Optional[int] = None,
    time_end: Optional[int] = None,
    with_duration: bool = True,
) -> tuple[list[str], dict[str, Any]]:
    """
    Build extra WHERE conditions limiting events to a time window.

    With with_duration, an event that started before time_start but is
    still running at time_start is included.

    Returns: (conditions, params) to pass as extra conditions of the raw
    event query. Conditions refer to the outer event alias "e".
    """
    conditions: list[str] = []
    params: dict[str, Any] = {}

    if time_start is not None:
        if with_duration:
            conditions.append(
                "(e.timestart >= :window_start"
                " OR e.timestart + e.timeduration > :window_start)"
            )
        else:
            conditions.append("e.timestart >= :window_start")
        params["window_start"] = time_start

    if time_end is not None:
        conditions.append("e.timestart <= :window_end")
        params["window_end"] = time_end

    return conditions, params


# ============================================================================
# FILTER PARAMETERS
# ============================================================================


def parse_id_filter(raw: Optional[str], name: str) -> Union[None, bool, list[int]]:
    """
    Parse a dimension filter query parameter.

    - missing, "" or "none": no events from the dimension
    - "all": events from every entity of the dimension
    - "1,2,3": events from those ids

    Raises:
        InvalidParameterError: If an id is not an integer
    """
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in ("", "none"):
        return None
    if value == "all":
        return True

    ids: list[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise InvalidParameterError(
                name, f"{name} must be 'all', 'none' or a comma-separated list of ids"
            )
    return ids or None
