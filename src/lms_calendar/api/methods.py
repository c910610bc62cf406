"""
Calendar event endpoint handlers.

Uses Starlette for HTTP handling with SQLAlchemy for database operations.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Awaitable, Optional
from functools import wraps

logger = logging.getLogger(__name__)

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette import status

from sqlalchemy.orm import Session

from ..database import DIMENSIONS, get_events_in_window
from ..core import (
    CalendarAPIError,
    InvalidParameterError,
    handle_exception,
    parse_id_filter,
    parse_timestamp,
    serialize_events_list,
)


DEFAULT_LIMIT = 50
MAX_LIMIT = 1000

# orderBy values accepted over HTTP, mapped to ORDER BY clauses on alias "e"
ORDER_BY_CLAUSES = {
    "timestart": "e.timestart ASC, e.id ASC",
    "-timestart": "e.timestart DESC, e.id DESC",
    "timesort": "e.timesort ASC, e.id ASC",
    "-timesort": "e.timesort DESC, e.id DESC",
    "name": "e.name ASC, e.id ASC",
}


# ============================================================================
# REQUEST UTILITIES
# ============================================================================


def get_query_params(request: Request) -> dict[str, str]:
    """Get all query parameters as a dictionary."""
    return dict(request.query_params)


def parse_int_param(
    params: dict[str, str],
    name: str,
    default: int,
    max_value: Optional[int] = None,
    min_value: int = 0,
) -> int:
    """
    Parse an integer query parameter of at least min_value.

    Args:
        params: Query parameters dict
        name: Parameter name (e.g., "limit")
        default: Default value if parameter not provided
        max_value: Maximum allowed value (clamps result)
        min_value: Minimum allowed value

    Raises:
        InvalidParameterError: If value is not an integer or is below min_value
    """
    raw_value = params.get(name)
    if raw_value is None:
        value = default
    else:
        try:
            value = int(raw_value)
        except (ValueError, TypeError):
            raise InvalidParameterError(name, f"{name} must be a valid integer")

    if value < min_value:
        raise InvalidParameterError(name, f"{name} must be at least {min_value}")
    if max_value is not None:
        value = min(value, max_value)
    return value


def parse_optional_timestamp(params: dict[str, str], name: str) -> Optional[int]:
    raw_value = params.get(name)
    if raw_value is None or raw_value.strip() == "":
        return None
    return parse_timestamp(raw_value, name)


# ============================================================================
# ERROR HANDLING WRAPPER
# ============================================================================


def api_handler(
    handler: Callable[[Request], Awaitable[JSONResponse]]
) -> Callable[[Request], Awaitable[JSONResponse]]:
    """
    Decorator that wraps API handlers with database session access and
    conversion of errors to JSON responses.

    The DatabaseSessionMiddleware provides request.state.db_session.
    """
    @wraps(handler)
    async def wrapper(request: Request) -> JSONResponse:
        session = getattr(request.state, "db_session", None)
        if session is None:
            return JSONResponse(
                {
                    "error": {
                        "code": 500,
                        "message": "Missing database session",
                        "errors": [
                            {
                                "domain": "global",
                                "reason": "backendError",
                                "message": "Database session not available",
                            }
                        ],
                    }
                },
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        try:
            request.state.db = session
            return await handler(request)
        except CalendarAPIError as e:
            return handle_exception(e)
        except Exception as e:
            logger.exception("Unhandled exception in %s", handler.__name__)
            return handle_exception(e)

    return wrapper


# ============================================================================
# EVENT HANDLERS
# ============================================================================


@api_handler
async def events_list(request: Request) -> JSONResponse:
    """
    GET /events

    Returns the raw events visible through the dimension filters.

    Query Parameters:
    - users, groups, courses, categories: "all", "none" or comma-separated ids
    - timeStart: Window start (epoch seconds or RFC3339)
    - timeEnd: Window end (epoch seconds or RFC3339)
    - orderBy: timestart, -timestart, timesort, -timesort or name
    - offset: Number of events to skip (default 0)
    - limit: Maximum events returned (default 50, max 1000)
    - showHidden: Include hidden events (default false)
    """
    session: Session = request.state.db
    params = get_query_params(request)

    filters: dict[str, Any] = {
        dimension: parse_id_filter(params.get(dimension), dimension)
        for dimension in DIMENSIONS
    }

    order_by = params.get("orderBy", "timestart")
    if order_by not in ORDER_BY_CLAUSES:
        raise InvalidParameterError(
            "orderBy",
            f"orderBy must be one of {', '.join(sorted(ORDER_BY_CLAUSES))}",
        )

    offset = parse_int_param(params, "offset", default=0)
    limit = parse_int_param(
        params, "limit", default=DEFAULT_LIMIT, max_value=MAX_LIMIT, min_value=1
    )
    time_start = parse_optional_timestamp(params, "timeStart")
    time_end = parse_optional_timestamp(params, "timeEnd")
    show_hidden = params.get("showHidden", "").lower() == "true"

    events = get_events_in_window(
        session,
        time_start,
        time_end,
        **filters,
        order_by=ORDER_BY_CLAUSES[order_by],
        offset=offset,
        limit=limit,
        ignore_hidden=not show_hidden,
    )
    logger.debug("Returning %d events", len(events))

    return JSONResponse(serialize_events_list(events, offset=offset, limit=limit))


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse(
        {
            "status": "healthy",
            "service": "lms-calendar",
            "time": datetime.now().isoformat(),
        }
    )


# ============================================================================
# ROUTES
# ============================================================================

event_routes = [
    Route("/events", events_list, methods=["GET"]),
]

routes = [
    Route("/health", health_check, methods=["GET"]),
] + event_routes
