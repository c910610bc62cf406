# Calendar error handling
# Exceptions raised by the event retrieval layer and their JSON rendering

import logging
from typing import Any, Optional
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


# ============================================================================
# ERROR REASONS
# ============================================================================

ERROR_INVALID = "invalid"
ERROR_INVALID_FILTER = "invalidFilter"
ERROR_INVALID_PARAMETER = "invalidParameter"
ERROR_BACKEND = "backendError"
ERROR_INTERNAL = "internalError"

# Domain
ERROR_DOMAIN_GLOBAL = "global"
ERROR_DOMAIN_CALENDAR = "calendar"


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================


class CalendarAPIError(Exception):
    """Base exception for calendar errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        reason: str = ERROR_INVALID,
        domain: str = ERROR_DOMAIN_CALENDAR,
        location: Optional[str] = None,
        location_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.reason = reason
        self.domain = domain
        self.location = location
        self.location_type = location_type

    def to_dict(self) -> dict[str, Any]:
        """Convert to an error response dict."""
        error_detail: dict[str, Any] = {
            "domain": self.domain,
            "reason": self.reason,
            "message": self.message,
        }
        if self.location:
            error_detail["location"] = self.location
        if self.location_type:
            error_detail["locationType"] = self.location_type

        return {
            "error": {
                "code": self.status_code,
                "message": self.message,
                "errors": [error_detail],
            }
        }

    def to_response(self) -> JSONResponse:
        """Convert to Starlette JSONResponse."""
        return JSONResponse(
            content=self.to_dict(),
            status_code=self.status_code,
        )


class ValidationError(CalendarAPIError):
    """Invalid request data (400)."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        reason: str = ERROR_INVALID,
    ):
        location = field
        location_type = "parameter" if field else None
        super().__init__(
            message=message,
            status_code=400,
            reason=reason,
            location=location,
            location_type=location_type,
        )


class InvalidFilterSpecError(ValidationError):
    """A dimension filter is neither a boolean, an id, nor a collection of ids."""

    def __init__(self, dimension: str, value: Any):
        self.dimension = dimension
        self.value = value
        super().__init__(
            message=(
                f"Invalid {dimension} filter: expected a boolean, an integer id "
                f"or a collection of integer ids, got {value!r}"
            ),
            field=dimension,
            reason=ERROR_INVALID_FILTER,
        )


class InvalidParameterError(ValidationError):
    """A query parameter has an invalid value."""

    def __init__(self, param_name: str, message: str):
        self.param_name = param_name
        super().__init__(
            message=message,
            field=param_name,
            reason=ERROR_INVALID_PARAMETER,
        )


class EventQueryError(CalendarAPIError):
    """The datastore failed to run the event query (500)."""

    def __init__(self, message: str = "Event query failed"):
        super().__init__(
            message=message,
            status_code=500,
            reason=ERROR_BACKEND,
            domain=ERROR_DOMAIN_GLOBAL,
        )


class InternalError(CalendarAPIError):
    """Internal server error (500)."""

    def __init__(self, message: str = "Internal error"):
        super().__init__(
            message=message,
            status_code=500,
            reason=ERROR_INTERNAL,
            domain=ERROR_DOMAIN_GLOBAL,
        )


# ============================================================================
# ERROR HANDLER
# ============================================================================


def handle_exception(exc: Exception) -> JSONResponse:
    """Convert an exception to a JSONResponse."""
    if isinstance(exc, CalendarAPIError):
        return exc.to_response()

    logger.error("Unexpected exception: %s", exc, exc_info=True)

    return InternalError().to_response()
