# Core helpers for the LMS calendar: errors, utils, serializers
from .errors import (
    CalendarAPIError,
    ValidationError,
    InvalidFilterSpecError,
    InvalidParameterError,
    EventQueryError,
    InternalError,
    handle_exception,
)
from .utils import (
    to_timestamp,
    parse_timestamp,
    build_time_window_conditions,
    parse_id_filter,
)
from .serializers import serialize_event, serialize_events_list
