# Database layer for the LMS calendar
from .base import Base
from .schema import (
    Event,
    EventScope,
    Module,
    NO_MODULE,
    USER_OVERRIDE_PRIORITY,
)
from .filters import (
    DIMENSIONS,
    EventFilterPredicates,
    FilterMode,
    FilterSpec,
    build_dimension_predicates,
    build_filter_predicates,
)
from .operations import (
    build_raw_events_query,
    create_event,
    get_events_in_window,
    get_raw_events,
    set_module_visibility,
)
from .pydantic_schemas import EventSchema, ModuleSchema
from .typed_operations import EventRetrievalOperations
from .session import SessionManager
from .db import create_engine_from_env
