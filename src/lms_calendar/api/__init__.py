# HTTP endpoints for calendar events
from .methods import (
    routes,
    event_routes,
    events_list,
    health_check,
    api_handler,
    get_query_params,
    parse_int_param,
    ORDER_BY_CLAUSES,
)
from .main import create_app
