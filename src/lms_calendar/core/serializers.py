# Response serializers for the calendar event service
# Converts ORM events to JSON responses

from typing import Any, Optional

from ..database.schema import Event
from ..database.pydantic_schemas import EventSchema


def serialize_event(event: Event) -> dict[str, Any]:
    """Serialize an Event to a JSON-compatible dict."""
    data = EventSchema.model_validate(event).model_dump(mode="json")
    data["kind"] = "calendar#event"
    return data


def serialize_events_list(
    events: list[Event],
    offset: int = 0,
    limit: Optional[int] = None,
) -> dict[str, Any]:
    """
    Serialize a list of Events.

    Response format:
    {
        "kind": "calendar#events",
        "offset": 0,
        "limit": 50,
        "items": [...]
    }
    """
    result: dict[str, Any] = {
        "kind": "calendar#events",
        "offset": offset,
        "items": [serialize_event(e) for e in events],
    }
    if limit:
        result["limit"] = limit
    return result
