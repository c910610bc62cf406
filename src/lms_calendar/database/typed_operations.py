"""
Typed operations wrapper for calendar event retrieval.

This module provides a class-based API over the raw operations functions,
holding the database session and returning Pydantic schemas instead of ORM
instances.
"""

from typing import Any, Optional, Sequence

from sqlalchemy.orm import Session

from . import operations as ops
from .pydantic_schemas import EventSchema, ModuleSchema


class EventRetrievalOperations:
    """
    Typed operations for calendar event retrieval.

    Example usage:
        ops = EventRetrievalOperations(session)

        # Events of course 5 and of every group
        events = ops.get_raw_events(courses=[5], groups=True)

        # Events of user 12 in January 2024
        events = ops.get_events_in_window(
            1704067200,
            1706745599,
            users=12,
        )
    """

    def __init__(self, session: Session):
        """
        Initialize with a SQLAlchemy session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    # ========================================================================
    # EVENT RETRIEVAL
    # ========================================================================

    def get_raw_events(
        self,
        *,
        users: Any = None,
        groups: Any = None,
        courses: Any = None,
        categories: Any = None,
        extra_conditions: Optional[Sequence[str]] = None,
        extra_params: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        ignore_hidden: bool = True,
    ) -> list[EventSchema]:
        """
        Get the events visible through the given dimension filters.

        Args:
            users: None/False, True, a user id or a collection of user ids
            groups: None/False, True, a group id or a collection of group ids
            courses: None/False, True, a course id or a collection of course ids
            categories: None/False, True, a category id or a collection of ids
            extra_conditions: SQL conditions on alias "e", ANDed to the query
            extra_params: Values bound into extra_conditions
            order_by: ORDER BY clause (default: e.timestart ascending)
            offset: Number of events to skip
            limit: Maximum number of events (0 or None for all)
            ignore_hidden: Only return visible events (default: True)

        Returns:
            List of event schemas

        Raises:
            InvalidFilterSpecError: If a filter value is malformed
            EventQueryError: If the datastore fails to run the query
        """
        result = ops.get_raw_events(
            self.session,
            users=users,
            groups=groups,
            courses=courses,
            categories=categories,
            extra_conditions=extra_conditions,
            extra_params=extra_params,
            order_by=order_by,
            offset=offset,
            limit=limit,
            ignore_hidden=ignore_hidden,
        )
        return [EventSchema.model_validate(event) for event in result]

    def get_events_in_window(
        self,
        time_start: Optional[int] = None,
        time_end: Optional[int] = None,
        *,
        with_duration: bool = True,
        users: Any = None,
        groups: Any = None,
        courses: Any = None,
        categories: Any = None,
        order_by: Optional[str] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        ignore_hidden: bool = True,
    ) -> list[EventSchema]:
        """
        Get the events falling in a time window.

        Args:
            time_start: Window start (unix timestamp), open if None
            time_end: Window end (unix timestamp), open if None
            with_duration: Include events still running at time_start

        Returns:
            List of event schemas
        """
        result = ops.get_events_in_window(
            self.session,
            time_start,
            time_end,
            with_duration=with_duration,
            users=users,
            groups=groups,
            courses=courses,
            categories=categories,
            order_by=order_by,
            offset=offset,
            limit=limit,
            ignore_hidden=ignore_hidden,
        )
        return [EventSchema.model_validate(event) for event in result]

    # ========================================================================
    # SEEDING
    # ========================================================================

    def create_event(self, **fields: Any) -> EventSchema:
        """Insert an event and return it."""
        return EventSchema.model_validate(ops.create_event(self.session, **fields))

    def set_module_visibility(self, name: str, visible: bool) -> ModuleSchema:
        """Create or update a module visibility entry."""
        return ModuleSchema.model_validate(
            ops.set_module_visibility(self.session, name, visible)
        )
