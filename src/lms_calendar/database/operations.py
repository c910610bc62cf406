# Database operations for the LMS calendar
# Raw event retrieval and the seeding helpers used by fixtures

import logging
import re
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)
from sqlalchemy.orm import Session, aliased
from sqlalchemy import Select, TextClause, bindparam, select, and_, or_, func, text
from sqlalchemy.exc import SQLAlchemyError

from .schema import Event, Module
from .filters import DIMENSIONS, FilterSpec, build_filter_predicates
from ..core.utils import build_time_window_conditions
from ..core.errors import EventQueryError, ValidationError

# Same rule text() uses to find ":name" placeholders
_BIND_PARAM = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")


# ============================================================================
# RAW EVENT RETRIEVAL
# ============================================================================


def _check_pagination(offset: Optional[int], limit: Optional[int]) -> None:
    if offset is not None and offset < 0:
        raise ValidationError("offset must not be negative", field="offset")
    if limit is not None and limit < 0:
        raise ValidationError("limit must not be negative", field="limit")


def _bound_condition(condition: str, params: dict[str, Any]) -> TextClause:
    """
    Wrap a raw SQL condition, binding the values it names from params.

    Values are attached to the clause itself so they never reach the
    parameters generated for the dimension filters. Lists, tuples and sets are
    bound as expanding parameters, for use with IN.
    """
    binds = []
    for name in dict.fromkeys(_BIND_PARAM.findall(condition)):
        if name not in params:
            continue
        value = params[name]
        binds.append(
            bindparam(name, list(value), expanding=True)
            if isinstance(value, (list, tuple, set, frozenset))
            else bindparam(name, value)
        )
    return text(condition).bindparams(*binds)


def build_raw_events_query(
    users: FilterSpec,
    groups: FilterSpec,
    courses: FilterSpec,
    categories: FilterSpec,
    extra_conditions: Optional[Sequence[str]] = None,
    order_by: Optional[str] = None,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
    ignore_hidden: bool = True,
    extra_params: Optional[dict[str, Any]] = None,
) -> Optional[Select]:
    """
    Build the raw event query.

    Among events sharing (modulename, instance, eventtype) only those with
    the lowest priority are selected: a subquery computes MIN(priority) per
    triple and the events are joined back on it. Events of modules marked
    invisible are dropped; events of unknown modules are kept.

    Extra conditions are raw SQL fragments and must refer to the outer event
    alias "e". Their ":name" placeholders are bound from extra_params; other
    entries of extra_params are ignored.

    Returns None when the filters select nothing, in which case the query
    must not be executed.

    Raises:
        ValidationError: If offset or limit is negative
    """
    _check_pagination(offset, limit)

    e = aliased(Event, name="e")
    ev = aliased(Event, name="ev")
    m = aliased(Module, name="m")

    predicates = build_filter_predicates(e, ev, users, groups, courses, categories)
    if predicates is None:
        return None

    sub_conditions = [or_(*predicates.inner)]
    if ignore_hidden:
        sub_conditions.append(ev.visible == 1)

    fe = (
        select(
            ev.modulename,
            ev.instance,
            ev.eventtype,
            func.min(ev.priority).label("priority"),
        )
        .where(and_(*sub_conditions))
        .group_by(ev.modulename, ev.instance, ev.eventtype)
        .subquery("fe")
    )

    query = (
        select(e)
        .join(
            fe,
            and_(
                e.modulename == fe.c.modulename,
                e.instance == fe.c.instance,
                e.eventtype == fe.c.eventtype,
                or_(
                    e.priority == fe.c.priority,
                    and_(e.priority.is_(None), fe.c.priority.is_(None)),
                ),
            ),
        )
        .outerjoin(m, e.modulename == m.name)
        .where(or_(m.visible == 1, m.visible.is_(None)))
        .where(or_(*predicates.outer))
    )

    for condition in extra_conditions or []:
        query = query.where(_bound_condition(condition, extra_params or {}))

    if ignore_hidden:
        query = query.where(e.visible == 1)

    if order_by:
        query = query.order_by(text(order_by))
    else:
        query = query.order_by(e.timestart.asc(), e.id.asc())

    if offset:
        query = query.offset(offset)
    # A limit of 0 means no limit
    if limit:
        query = query.limit(limit)

    return query


def get_raw_events(
    session: Session,
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
) -> list[Event]:
    """
    Get the events visible through the given dimension filters.

    Each filter is None/False (no events from that dimension), True (events
    from every user/group/course/category), an id, a collection of ids or a
    FilterSpec. An event is returned when it matches at least one dimension.

    Returns an empty list, without querying, when no dimension is active.

    Raises:
        InvalidFilterSpecError: If a filter value is malformed
        ValidationError: If offset or limit is negative
        EventQueryError: If the datastore fails to run the query
    """
    _check_pagination(offset, limit)

    filters = {
        dimension: FilterSpec.coerce(value, dimension)
        for dimension, value in zip(DIMENSIONS, (users, groups, courses, categories))
    }

    if all(spec.is_none for spec in filters.values()):
        logger.debug("No event dimension selected, skipping raw event query")
        return []

    query = build_raw_events_query(
        **filters,
        extra_conditions=extra_conditions,
        extra_params=extra_params,
        order_by=order_by,
        offset=offset,
        limit=limit,
        ignore_hidden=ignore_hidden,
    )
    if query is None:
        logger.debug("Event filters produced no predicate, skipping raw event query")
        return []

    try:
        result = session.execute(query)
    except SQLAlchemyError as exc:
        logger.error("Raw event query failed: %s", exc)
        raise EventQueryError(f"Raw event query failed: {exc.__class__.__name__}") from exc

    return list(result.scalars().all())


def get_events_in_window(
    session: Session,
    time_start: Optional[int] = None,
    time_end: Optional[int] = None,
    *,
    with_duration: bool = True,
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
) -> list[Event]:
    """
    Get the raw events falling in [time_start, time_end].

    With with_duration, events that started before time_start and are still
    running at time_start are included too.
    """
    conditions, params = build_time_window_conditions(
        time_start, time_end, with_duration=with_duration
    )
    return get_raw_events(
        session,
        users=users,
        groups=groups,
        courses=courses,
        categories=categories,
        extra_conditions=conditions + list(extra_conditions or []),
        extra_params={**params, **(extra_params or {})},
        order_by=order_by,
        offset=offset,
        limit=limit,
        ignore_hidden=ignore_hidden,
    )


# ============================================================================
# SEEDING
# ============================================================================


def create_event(session: Session, **fields: Any) -> Event:
    """Insert an event. Unset dimension keys default to 0."""
    event = Event(**fields)
    session.add(event)
    session.flush()
    return event


def set_module_visibility(session: Session, name: str, visible: bool) -> Module:
    """Create or update the visibility entry of a module."""
    module = session.execute(
        select(Module).where(Module.name == name)
    ).scalar_one_or_none()
    if module is None:
        module = Module(name=name, visible=int(visible))
        session.add(module)
    else:
        module.visible = int(visible)
    session.flush()
    return module
