"""
Dimension filters for the raw event query.

Each of the four event dimensions (users, groups, courses, categories) is
filtered by a FilterSpec: no events from the dimension, events from a given
set of ids, or events from every entity of the dimension. The specs are
turned into SQLAlchemy predicates, one list per event alias.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import Any, Optional

from sqlalchemy import and_
from sqlalchemy.sql.elements import ColumnElement

from ..core.errors import InvalidFilterSpecError


DIMENSIONS = ("users", "groups", "courses", "categories")


class FilterMode(PyEnum):
    """How a dimension contributes to the query."""

    none = "none"
    all = "all"
    specific = "specific"


@dataclass(frozen=True)
class FilterSpec:
    """
    Filter for one event dimension.

    Use the constructors rather than building instances by hand:

        FilterSpec.none()          # no events from this dimension
        FilterSpec.all()           # events from every user/group/...
        FilterSpec.specific([3])   # events from user/group/... 3
    """

    mode: FilterMode
    ids: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def none(cls) -> FilterSpec:
        return cls(FilterMode.none)

    @classmethod
    def all(cls) -> FilterSpec:
        return cls(FilterMode.all)

    @classmethod
    def specific(cls, ids: Any, dimension: str = "filter") -> FilterSpec:
        if isinstance(ids, int) and not isinstance(ids, bool):
            return cls(FilterMode.specific, frozenset((ids,)))
        if not isinstance(ids, (list, tuple, set, frozenset)) or not ids:
            raise InvalidFilterSpecError(dimension, ids)
        for item in ids:
            # bool is an int subclass but never a valid id
            if isinstance(item, bool) or not isinstance(item, int):
                raise InvalidFilterSpecError(dimension, ids)
        return cls(FilterMode.specific, frozenset(ids))

    @classmethod
    def coerce(cls, value: Any, dimension: str = "filter") -> FilterSpec:
        """
        Build a FilterSpec from a caller supplied value.

        None, False and empty collections mean no events, True means all
        events, an int or a collection of ints means those ids.

        Raises:
            InvalidFilterSpecError: for any other value
        """
        if isinstance(value, FilterSpec):
            return value
        if value is None or value is False:
            return cls.none()
        if value is True:
            return cls.all()
        if isinstance(value, (list, tuple, set, frozenset)) and not value:
            return cls.none()
        return cls.specific(value, dimension=dimension)

    @property
    def is_none(self) -> bool:
        return self.mode is FilterMode.none


@dataclass
class EventFilterPredicates:
    """OR-able predicates for the outer query and for the priority subquery."""

    outer: list[ColumnElement[bool]]
    inner: list[ColumnElement[bool]]


def _dimension_match(column, spec: FilterSpec) -> ColumnElement[bool]:
    if spec.mode is FilterMode.all:
        return column != 0
    return column.in_(sorted(spec.ids))


def build_dimension_predicates(
    event,
    users: FilterSpec,
    groups: FilterSpec,
    courses: FilterSpec,
    categories: FilterSpec,
) -> list[ColumnElement[bool]]:
    """
    Build the per-dimension predicates against one event alias.

    Every call creates fresh bound parameters, so the same filter can be
    rendered twice in one statement.
    """
    predicates: list[ColumnElement[bool]] = []

    if not users.is_none:
        predicates.append(
            and_(
                _dimension_match(event.userid, users),
                event.courseid == 0,
                event.groupid == 0,
                event.categoryid == 0,
            )
        )

    # Group events may also carry a course id, so only the group id is tested
    if not groups.is_none:
        predicates.append(_dimension_match(event.groupid, groups))

    if not courses.is_none:
        predicates.append(
            and_(event.groupid == 0, _dimension_match(event.courseid, courses))
        )

    if not categories.is_none:
        predicates.append(
            and_(
                event.groupid == 0,
                event.courseid == 0,
                _dimension_match(event.categoryid, categories),
            )
        )

    return predicates


def build_filter_predicates(
    outer_event,
    inner_event,
    users: FilterSpec,
    groups: FilterSpec,
    courses: FilterSpec,
    categories: FilterSpec,
) -> Optional[EventFilterPredicates]:
    """
    Build the outer and subquery predicates in two independent passes.

    Returns None when no dimension produced a predicate: the query must not
    run, or it would select every event matching the remaining conditions.
    """
    outer = build_dimension_predicates(outer_event, users, groups, courses, categories)
    if not outer:
        return None
    inner = build_dimension_predicates(inner_event, users, groups, courses, categories)
    return EventFilterPredicates(outer=outer, inner=inner)
