"""
Unit tests for dimension filters and query construction.

These compile statements without touching a database.
"""

import pytest
from sqlalchemy.dialects import sqlite
from sqlalchemy.orm import aliased

from lms_calendar.core.errors import InvalidFilterSpecError, ValidationError
from lms_calendar.database import (
    Event,
    FilterMode,
    FilterSpec,
    build_dimension_predicates,
    build_filter_predicates,
    build_raw_events_query,
)


NONE = FilterSpec.none()


def _compile(query):
    return query.compile(dialect=sqlite.dialect())


# ============================================================================
# FILTER SPEC COERCION
# ============================================================================


@pytest.mark.parametrize("value", [None, False, [], (), set(), frozenset()])
def test_coerce_none(value):
    assert FilterSpec.coerce(value).mode is FilterMode.none


def test_coerce_all():
    assert FilterSpec.coerce(True) == FilterSpec.all()


def test_coerce_single_id():
    spec = FilterSpec.coerce(7)

    assert spec.mode is FilterMode.specific
    assert spec.ids == frozenset({7})


def test_coerce_collection_deduplicates():
    spec = FilterSpec.coerce([3, 4, 3])

    assert spec.mode is FilterMode.specific
    assert spec.ids == frozenset({3, 4})


def test_coerce_passes_filter_specs_through():
    spec = FilterSpec.specific([1, 2])

    assert FilterSpec.coerce(spec) is spec


@pytest.mark.parametrize("value", ["1", b"1", 2.0, [1, None], [False], {1: 2}])
def test_coerce_rejects_invalid_values(value):
    with pytest.raises(InvalidFilterSpecError) as exc_info:
        FilterSpec.coerce(value, "groups")

    assert exc_info.value.dimension == "groups"
    assert exc_info.value.to_dict()["error"]["errors"][0]["reason"] == "invalidFilter"


def test_specific_requires_ids():
    with pytest.raises(InvalidFilterSpecError):
        FilterSpec.specific([])


# ============================================================================
# PREDICATES
# ============================================================================


def test_one_predicate_per_active_dimension():
    e = aliased(Event, name="e")

    predicates = build_dimension_predicates(
        e, FilterSpec.all(), NONE, FilterSpec.specific([5]), FilterSpec.all()
    )

    assert len(predicates) == 3


def test_user_predicate_pins_other_dimensions_to_zero():
    e = aliased(Event, name="e")

    (predicate,) = build_dimension_predicates(e, FilterSpec.all(), NONE, NONE, NONE)
    sql = str(predicate.compile(dialect=sqlite.dialect()))

    assert "e.userid !=" in sql
    assert "e.courseid =" in sql
    assert "e.groupid =" in sql
    assert "e.categoryid =" in sql


def test_group_predicate_only_tests_group():
    e = aliased(Event, name="e")

    (predicate,) = build_dimension_predicates(e, NONE, FilterSpec.specific([2]), NONE, NONE)
    sql = str(predicate.compile(dialect=sqlite.dialect()))

    assert "e.groupid IN" in sql
    assert "courseid" not in sql


def test_no_predicates_gives_sentinel():
    e = aliased(Event, name="e")
    ev = aliased(Event, name="ev")

    assert build_filter_predicates(e, ev, NONE, NONE, NONE, NONE) is None
    assert build_raw_events_query(NONE, NONE, NONE, NONE) is None


# ============================================================================
# QUERY ASSEMBLY
# ============================================================================


def test_outer_query_and_subquery_bind_their_own_parameters():
    query = build_raw_events_query(
        FilterSpec.specific([3, 4]), NONE, FilterSpec.specific([5]), NONE
    )
    compiled = _compile(query)

    user_params = [name for name, value in compiled.params.items() if value == [3, 4]]
    course_params = [name for name, value in compiled.params.items() if value == [5]]
    assert len(user_params) == 2
    assert len(user_params) == len(set(user_params))
    assert len(course_params) == 2


def test_query_joins_priority_subquery_and_modules():
    sql = str(_compile(build_raw_events_query(NONE, NONE, FilterSpec.all(), NONE)))

    assert "min(ev.priority)" in sql.lower()
    assert "GROUP BY ev.modulename, ev.instance, ev.eventtype" in sql
    assert "LEFT OUTER JOIN modules AS m" in sql
    assert "e.priority IS NULL AND fe.priority IS NULL" in sql
    assert "ORDER BY e.timestart ASC" in sql


def test_hidden_events_filtered_in_both_queries():
    shown = str(_compile(build_raw_events_query(NONE, NONE, FilterSpec.all(), NONE)))
    everything = str(
        _compile(build_raw_events_query(NONE, NONE, FilterSpec.all(), NONE, ignore_hidden=False))
    )

    assert "ev.visible =" in shown
    assert "e.visible =" in shown
    assert "visible =" not in everything.replace("m.visible =", "")


def test_negative_offset_is_rejected():
    with pytest.raises(ValidationError):
        build_raw_events_query(NONE, NONE, FilterSpec.all(), NONE, offset=-1)
