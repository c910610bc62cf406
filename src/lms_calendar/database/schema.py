# Schema for the LMS calendar event store
# Mirrors the {event} and {modules} tables read by the raw event query

from enum import Enum as PyEnum
from typing import Optional
from sqlalchemy import (
    String,
    Text,
    Integer,
    BigInteger,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base


# ============================================================================
# CONSTANTS
# ============================================================================

# User overrides always win over group overrides (priority 1..n, the
# override's sort order) and over the activity's own event (NULL priority).
USER_OVERRIDE_PRIORITY = 0

# modulename stored on events that were not generated by an activity module
NO_MODULE = "0"


# ============================================================================
# ENUMS
# ============================================================================


class EventScope(PyEnum):
    """Which dimension an event belongs to."""

    site = "site"
    user = "user"
    group = "group"
    course = "course"
    category = "category"


# ============================================================================
# MODELS
# ============================================================================


class Event(Base):
    """
    Calendar event.

    Each event belongs to at most one of the user, group, course or category
    dimensions; the foreign keys of the other dimensions are 0. An event with
    every key at 0 is a site event. Group events may also carry the course id
    of the group they belong to.
    """

    __tablename__ = "event"
    __table_args__ = (
        Index("ix_event_userid", "userid"),
        Index("ix_event_groupid", "groupid"),
        Index("ix_event_courseid", "courseid"),
        Index("ix_event_categoryid", "categoryid"),
        Index("ix_event_timestart", "timestart"),
        Index("ix_event_module_instance", "modulename", "instance", "eventtype"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    format: Mapped[int] = mapped_column(Integer, default=0)

    # Dimension keys, 0 when not applicable
    categoryid: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    courseid: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    groupid: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    userid: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    repeatid: Mapped[int] = mapped_column(BigInteger, default=0)
    component: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Origin of activity generated events
    modulename: Mapped[str] = mapped_column(String(20), default=NO_MODULE, nullable=False)
    instance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    type: Mapped[int] = mapped_column(Integer, default=0)
    eventtype: Mapped[str] = mapped_column(String(20), default="", nullable=False)

    # Unix timestamps
    timestart: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    timeduration: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    timesort: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    visible: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    uuid: Mapped[str] = mapped_column(String(255), default="")
    sequence: Mapped[int] = mapped_column(BigInteger, default=1)
    timemodified: Mapped[int] = mapped_column(BigInteger, default=0)
    subscriptionid: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    # Lower wins among events sharing (modulename, instance, eventtype)
    priority: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def scope(self) -> EventScope:
        if self.groupid:
            return EventScope.group
        if self.courseid:
            return EventScope.course
        if self.categoryid:
            return EventScope.category
        if self.userid:
            return EventScope.user
        return EventScope.site

    def __repr__(self) -> str:
        return (
            f"<Event id={self.id} {self.modulename}:{self.instance}:{self.eventtype} "
            f"priority={self.priority}>"
        )


class Module(Base):
    """
    Installed activity module.
    Events of a module marked invisible are never returned.
    """

    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    name: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    visible: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
