from pydantic import BaseModel, ConfigDict

from .schema import EventScope


class EventSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = ""
    description: str | None = None
    format: int = 0
    categoryid: int = 0
    courseid: int = 0
    groupid: int = 0
    userid: int = 0
    repeatid: int = 0
    component: str | None = None
    modulename: str = "0"
    instance: int = 0
    type: int = 0
    eventtype: str = ""
    timestart: int = 0
    timeduration: int = 0
    timesort: int | None = None
    visible: int = 1
    uuid: str = ""
    sequence: int = 1
    timemodified: int = 0
    subscriptionid: int | None = None
    priority: int | None = None
    location: str | None = None
    scope: EventScope = EventScope.site


class ModuleSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    visible: int = 1
