import re
from datetime import time
from typing import Any, Optional

from pydantic import BaseModel, BeforeValidator, Field
from typing_extensions import Annotated

from school_mgmt.schemas.common import IdRequest

HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(v: Any) -> Any:
    """Accept ``HH:MM`` strings only; returns a ``datetime.time``."""
    if isinstance(v, time):
        return v
    if not isinstance(v, str) or not HHMM.match(v):
        raise ValueError("time must be in HH:MM format")
    hours, minutes = v.split(":")
    return time(int(hours), int(minutes))


ClockTime = Annotated[time, BeforeValidator(parse_hhmm)]


class ScheduleCreateRequest(BaseModel):
    classroom_id: int = Field(..., ge=1)
    teacher_id: int = Field(..., ge=1)
    subject: str = Field(..., min_length=1, max_length=100)
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: ClockTime
    end_time: ClockTime


class ScheduleUpdateRequest(IdRequest):
    classroom_id: Optional[int] = Field(None, ge=1)
    teacher_id: Optional[int] = Field(None, ge=1)
    subject: Optional[str] = Field(None, min_length=1, max_length=100)
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[ClockTime] = None
    end_time: Optional[ClockTime] = None


class ScheduleListQuery(BaseModel):
    classroom_id: Optional[int] = Field(None, ge=1)
    day_of_week: Optional[int] = Field(None, ge=0, le=6)


class TeacherScheduleQuery(BaseModel):
    teacher_id: Optional[int] = Field(None, ge=1)
