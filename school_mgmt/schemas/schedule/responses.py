from datetime import time

from pydantic import BaseModel, field_serializer

from school_mgmt.schemas.classroom.responses import ClassroomSummary
from school_mgmt.schemas.user.responses import UserSummary


class ScheduleResponse(BaseModel):
    id: int
    school_id: int
    classroom_id: int
    classroom: ClassroomSummary
    teacher_id: int
    teacher: UserSummary
    subject: str
    day_of_week: int
    start_time: time
    end_time: time

    @field_serializer("start_time", "end_time")
    def format_time(self, v: time) -> str:
        return v.strftime("%H:%M")

    class Config:
        from_attributes = True
