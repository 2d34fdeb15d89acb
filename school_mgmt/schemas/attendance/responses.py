from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from school_mgmt.schemas.classroom.responses import ClassroomSummary
from school_mgmt.schemas.enums import AttendanceStatus
from school_mgmt.schemas.student.responses import StudentSummary
from school_mgmt.schemas.user.responses import UserSummary


class AttendanceResponse(BaseModel):
    id: int
    student_id: int
    student: StudentSummary
    school_id: int
    classroom_id: int
    classroom: ClassroomSummary
    date: date
    status: AttendanceStatus
    remarks: Optional[str] = None
    taken_by: int
    recorded_by: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
