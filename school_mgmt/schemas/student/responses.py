from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from school_mgmt.schemas.classroom.responses import ClassroomSummary
from school_mgmt.schemas.enums import Gender, StudentStatus

from .requests import ParentContact


class StudentSummary(BaseModel):
    id: int
    name: str
    student_id: str

    class Config:
        from_attributes = True


class StudentResponse(BaseModel):
    id: int
    school_id: int
    classroom_id: Optional[int] = None
    classroom: Optional[ClassroomSummary] = None
    name: str
    email: Optional[str] = None
    student_id: str
    date_of_birth: date
    gender: Gender
    address: Optional[str] = None
    parent_contact: ParentContact
    status: StudentStatus
    created_by: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
