from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from school_mgmt.schemas.enums import PersonnelStatus
from school_mgmt.schemas.user import UserSummary


class PersonnelResponse(BaseModel):
    id: int
    user_id: int
    school_id: int
    employee_id: str
    department: Optional[str] = None
    designation: Optional[str] = None
    status: PersonnelStatus
    joining_date: date
    user: UserSummary
    created_at: datetime

    class Config:
        from_attributes = True
