from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from school_mgmt.schemas.common import PaginationParams
from school_mgmt.schemas.enums import AttendanceStatus


class MarkAttendanceRequest(BaseModel):
    student_id: int = Field(..., ge=1)
    classroom_id: int = Field(..., ge=1)
    date: date
    status: AttendanceStatus
    remarks: Optional[str] = Field(None, max_length=500)

    @field_validator("date", mode="before")
    @classmethod
    def truncate_to_day(cls, v: Any) -> Any:
        """Timestamps are reduced to their calendar day."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and len(v) > 10:
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
            except ValueError:
                return v
        return v


class AttendanceReportQuery(PaginationParams):
    classroom_id: Optional[int] = Field(None, ge=1)
    student_id: Optional[int] = Field(None, ge=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class StudentAttendanceQuery(PaginationParams):
    student_id: int = Field(..., ge=1)
