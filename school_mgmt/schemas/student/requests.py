from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from school_mgmt.schemas.common import IdRequest, PaginationParams
from school_mgmt.schemas.enums import Gender, StudentStatus


class ParentContact(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=3, max_length=30)
    email: Optional[EmailStr] = None


class StudentCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    student_id: str = Field(..., min_length=1, max_length=50)
    classroom_id: Optional[int] = Field(None, ge=1)
    date_of_birth: date
    gender: Gender
    address: Optional[str] = None
    parent_contact: ParentContact


class StudentUpdateRequest(IdRequest):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    classroom_id: Optional[int] = Field(None, ge=1)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None
    parent_contact: Optional[ParentContact] = None
    status: Optional[StudentStatus] = None


class TransferStudentRequest(IdRequest):
    classroom_id: int = Field(..., ge=1)


class StudentListQuery(PaginationParams):
    school_id: Optional[int] = Field(None, ge=1)
    classroom_id: Optional[int] = Field(None, ge=1)
