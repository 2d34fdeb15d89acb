from datetime import date
from typing import Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field
from typing_extensions import Annotated

from school_mgmt.schemas.common import IdRequest, PaginationParams
from school_mgmt.schemas.enums import PERSONNEL_ROLES, PersonnelStatus, UserRole
from school_mgmt.schemas.user.requests import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH


def _personnel_role(v: UserRole) -> UserRole:
    if v not in PERSONNEL_ROLES:
        raise ValueError("role must be teacher or staff")
    return v


PersonnelRole = Annotated[UserRole, AfterValidator(_personnel_role)]


class PersonnelCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    role: PersonnelRole
    employee_id: str = Field(..., min_length=1, max_length=50)
    department: Optional[str] = Field(None, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    joining_date: Optional[date] = None


class PersonnelUpdateRequest(IdRequest):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    status: Optional[PersonnelStatus] = None


class PersonnelListQuery(PaginationParams):
    school_id: Optional[int] = Field(None, ge=1)
    role: Optional[PersonnelRole] = None
