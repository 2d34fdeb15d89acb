from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from school_mgmt.schemas.common import PaginationParams
from school_mgmt.schemas.enums import ADMIN_ROLES, UserRole

# bcrypt only looks at the first 72 bytes
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 72


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    role: UserRole
    school_id: Optional[int] = Field(None, ge=1)
    admin_key: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def school_required_for_tenant_roles(self):
        if self.role != UserRole.SUPERADMIN and self.school_id is None:
            raise ValueError("school_id is required for this role")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class CreateAdminRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    role: UserRole = UserRole.SCHOOL_ADMIN
    school_id: Optional[int] = Field(None, ge=1)

    @field_validator("role")
    @classmethod
    def validate_admin_role(cls, v: UserRole) -> UserRole:
        if v not in ADMIN_ROLES:
            raise ValueError("role must be superadmin or school_admin")
        return v

    @model_validator(mode="after")
    def school_required_for_school_admin(self):
        if self.role == UserRole.SCHOOL_ADMIN and self.school_id is None:
            raise ValueError("school_id is required for a school admin")
        return self


class SchoolAdminsQuery(PaginationParams):
    school_id: Optional[int] = Field(None, ge=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
