from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from school_mgmt.schemas.common import IdRequest, PaginationParams


class SchoolCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    address: str = Field(..., min_length=1, max_length=255)
    school_owner: str = Field(..., min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None


class SchoolUpdateRequest(IdRequest):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    school_owner: Optional[str] = Field(None, min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None


class SchoolListQuery(PaginationParams):
    search: Optional[str] = None
