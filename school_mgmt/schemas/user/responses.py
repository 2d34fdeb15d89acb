from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from school_mgmt.schemas.enums import UserRole


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class UserResponse(UserSummary):
    school_id: Optional[int] = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime
