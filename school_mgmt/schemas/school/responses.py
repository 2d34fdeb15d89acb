from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SchoolResponse(BaseModel):
    id: int
    name: str
    address: str
    school_owner: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    school_admin_id: Optional[int] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
