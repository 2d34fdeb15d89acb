from datetime import datetime
from typing import List

from pydantic import BaseModel

from .requests import ResourceItem


class ClassroomSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class ClassroomResponse(BaseModel):
    id: int
    school_id: int
    name: str
    capacity: int
    resources: List[ResourceItem]
    created_by: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
