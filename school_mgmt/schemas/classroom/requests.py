from typing import List, Optional

from pydantic import BaseModel, Field

from school_mgmt.schemas.common import IdRequest, PaginationParams
from school_mgmt.schemas.enums import ResourceStatus


class ResourceItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(1, ge=1)
    status: ResourceStatus = ResourceStatus.ACTIVE


class ClassroomCreateRequest(BaseModel):
    school_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=100)
    capacity: int = Field(..., ge=1)
    resources: List[ResourceItem] = Field(default_factory=list)


class ClassroomUpdateRequest(IdRequest):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    resources: Optional[List[ResourceItem]] = None


class AddResourcesRequest(IdRequest):
    resources: List[ResourceItem] = Field(..., min_length=1)


class ClassroomsBySchoolQuery(PaginationParams):
    school_id: int = Field(..., ge=1)


class ClassroomsQuery(PaginationParams):
    admin_id: Optional[int] = Field(None, ge=1)
