from .requests import (
    ResourceItem,
    ClassroomCreateRequest,
    ClassroomUpdateRequest,
    AddResourcesRequest,
    ClassroomsBySchoolQuery,
    ClassroomsQuery
)
from .responses import ClassroomResponse, ClassroomSummary

__all__ = [
    'ResourceItem',
    'ClassroomCreateRequest',
    'ClassroomUpdateRequest',
    'AddResourcesRequest',
    'ClassroomsBySchoolQuery',
    'ClassroomsQuery',
    'ClassroomResponse',
    'ClassroomSummary'
]
