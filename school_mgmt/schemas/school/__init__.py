from .requests import SchoolCreateRequest, SchoolUpdateRequest, SchoolListQuery
from .responses import SchoolResponse

__all__ = [
    'SchoolCreateRequest',
    'SchoolUpdateRequest',
    'SchoolListQuery',
    'SchoolResponse'
]
