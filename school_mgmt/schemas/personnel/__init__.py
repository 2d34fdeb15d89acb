from .requests import PersonnelCreateRequest, PersonnelUpdateRequest, PersonnelListQuery
from .responses import PersonnelResponse

__all__ = [
    'PersonnelCreateRequest',
    'PersonnelUpdateRequest',
    'PersonnelListQuery',
    'PersonnelResponse'
]
