from .requests import ScheduleCreateRequest, ScheduleUpdateRequest, ScheduleListQuery, TeacherScheduleQuery
from .responses import ScheduleResponse

__all__ = [
    'ScheduleCreateRequest',
    'ScheduleUpdateRequest',
    'ScheduleListQuery',
    'TeacherScheduleQuery',
    'ScheduleResponse'
]
