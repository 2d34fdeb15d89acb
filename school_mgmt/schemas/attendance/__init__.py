from .requests import MarkAttendanceRequest, AttendanceReportQuery, StudentAttendanceQuery
from .responses import AttendanceResponse

__all__ = [
    'MarkAttendanceRequest',
    'AttendanceReportQuery',
    'StudentAttendanceQuery',
    'AttendanceResponse'
]
