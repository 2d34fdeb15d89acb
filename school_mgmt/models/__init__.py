from .base import Base, TenantModel
from .school import School
from .user import User
from .classroom import Classroom
from .student import Student
from .personnel import Personnel
from .schedule import Schedule
from .attendance import Attendance

__all__ = [
    'Base',
    'TenantModel',
    'School',
    'User',
    'Classroom',
    'Student',
    'Personnel',
    'Schedule',
    'Attendance'
]
