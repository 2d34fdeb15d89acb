from .base_service import BaseService
from .user_service import UserService
from .school_service import SchoolService
from .classroom_service import ClassroomService
from .personnel_service import PersonnelService
from .student_service import StudentService
from .schedule_service import ScheduleService
from .attendance_service import AttendanceService

# Every service answering on /api/{module}/{fn}
SERVICES = [
    UserService,
    SchoolService,
    ClassroomService,
    PersonnelService,
    StudentService,
    ScheduleService,
    AttendanceService
]

__all__ = [
    'BaseService',
    'UserService',
    'SchoolService',
    'ClassroomService',
    'PersonnelService',
    'StudentService',
    'ScheduleService',
    'AttendanceService',
    'SERVICES'
]
