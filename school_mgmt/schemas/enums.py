from enum import Enum


class UserRole(str, Enum):
    SUPERADMIN = "superadmin"
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"
    STAFF = "staff"


PERSONNEL_ROLES = {UserRole.TEACHER, UserRole.STAFF}
ADMIN_ROLES = {UserRole.SUPERADMIN, UserRole.SCHOOL_ADMIN}


class ResourceStatus(str, Enum):
    ACTIVE = "active"
    BROKEN = "broken"
    MISSING = "missing"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class StudentStatus(str, Enum):
    ACTIVE = "active"
    TRANSFERRED = "transferred"
    GRADUATED = "graduated"
    INACTIVE = "inactive"


class PersonnelStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
