from .requests import (
    ParentContact,
    StudentCreateRequest,
    StudentUpdateRequest,
    TransferStudentRequest,
    StudentListQuery
)
from .responses import StudentResponse, StudentSummary

__all__ = [
    'ParentContact',
    'StudentCreateRequest',
    'StudentUpdateRequest',
    'TransferStudentRequest',
    'StudentListQuery',
    'StudentResponse',
    'StudentSummary'
]
