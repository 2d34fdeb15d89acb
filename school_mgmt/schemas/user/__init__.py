from .requests import (
    SignupRequest,
    LoginRequest,
    RefreshTokenRequest,
    CreateAdminRequest,
    SchoolAdminsQuery,
    ChangePasswordRequest
)
from .responses import UserResponse, UserSummary

__all__ = [
    'SignupRequest',
    'LoginRequest',
    'RefreshTokenRequest',
    'CreateAdminRequest',
    'SchoolAdminsQuery',
    'ChangePasswordRequest',
    'UserResponse',
    'UserSummary'
]
