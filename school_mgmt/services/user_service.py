# school_mgmt/services/user_service.py
import secrets

from sqlalchemy import select, update

from school_mgmt.core.dispatcher import exposed
from school_mgmt.core.errors import conflict, forbidden, not_found, unauthorized
from school_mgmt.core.logging import logger
from school_mgmt.core.security import TokenHandler, TokenType, get_password_hash, verify_password
from school_mgmt.models import School, User
from school_mgmt.schemas.common import IdRequest
from school_mgmt.schemas.enums import ADMIN_ROLES, UserRole
from school_mgmt.schemas.user import (
    ChangePasswordRequest,
    CreateAdminRequest,
    LoginRequest,
    RefreshTokenRequest,
    SchoolAdminsQuery,
    SignupRequest,
    UserResponse,
)

from .base_service import BaseService


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService(BaseService):
    module_name = "user"

    @property
    def tokens(self) -> TokenHandler:
        return TokenHandler(self.settings)

    async def get_user_by_email(self, email: str):
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    def issue_access_token(self, user: User) -> str:
        return self.tokens.create_access_token(user.id, user.role, user.school_id)

    @exposed("signup", method="post", schema=SignupRequest, auth=False, limit="security")
    async def signup(self, data: SignupRequest, principal=None, device=None):
        if not secrets.compare_digest(data.admin_key.encode(), self.settings.ADMIN_SIGNUP_KEY.encode()):
            logger.warning(f"Signup with invalid admin key from {device.address if device else 'unknown'}")
            return unauthorized("Unauthorized: Invalid admin registration key")

        school_id = None
        if data.role != UserRole.SUPERADMIN:
            if await self.get_by_id(School, data.school_id) is None:
                return not_found("School not found")
            school_id = data.school_id

        if await self.get_user_by_email(data.email):
            return conflict("User already exists")

        user = User(
            name=data.name,
            email=normalize_email(data.email),
            password_hash=get_password_hash(data.password),
            role=data.role.value,
            school_id=school_id
        )
        self.db.add(user)
        failure = await self.commit_or_conflict("User already exists")
        if failure:
            return failure

        logger.info(f"User {user.id} signed up with role {user.role}")
        return {"message": "User registered successfully", "user_id": user.id}

    @exposed("login", method="post", schema=LoginRequest, auth=False, limit="security")
    async def login(self, data: LoginRequest, principal=None, device=None):
        user = await self.get_user_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            return unauthorized("Invalid credentials")

        return {
            "user": UserResponse.model_validate(user),
            "refresh_token": self.tokens.create_refresh_token(user.id),
            "access_token": self.issue_access_token(user)
        }

    @exposed("refreshToken", method="post", schema=RefreshTokenRequest, auth=False, limit="security")
    async def refresh_token(self, data: RefreshTokenRequest, principal=None, device=None):
        payload = self.tokens.decode_token(data.refresh_token, TokenType.REFRESH)
        if payload is None:
            return unauthorized("Invalid refresh token")

        try:
            user_id = int(payload["sub"])
        except (KeyError, ValueError):
            return unauthorized("Invalid refresh token")

        user = await self.get_by_id(User, user_id)
        if user is None:
            return unauthorized("Invalid refresh token")

        return {"access_token": self.issue_access_token(user)}

    @exposed("createAdmin", method="post", schema=CreateAdminRequest, role="is_superadmin")
    async def create_admin(self, data: CreateAdminRequest, principal, device=None):
        school = None
        if data.role == UserRole.SCHOOL_ADMIN:
            school = await self.get_by_id(School, data.school_id)
            if school is None:
                return not_found("School not found")

        if await self.get_user_by_email(data.email):
            return conflict("User with this email already exists")

        user = User(
            name=data.name,
            email=normalize_email(data.email),
            password_hash=get_password_hash(data.password),
            role=data.role.value,
            school_id=school.id if school else None
        )
        self.db.add(user)
        await self.db.flush()

        if school is not None:
            school.school_admin_id = user.id

        failure = await self.commit_or_conflict("User with this email already exists")
        if failure:
            return failure

        logger.info(f"Admin {user.id} ({user.role}) created by {principal.user_id}")
        return {"message": "Admin created successfully", "user": UserResponse.model_validate(user)}

    @exposed("getSchoolAdmins", method="get", schema=SchoolAdminsQuery, role="is_superadmin")
    async def get_school_admins(self, data: SchoolAdminsQuery, principal, device=None):
        query = select(User).where(User.role == UserRole.SCHOOL_ADMIN.value)
        if data.school_id:
            query = query.where(User.school_id == data.school_id)

        admins, meta = await self.paginate(query.order_by(User.id), data)
        return {
            "admins": [UserResponse.model_validate(admin) for admin in admins],
            "meta": meta
        }

    @exposed("deleteAdmin", method="delete", schema=IdRequest, role="is_superadmin")
    async def delete_admin(self, data: IdRequest, principal, device=None):
        if data.id == principal.user_id:
            return forbidden("Forbidden: You cannot delete your own account")

        user = await self.get_by_id(User, data.id)
        if user is None or user.role not in {role.value for role in ADMIN_ROLES}:
            return not_found("Admin not found")

        async with self.transaction():
            # No school may keep pointing at the deleted account
            await self.db.execute(
                update(School)
                .where(School.school_admin_id == user.id)
                .values(school_admin_id=principal.user_id)
            )
            await self.db.execute(
                update(School)
                .where(School.created_by == user.id)
                .values(created_by=principal.user_id)
            )
            await self.db.delete(user)

        logger.info(f"Admin {data.id} deleted by {principal.user_id}")
        return {"message": "Admin deleted successfully and school reassigned to superadmin"}

    @exposed("changePassword", method="post", schema=ChangePasswordRequest)
    async def change_password(self, data: ChangePasswordRequest, principal, device=None):
        user = await self.get_by_id(User, principal.user_id)
        if user is None:
            return not_found("User not found")

        if not verify_password(data.current_password, user.password_hash):
            return unauthorized("Incorrect current password")

        async with self.transaction():
            user.password_hash = get_password_hash(data.new_password)

        return {"message": "Password updated successfully"}

    @exposed("me", method="get")
    async def me(self, data=None, principal=None, device=None):
        user = await self.get_by_id(User, principal.user_id)
        if user is None:
            return not_found("User not found")
        return UserResponse.model_validate(user)
