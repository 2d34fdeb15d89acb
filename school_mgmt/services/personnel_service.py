# school_mgmt/services/personnel_service.py
from datetime import date
from typing import Optional

from sqlalchemy import select

from school_mgmt.core.dispatcher import exposed
from school_mgmt.core.errors import conflict, forbidden, not_found
from school_mgmt.core.logging import logger
from school_mgmt.core.security import get_password_hash
from school_mgmt.models import Personnel, Schedule, User
from school_mgmt.schemas.common import IdRequest
from school_mgmt.schemas.personnel import (
    PersonnelCreateRequest,
    PersonnelListQuery,
    PersonnelResponse,
    PersonnelUpdateRequest,
)

from .base_service import BaseService
from .user_service import normalize_email


class PersonnelService(BaseService):
    """
    Teachers and staff. Each profile is backed by a User account that is
    created and removed together with it.
    """
    module_name = "personnel"

    async def validate_employee_id(self, school_id: int, employee_id: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Personnel.id).where(
            Personnel.school_id == school_id,
            Personnel.employee_id == employee_id
        )
        if exclude_id:
            query = query.where(Personnel.id != exclude_id)
        return not await self.exists(query)

    async def _load(self, personnel_id: int, principal):
        personnel = await self.get_by_id(Personnel, personnel_id)
        if personnel is None:
            return None, not_found("Personnel not found")
        failure = self.check_tenant(principal, personnel.school_id)
        if failure:
            return None, failure
        return personnel, None

    @exposed("createPersonnel", method="post", schema=PersonnelCreateRequest, role="is_school_admin")
    async def create_personnel(self, data: PersonnelCreateRequest, principal, device=None):
        if principal.school_id is None:
            return forbidden("Forbidden: No school associated with this account")

        email = normalize_email(data.email)
        if await self.exists(select(User.id).where(User.email == email)):
            return conflict("User with this email already exists")
        if not await self.validate_employee_id(principal.school_id, data.employee_id):
            return conflict("Employee ID already exists in this school")

        # Mirrors the account role and tenant on the profile
        user = User(
            name=data.name,
            email=email,
            password_hash=get_password_hash(data.password),
            role=data.role.value,
            school_id=principal.school_id
        )
        personnel = Personnel(
            user=user,
            school_id=principal.school_id,
            employee_id=data.employee_id,
            department=data.department,
            designation=data.designation,
            joining_date=data.joining_date or date.today()
        )
        self.db.add_all([user, personnel])

        failure = await self.commit_or_conflict("Personnel with this email or employee ID already exists")
        if failure:
            return failure

        logger.info(f"Personnel {personnel.id} ({user.role}) created in school {principal.school_id}")
        return {"message": "Personnel created successfully", "personnel": PersonnelResponse.model_validate(personnel)}

    @exposed("getPersonnelList", method="get", schema=PersonnelListQuery)
    async def get_personnel_list(self, data: PersonnelListQuery, principal, device=None):
        school_id, failure = self.list_scope(principal, data.school_id)
        if failure:
            return failure

        query = select(Personnel).join(Personnel.user)
        if school_id is not None:
            query = query.where(Personnel.school_id == school_id)
        if data.role is not None:
            query = query.where(User.role == data.role.value)

        personnel, meta = await self.paginate(query.order_by(Personnel.id), data)
        return {
            "personnel": [PersonnelResponse.model_validate(item) for item in personnel],
            "meta": meta
        }

    @exposed("getPersonnel", method="get", schema=IdRequest)
    async def get_personnel(self, data: IdRequest, principal, device=None):
        personnel, failure = await self._load(data.id, principal)
        if failure:
            return failure
        return PersonnelResponse.model_validate(personnel)

    @exposed("updatePersonnel", method="patch", schema=PersonnelUpdateRequest, role="is_school_admin")
    async def update_personnel(self, data: PersonnelUpdateRequest, principal, device=None):
        personnel, failure = await self._load(data.id, principal)
        if failure:
            return failure

        fields = self.update_fields(data)
        async with self.transaction():
            if "name" in fields:
                personnel.user.name = fields.pop("name")
            for key, value in fields.items():
                setattr(personnel, key, value)

        return {"message": "Personnel updated successfully", "personnel": PersonnelResponse.model_validate(personnel)}

    @exposed("deletePersonnel", method="delete", schema=IdRequest, role="is_school_admin")
    async def delete_personnel(self, data: IdRequest, principal, device=None):
        personnel, failure = await self._load(data.id, principal)
        if failure:
            return failure

        if await self.exists(select(Schedule.id).where(Schedule.teacher_id == personnel.user_id)):
            return conflict("Personnel still has schedules and cannot be deleted")

        user = personnel.user
        async with self.transaction():
            await self.db.delete(personnel)
            await self.db.flush()
            await self.db.delete(user)

        logger.info(f"Personnel {data.id} and user {user.id} deleted by {principal.user_id}")
        return {"message": "Personnel deleted successfully"}
