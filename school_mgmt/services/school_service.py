# school_mgmt/services/school_service.py
from typing import Optional

from sqlalchemy import select

from school_mgmt.core.dispatcher import exposed
from school_mgmt.core.errors import conflict, forbidden, not_found
from school_mgmt.core.logging import logger
from school_mgmt.models import Classroom, Personnel, School, Student, User
from school_mgmt.schemas.common import IdRequest
from school_mgmt.schemas.school import (
    SchoolCreateRequest,
    SchoolListQuery,
    SchoolResponse,
    SchoolUpdateRequest,
)

from .base_service import BaseService


class SchoolService(BaseService):
    module_name = "school"

    async def validate_school_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """True when no other school already uses ``name``"""
        query = select(School.id).where(School.name == name)
        if exclude_id:
            query = query.where(School.id != exclude_id)
        return not await self.exists(query)

    @exposed("createSchool", method="post", schema=SchoolCreateRequest, role="is_superadmin")
    async def create_school(self, data: SchoolCreateRequest, principal, device=None):
        if not await self.validate_school_name(data.name):
            return conflict("School with this name already exists")

        school = School(
            **data.model_dump(),
            school_admin_id=principal.user_id,
            created_by=principal.user_id
        )
        self.db.add(school)
        failure = await self.commit_or_conflict("School with this name already exists")
        if failure:
            return failure

        logger.info(f"School {school.id} created by {principal.user_id}")
        return {"message": "School created successfully", "school": SchoolResponse.model_validate(school)}

    @exposed("getSchools", method="get", schema=SchoolListQuery)
    async def get_schools(self, data: SchoolListQuery, principal, device=None):
        query = select(School)
        if principal.is_superadmin:
            if data.search:
                query = query.where(School.name.ilike(f"%{data.search}%"))
        elif principal.is_school_admin:
            if principal.school_id is None:
                return forbidden("Forbidden: No school associated with this account")
            query = query.where(School.id == principal.school_id)
        else:
            return forbidden()

        schools, meta = await self.paginate(query.order_by(School.id), data)
        return {
            "schools": [SchoolResponse.model_validate(school) for school in schools],
            "meta": meta
        }

    @exposed("getSchool", method="get", schema=IdRequest)
    async def get_school(self, data: IdRequest, principal, device=None):
        school = await self.get_by_id(School, data.id)
        if school is None:
            return not_found("School not found")

        if not (principal.is_superadmin or (principal.is_school_admin and principal.school_id == school.id)):
            return forbidden("Forbidden: You do not have permission to view this school")

        return SchoolResponse.model_validate(school)

    @exposed("updateSchool", method="patch", schema=SchoolUpdateRequest, role="is_superadmin")
    async def update_school(self, data: SchoolUpdateRequest, principal, device=None):
        school = await self.get_by_id(School, data.id)
        if school is None:
            return not_found("School not found")

        fields = self.update_fields(data)
        if "name" in fields and not await self.validate_school_name(fields["name"], exclude_id=school.id):
            return conflict("School with this name already exists")

        for key, value in fields.items():
            setattr(school, key, value)

        failure = await self.commit_or_conflict("School with this name already exists")
        if failure:
            return failure
        return {"message": "School updated successfully", "school": SchoolResponse.model_validate(school)}

    @exposed("deleteSchool", method="delete", schema=IdRequest, role="is_superadmin")
    async def delete_school(self, data: IdRequest, principal, device=None):
        school = await self.get_by_id(School, data.id)
        if school is None:
            return not_found("School not found")

        for model in (User, Classroom, Student, Personnel):
            if await self.exists(select(model.id).where(model.school_id == school.id)):
                return conflict("School still has records attached and cannot be deleted")

        async with self.transaction():
            await self.db.delete(school)

        logger.info(f"School {data.id} deleted by {principal.user_id}")
        return {"message": "School deleted successfully"}
