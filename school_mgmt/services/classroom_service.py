# school_mgmt/services/classroom_service.py
from typing import List, Optional

from sqlalchemy import select

from school_mgmt.core.dispatcher import exposed
from school_mgmt.core.errors import conflict, forbidden, not_found, validation_error
from school_mgmt.core.logging import logger
from school_mgmt.models import Attendance, Classroom, School, Schedule, Student, User
from school_mgmt.schemas.classroom import (
    AddResourcesRequest,
    ClassroomCreateRequest,
    ClassroomResponse,
    ClassroomsBySchoolQuery,
    ClassroomsQuery,
    ClassroomUpdateRequest,
    ResourceItem,
)
from school_mgmt.schemas.common import IdRequest
from school_mgmt.schemas.enums import UserRole

from .base_service import BaseService


def dump_resources(resources: List[ResourceItem]) -> List[dict]:
    return [resource.model_dump(mode="json") for resource in resources]


class ClassroomService(BaseService):
    module_name = "classroom"

    async def validate_classroom_name(self, school_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        """Validate class name uniqueness within a school"""
        query = select(Classroom.id).where(
            Classroom.school_id == school_id,
            Classroom.name == name
        )
        if exclude_id:
            query = query.where(Classroom.id != exclude_id)
        return not await self.exists(query)

    async def _load_for_change(self, classroom_id: int, principal):
        """Fetch, tenant check, then school admin check."""
        classroom = await self.get_by_id(Classroom, classroom_id)
        if classroom is None:
            return None, not_found("Classroom not found")
        failure = self.check_tenant(principal, classroom.school_id)
        if failure:
            return None, failure
        if not principal.is_school_admin:
            return None, forbidden("Forbidden: Only school admins can modify classrooms")
        return classroom, None

    async def _list_for_school(self, school_id: int, params):
        query = select(Classroom).where(Classroom.school_id == school_id).order_by(Classroom.name)
        classrooms, meta = await self.paginate(query, params)
        return {
            "classrooms": [ClassroomResponse.model_validate(classroom) for classroom in classrooms],
            "meta": meta
        }

    @exposed("createClassroom", method="post", schema=ClassroomCreateRequest, role="is_school_admin")
    async def create_classroom(self, data: ClassroomCreateRequest, principal, device=None):
        if data.school_id != principal.school_id:
            return forbidden("Forbidden: You can only create classrooms in your own school")

        if await self.get_by_id(School, data.school_id) is None:
            return not_found("School not found")

        if not await self.validate_classroom_name(data.school_id, data.name):
            return conflict(f"Classroom '{data.name}' already exists in this school")

        classroom = Classroom(
            school_id=data.school_id,
            name=data.name,
            capacity=data.capacity,
            resources=dump_resources(data.resources),
            created_by=principal.user_id
        )
        self.db.add(classroom)
        failure = await self.commit_or_conflict(f"Classroom '{data.name}' already exists in this school")
        if failure:
            return failure

        logger.info(f"Classroom {classroom.id} created in school {classroom.school_id}")
        return {"message": "Classroom created successfully", "classroom": ClassroomResponse.model_validate(classroom)}

    @exposed("getClassroomsBySchool", method="get", schema=ClassroomsBySchoolQuery)
    async def get_classrooms_by_school(self, data: ClassroomsBySchoolQuery, principal, device=None):
        if not principal.is_superadmin:
            if not principal.is_school_admin or principal.school_id != data.school_id:
                return forbidden()

        if await self.get_by_id(School, data.school_id) is None:
            return not_found("School not found")

        return await self._list_for_school(data.school_id, data)

    @exposed("getClassrooms", method="get", schema=ClassroomsQuery)
    async def get_classrooms(self, data: ClassroomsQuery, principal, device=None):
        if principal.is_superadmin:
            if data.admin_id is None:
                return validation_error([{"field": "admin_id", "message": "admin_id is required"}])
            admin = await self.get_by_id(User, data.admin_id)
            if admin is None or admin.role != UserRole.SCHOOL_ADMIN.value or admin.school_id is None:
                return not_found("School admin not found")
            school_id = admin.school_id
        elif principal.is_school_admin and principal.school_id is not None:
            school_id = principal.school_id
        else:
            return forbidden()

        return await self._list_for_school(school_id, data)

    @exposed("getClassroom", method="get", schema=IdRequest)
    async def get_classroom(self, data: IdRequest, principal, device=None):
        classroom = await self.get_by_id(Classroom, data.id)
        if classroom is None:
            return not_found("Classroom not found")

        failure = self.check_tenant(principal, classroom.school_id)
        if failure:
            return failure
        return ClassroomResponse.model_validate(classroom)

    @exposed("updateClassroom", method="patch", schema=ClassroomUpdateRequest)
    async def update_classroom(self, data: ClassroomUpdateRequest, principal, device=None):
        classroom, failure = await self._load_for_change(data.id, principal)
        if failure:
            return failure

        fields = self.update_fields(data)
        if "name" in fields and not await self.validate_classroom_name(
            classroom.school_id, fields["name"], exclude_id=classroom.id
        ):
            return conflict(f"Classroom '{fields['name']}' already exists in this school")
        if data.resources is not None:
            fields["resources"] = dump_resources(data.resources)

        for key, value in fields.items():
            setattr(classroom, key, value)

        failure = await self.commit_or_conflict("Classroom with this name already exists in this school")
        if failure:
            return failure
        return {"message": "Classroom updated successfully", "classroom": ClassroomResponse.model_validate(classroom)}

    @exposed("deleteClassroom", method="delete", schema=IdRequest)
    async def delete_classroom(self, data: IdRequest, principal, device=None):
        classroom, failure = await self._load_for_change(data.id, principal)
        if failure:
            return failure

        for model in (Student, Schedule, Attendance):
            if await self.exists(select(model.id).where(model.classroom_id == classroom.id)):
                return conflict("Classroom is still in use and cannot be deleted")

        async with self.transaction():
            await self.db.delete(classroom)

        logger.info(f"Classroom {data.id} deleted by {principal.user_id}")
        return {"message": "Classroom deleted successfully"}

    @exposed("addResources", method="post", schema=AddResourcesRequest)
    async def add_resources(self, data: AddResourcesRequest, principal, device=None):
        classroom, failure = await self._load_for_change(data.id, principal)
        if failure:
            return failure

        async with self.transaction():
            # Reassign so the JSON column is flagged dirty
            classroom.resources = list(classroom.resources or []) + dump_resources(data.resources)

        return {"message": "Resources added successfully", "classroom": ClassroomResponse.model_validate(classroom)}
