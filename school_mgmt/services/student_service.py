# school_mgmt/services/student_service.py
from typing import Optional

from sqlalchemy import select

from school_mgmt.core.dispatcher import exposed
from school_mgmt.core.errors import conflict, not_found, validation_error
from school_mgmt.core.logging import logger
from school_mgmt.models import Attendance, Classroom, Student
from school_mgmt.schemas.common import IdRequest
from school_mgmt.schemas.enums import StudentStatus
from school_mgmt.schemas.student import (
    StudentCreateRequest,
    StudentListQuery,
    StudentResponse,
    StudentUpdateRequest,
    TransferStudentRequest,
)

from .base_service import BaseService
from .user_service import normalize_email

INVALID_CLASSROOM = "Invalid classroom for your school"


class StudentService(BaseService):
    module_name = "student"

    async def classroom_in_school(self, classroom_id: int, school_id: Optional[int]) -> bool:
        classroom = await self.get_by_id(Classroom, classroom_id)
        return classroom is not None and classroom.school_id == school_id

    async def validate_student_id(self, school_id: int, student_id: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Student.id).where(
            Student.school_id == school_id,
            Student.student_id == student_id
        )
        if exclude_id:
            query = query.where(Student.id != exclude_id)
        return not await self.exists(query)

    async def validate_email(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Student.id).where(Student.email == email)
        if exclude_id:
            query = query.where(Student.id != exclude_id)
        return not await self.exists(query)

    async def _load(self, student_id: int, principal):
        student = await self.get_by_id(Student, student_id)
        if student is None:
            return None, not_found("Student not found")
        failure = self.check_tenant(principal, student.school_id)
        if failure:
            return None, failure
        return student, None

    @exposed("createStudent", method="post", schema=StudentCreateRequest, role="is_school_admin")
    async def create_student(self, data: StudentCreateRequest, principal, device=None):
        school_id = principal.school_id

        if data.classroom_id is not None and not await self.classroom_in_school(data.classroom_id, school_id):
            return validation_error(INVALID_CLASSROOM)

        if not await self.validate_student_id(school_id, data.student_id):
            return conflict("Student ID already exists in this school")

        email = normalize_email(data.email) if data.email else None
        if email and not await self.validate_email(email):
            return conflict("Student with this email already exists")

        student = Student(
            school_id=school_id,
            classroom_id=data.classroom_id,
            name=data.name,
            email=email,
            student_id=data.student_id,
            date_of_birth=data.date_of_birth,
            gender=data.gender.value,
            address=data.address,
            parent_contact=data.parent_contact.model_dump(mode="json"),
            status=StudentStatus.ACTIVE.value,
            created_by=principal.user_id
        )
        self.db.add(student)
        failure = await self.commit_or_conflict("Student with this student ID or email already exists")
        if failure:
            return failure

        await self.reload(student, "classroom")
        logger.info(f"Student {student.id} created in school {school_id}")
        return {"message": "Student created successfully", "student": StudentResponse.model_validate(student)}

    @exposed("getStudents", method="get", schema=StudentListQuery)
    async def get_students(self, data: StudentListQuery, principal, device=None):
        school_id, failure = self.list_scope(principal, data.school_id)
        if failure:
            return failure

        query = select(Student)
        if school_id is not None:
            query = query.where(Student.school_id == school_id)
        if data.classroom_id is not None:
            query = query.where(Student.classroom_id == data.classroom_id)

        students, meta = await self.paginate(query.order_by(Student.name, Student.id), data)
        return {
            "students": [StudentResponse.model_validate(student) for student in students],
            "meta": meta
        }

    @exposed("getStudent", method="get", schema=IdRequest)
    async def get_student(self, data: IdRequest, principal, device=None):
        student, failure = await self._load(data.id, principal)
        if failure:
            return failure
        return StudentResponse.model_validate(student)

    @exposed("updateStudent", method="patch", schema=StudentUpdateRequest, role="is_school_admin")
    async def update_student(self, data: StudentUpdateRequest, principal, device=None):
        student, failure = await self._load(data.id, principal)
        if failure:
            return failure

        fields = self.update_fields(data)
        if "classroom_id" in fields and not await self.classroom_in_school(fields["classroom_id"], student.school_id):
            return validation_error(INVALID_CLASSROOM)

        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
            if not await self.validate_email(fields["email"], exclude_id=student.id):
                return conflict("Student with this email already exists")

        if data.parent_contact is not None:
            fields["parent_contact"] = data.parent_contact.model_dump(mode="json")

        for key, value in fields.items():
            setattr(student, key, value)

        failure = await self.commit_or_conflict("Student with this email already exists")
        if failure:
            return failure
        await self.reload(student, "classroom")
        return {"message": "Student updated successfully", "student": StudentResponse.model_validate(student)}

    @exposed("transferStudent", method="patch", schema=TransferStudentRequest, role="is_school_admin")
    async def transfer_student(self, data: TransferStudentRequest, principal, device=None):
        student, failure = await self._load(data.id, principal)
        if failure:
            return failure

        if not await self.classroom_in_school(data.classroom_id, student.school_id):
            return validation_error(INVALID_CLASSROOM)

        async with self.transaction():
            student.classroom_id = data.classroom_id

        await self.reload(student, "classroom")
        logger.info(f"Student {student.id} transferred to classroom {data.classroom_id}")
        return {"message": "Student transferred successfully", "student": StudentResponse.model_validate(student)}

    @exposed("deleteStudent", method="delete", schema=IdRequest, role="is_school_admin")
    async def delete_student(self, data: IdRequest, principal, device=None):
        student, failure = await self._load(data.id, principal)
        if failure:
            return failure

        if await self.exists(select(Attendance.id).where(Attendance.student_id == student.id)):
            return conflict("Student has attendance records and cannot be deleted")

        async with self.transaction():
            await self.db.delete(student)

        return {"message": "Student record deleted successfully"}
