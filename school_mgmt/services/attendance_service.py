# school_mgmt/services/attendance_service.py
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from school_mgmt.core.dispatcher import exposed
from school_mgmt.core.errors import forbidden, not_found, validation_error
from school_mgmt.core.logging import logger
from school_mgmt.models import Attendance, Classroom, Student
from school_mgmt.schemas.attendance import (
    AttendanceReportQuery,
    AttendanceResponse,
    MarkAttendanceRequest,
    StudentAttendanceQuery,
)

from .base_service import BaseService

REPORT_DEFAULT_DAYS = 30


class AttendanceService(BaseService):
    module_name = "attendance"

    async def _find_record(self, student_id: int, classroom_id: int, day) -> Attendance:
        result = await self.db.execute(
            select(Attendance).where(
                Attendance.student_id == student_id,
                Attendance.classroom_id == classroom_id,
                Attendance.date == day
            )
        )
        return result.scalar_one_or_none()

    async def _upsert(self, school_id: int, data: MarkAttendanceRequest, taken_by: int) -> Attendance:
        values = {
            "status": data.status.value,
            "remarks": data.remarks,
            "taken_by": taken_by
        }

        record = await self._find_record(data.student_id, data.classroom_id, data.date)
        if record is None:
            record = Attendance(
                student_id=data.student_id,
                classroom_id=data.classroom_id,
                school_id=school_id,
                date=data.date,
                **values
            )
            self.db.add(record)
        else:
            for key, value in values.items():
                setattr(record, key, value)

        await self.db.commit()
        return await self.reload(record, "student", "classroom", "recorded_by")

    @exposed("markAttendance", method="post", schema=MarkAttendanceRequest, role="is_teacher")
    async def mark_attendance(self, data: MarkAttendanceRequest, principal, device=None):
        student = await self.get_by_id(Student, data.student_id)
        if student is None:
            return not_found("Student not found")

        if not principal.owns(student.school_id):
            return forbidden("Forbidden: Student belongs to another school")

        classroom = await self.get_by_id(Classroom, data.classroom_id)
        if classroom is None or classroom.school_id != student.school_id:
            return validation_error("Invalid classroom for your school")

        # Plain values survive the rollback of a lost insert race
        school_id = student.school_id

        try:
            record = await self._upsert(school_id, data, principal.user_id)
        except IntegrityError:
            # Another request inserted the same day first; overwrite it
            await self.db.rollback()
            logger.info(f"Concurrent attendance insert for student {data.student_id}, retrying as update")
            record = await self._upsert(school_id, data, principal.user_id)

        return {"message": "Attendance marked successfully", "attendance": AttendanceResponse.model_validate(record)}

    @exposed("getAttendanceReport", method="get", schema=AttendanceReportQuery, role="is_school_admin")
    async def get_attendance_report(self, data: AttendanceReportQuery, principal, device=None):
        end_date = data.end_date or datetime.now(timezone.utc).date()
        start_date = data.start_date or end_date - timedelta(days=REPORT_DEFAULT_DAYS)

        query = select(Attendance).where(
            Attendance.school_id == principal.school_id,
            Attendance.date >= start_date,
            Attendance.date <= end_date
        )
        if data.classroom_id is not None:
            query = query.where(Attendance.classroom_id == data.classroom_id)
        if data.student_id is not None:
            query = query.where(Attendance.student_id == data.student_id)

        records, meta = await self.paginate(query.order_by(Attendance.date.desc(), Attendance.id.desc()), data)
        return {
            "report": [AttendanceResponse.model_validate(record) for record in records],
            "meta": meta
        }

    @exposed("getStudentAttendance", method="get", schema=StudentAttendanceQuery, role="is_teacher")
    async def get_student_attendance(self, data: StudentAttendanceQuery, principal, device=None):
        student = await self.get_by_id(Student, data.student_id)
        if student is None:
            return not_found("Student not found")

        if not principal.owns(student.school_id):
            return forbidden()

        query = select(Attendance).where(Attendance.student_id == student.id)
        records, meta = await self.paginate(query.order_by(Attendance.date.desc(), Attendance.id.desc()), data)
        return {
            "attendance": [AttendanceResponse.model_validate(record) for record in records],
            "meta": meta
        }
