# school_mgmt/services/schedule_service.py
from datetime import time
from typing import Optional

from sqlalchemy import select

from school_mgmt.core.dispatcher import exposed
from school_mgmt.core.errors import conflict, not_found, validation_error
from school_mgmt.core.logging import logger
from school_mgmt.models import Classroom, Schedule, User
from school_mgmt.schemas.common import IdRequest
from school_mgmt.schemas.enums import UserRole
from school_mgmt.schemas.schedule import (
    ScheduleCreateRequest,
    ScheduleListQuery,
    ScheduleResponse,
    ScheduleUpdateRequest,
    TeacherScheduleQuery,
)

from .base_service import BaseService

OVERLAP_MESSAGE = "Schedule overlaps with an existing entry in this classroom"
SLOT_FIELDS = ("classroom_id", "teacher_id", "day_of_week", "start_time", "end_time")


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open intervals ``[start, end)``; touching endpoints do not overlap."""
    return start_a < end_b and start_b < end_a


class ScheduleService(BaseService):
    module_name = "schedule"

    async def find_overlap(
        self,
        classroom_id: int,
        day_of_week: int,
        start_time: time,
        end_time: time,
        exclude_id: Optional[int] = None
    ) -> Optional[Schedule]:
        query = select(Schedule).where(
            Schedule.classroom_id == classroom_id,
            Schedule.day_of_week == day_of_week
        )
        if exclude_id:
            query = query.where(Schedule.id != exclude_id)
        result = await self.db.execute(query)
        return next(
            (
                existing for existing in result.scalars().all()
                if intervals_overlap(start_time, end_time, existing.start_time, existing.end_time)
            ),
            None
        )

    async def validate_slot(self, school_id: int, classroom_id: int, teacher_id: int, start_time: time, end_time: time):
        """Classroom and teacher must belong to ``school_id`` and the slot must be non-empty."""
        classroom = await self.get_by_id(Classroom, classroom_id)
        if classroom is None or classroom.school_id != school_id:
            return validation_error("Invalid classroom for your school")

        teacher = await self.get_by_id(User, teacher_id)
        if teacher is None or teacher.role != UserRole.TEACHER.value or teacher.school_id != school_id:
            return validation_error("Invalid teacher for your school")

        if start_time >= end_time:
            return validation_error([{"field": "end_time", "message": "end_time must be after start_time"}])
        return None

    @exposed("createSchedule", method="post", schema=ScheduleCreateRequest, role="is_school_admin")
    async def create_schedule(self, data: ScheduleCreateRequest, principal, device=None):
        failure = await self.validate_slot(
            principal.school_id, data.classroom_id, data.teacher_id, data.start_time, data.end_time
        )
        if failure:
            return failure

        if await self.find_overlap(data.classroom_id, data.day_of_week, data.start_time, data.end_time):
            return conflict(OVERLAP_MESSAGE)

        schedule = Schedule(school_id=principal.school_id, **data.model_dump())
        self.db.add(schedule)
        failure = await self.commit_or_conflict(OVERLAP_MESSAGE)
        if failure:
            return failure

        await self.reload(schedule, "classroom", "teacher")
        logger.info(f"Schedule {schedule.id} created for classroom {schedule.classroom_id}")
        return {"message": "Schedule created successfully", "schedule": ScheduleResponse.model_validate(schedule)}

    @exposed("getSchedules", method="get", schema=ScheduleListQuery)
    async def get_schedules(self, data: ScheduleListQuery, principal, device=None):
        query = select(Schedule)
        if not principal.is_superadmin:
            query = query.where(Schedule.school_id == principal.school_id)
        if data.classroom_id is not None:
            query = query.where(Schedule.classroom_id == data.classroom_id)
        if data.day_of_week is not None:
            query = query.where(Schedule.day_of_week == data.day_of_week)

        result = await self.db.execute(
            query.order_by(Schedule.day_of_week, Schedule.start_time, Schedule.id)
        )
        return {"schedules": [ScheduleResponse.model_validate(item) for item in result.scalars().all()]}

    @exposed("getTeacherSchedule", method="get", schema=TeacherScheduleQuery)
    async def get_teacher_schedule(self, data: TeacherScheduleQuery, principal, device=None):
        teacher_id = data.teacher_id or principal.user_id
        query = select(Schedule).where(Schedule.teacher_id == teacher_id)
        if not principal.is_superadmin:
            query = query.where(Schedule.school_id == principal.school_id)

        result = await self.db.execute(query.order_by(Schedule.day_of_week, Schedule.start_time))
        return {"schedules": [ScheduleResponse.model_validate(item) for item in result.scalars().all()]}

    @exposed("updateSchedule", method="patch", schema=ScheduleUpdateRequest, role="is_school_admin")
    async def update_schedule(self, data: ScheduleUpdateRequest, principal, device=None):
        schedule = await self.get_by_id(Schedule, data.id)
        if schedule is None:
            return not_found("Schedule not found")
        failure = self.check_tenant(principal, schedule.school_id)
        if failure:
            return failure

        fields = self.update_fields(data)
        slot = {field: getattr(schedule, field) for field in SLOT_FIELDS}
        slot.update(fields)

        failure = await self.validate_slot(
            schedule.school_id, slot["classroom_id"], slot["teacher_id"], slot["start_time"], slot["end_time"]
        )
        if failure:
            return failure

        if await self.find_overlap(
            slot["classroom_id"], slot["day_of_week"], slot["start_time"], slot["end_time"], exclude_id=schedule.id
        ):
            return conflict(OVERLAP_MESSAGE)

        for key, value in fields.items():
            setattr(schedule, key, value)

        failure = await self.commit_or_conflict(OVERLAP_MESSAGE)
        if failure:
            return failure
        await self.reload(schedule, "classroom", "teacher")
        return {"message": "Schedule updated successfully", "schedule": ScheduleResponse.model_validate(schedule)}

    @exposed("deleteSchedule", method="delete", schema=IdRequest, role="is_school_admin")
    async def delete_schedule(self, data: IdRequest, principal, device=None):
        schedule = await self.get_by_id(Schedule, data.id)
        if schedule is None:
            return not_found("Schedule not found")
        failure = self.check_tenant(principal, schedule.school_id)
        if failure:
            return failure

        async with self.transaction():
            await self.db.delete(schedule)

        return {"message": "Schedule deleted successfully"}

