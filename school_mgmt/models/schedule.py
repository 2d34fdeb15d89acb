from sqlalchemy import Column, ForeignKey, Index, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import TenantModel


class Schedule(TenantModel):
    __tablename__ = "schedules"
    __table_args__ = (
        # Catches two writers racing into the same start slot; partial
        # overlaps are rejected by the service check only
        UniqueConstraint("classroom_id", "day_of_week", "start_time", name="uq_schedule_slot_start"),
        Index("ix_schedule_classroom_day", "classroom_id", "day_of_week"),
    )

    id = Column(Integer, primary_key=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(String(100), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0: Sunday ... 6: Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    classroom = relationship("Classroom", lazy="selectin")
    teacher = relationship("User", lazy="selectin")

    def __repr__(self):
        return (
            f"<Schedule(classroom_id={self.classroom_id}, day={self.day_of_week}, "
            f"{self.start_time}-{self.end_time})>"
        )
