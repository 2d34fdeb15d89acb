from sqlalchemy import Column, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import TenantModel


class Attendance(TenantModel):
    """
    One record per student, classroom and calendar day.
    """
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("student_id", "date", "classroom_id", name="uq_attendance_student_day_classroom"),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False)
    remarks = Column(String(500), nullable=True)
    taken_by = Column(Integer, nullable=False)

    student = relationship("Student", lazy="selectin")
    classroom = relationship("Classroom", lazy="selectin")
    # taken_by is a plain reference, so the account may be gone
    recorded_by = relationship(
        "User",
        primaryjoin="foreign(Attendance.taken_by) == User.id",
        viewonly=True,
        lazy="selectin"
    )

    def __repr__(self):
        return f"<Attendance(student_id={self.student_id}, date={self.date}, status={self.status})>"
