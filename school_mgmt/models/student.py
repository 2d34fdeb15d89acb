from sqlalchemy import JSON, Column, Date, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from school_mgmt.schemas.enums import StudentStatus

from .base import TenantModel


class Student(TenantModel):
    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("school_id", "student_id", name="uq_student_school_student_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    student_id = Column(String(50), nullable=False)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=True, index=True)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)
    address = Column(Text, nullable=True)
    parent_contact = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default=StudentStatus.ACTIVE.value)
    created_by = Column(Integer, nullable=False)

    classroom = relationship("Classroom", lazy="selectin")

    def __repr__(self):
        return f"<Student(student_id={self.student_id}, school_id={self.school_id})>"
