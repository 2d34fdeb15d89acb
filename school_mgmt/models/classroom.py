from sqlalchemy import JSON, Column, Integer, String, UniqueConstraint

from .base import TenantModel


class Classroom(TenantModel):
    __tablename__ = "classrooms"
    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_classroom_school_name"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    # List of {"name", "quantity", "status"} entries
    resources = Column(JSON, nullable=False, default=list)
    created_by = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<Classroom(name={self.name}, school_id={self.school_id})>"
