from datetime import date

from sqlalchemy import Column, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from school_mgmt.schemas.enums import PersonnelStatus

from .base import TenantModel


class Personnel(TenantModel):
    __tablename__ = "personnel"
    __table_args__ = (
        UniqueConstraint("school_id", "employee_id", name="uq_personnel_school_employee_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    employee_id = Column(String(50), nullable=False)
    department = Column(String(100), nullable=True)
    designation = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=PersonnelStatus.ACTIVE.value)
    joining_date = Column(Date, nullable=False, default=date.today)

    # Account that backs this profile, loaded with every query
    user = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<Personnel(employee_id={self.employee_id}, school_id={self.school_id})>"
