from sqlalchemy import Column, Integer, String

from .base import Base, TimestampMixin


class School(TimestampMixin, Base):
    """
    School model, the root of the tenant hierarchy.
    """
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    address = Column(String(255), nullable=False)
    school_owner = Column(String(255), nullable=False)
    phone_number = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)

    # Plain user references; an admin's deletion reassigns school_admin_id
    school_admin_id = Column(Integer, nullable=True, index=True)
    created_by = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<School(id={self.id}, name={self.name})>"
