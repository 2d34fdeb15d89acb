from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from .base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)
    is_verified = Column(Boolean, default=True, nullable=False)

    # Superadmins are not bound to a school
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=True, index=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
