# base.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    # Python-side defaults, so values are populated on flush and never lazy-loaded
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class TenantModel(TimestampMixin, Base):
    """
    A base mixin for multi-tenant architecture.
    Every child entity carries the school that owns it.
    """
    __abstract__ = True

    @declared_attr
    def school_id(cls):
        return Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
