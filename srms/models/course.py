"""Course model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from srms.database import Base
from srms.models.common import new_id, utcnow


class Course(Base):
    """Represents a course students sit exams in."""
    __tablename__ = "courses"

    id = Column(String(32), primary_key=True, default=new_id)
    course_name = Column(String, nullable=False)
    course_code = Column(String(7), unique=True, index=True, nullable=False)
    description = Column(Text)
    credits = Column(Integer, nullable=False)
    semester = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)
