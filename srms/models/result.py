"""Exam result model definitions."""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from srms.database import Base
from srms.models.common import new_id, utcnow


class Result(Base):
    """Represents one student's marks for one exam in one course."""
    __tablename__ = "results"

    id = Column(String(32), primary_key=True, default=new_id)
    student_id = Column(String(32), ForeignKey("students.id"), index=True, nullable=False)
    course_id = Column(String(32), ForeignKey("courses.id"), index=True, nullable=False)
    marks = Column(Float, nullable=False)
    percentage = Column(Float, nullable=False)
    grade = Column(String(2), nullable=False)
    exam_date = Column(Date, nullable=False)
    exam_type = Column(String, nullable=False)
    remarks = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    student = relationship("Student")
    course = relationship("Course")
