"""Student model definitions."""

from sqlalchemy import Boolean, Column, Date, DateTime, String
from srms.database import Base
from srms.models.common import new_id, utcnow


class Student(Base):
    """Represents an enrolled student. Students sign in with their own credentials."""
    __tablename__ = "students"

    id = Column(String(32), primary_key=True, default=new_id)
    roll_number = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    class_name = Column("class", String, nullable=False)
    date_of_birth = Column(Date)
    phone = Column(String)
    address = Column(String)
    guardian_name = Column(String)
    guardian_phone = Column(String)
    enrollment_date = Column(Date)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)
