"""User model definitions."""

from sqlalchemy import Boolean, Column, DateTime, String
from srms.database import Base
from srms.models.common import new_id, utcnow


class User(Base):
    """Represents an administrator account."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="admin")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
