from enum import Enum

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.core.base import Base


class UserRole(str, Enum):
    ADMIN = "admin"
    JUDGE = "judge"
    LAWYER = "lawyer"
    LITIGANT = "litigant"
    CLERK = "clerk"
    PUBLIC = "public"


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    full_name = Column(String, nullable=False)
    phone = Column(String)
    role = Column(String, nullable=False, default=UserRole.PUBLIC.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_judge(self) -> bool:
        return self.role == UserRole.JUDGE.value
