from enum import Enum

from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.base import Base
from app.models.user import User


class CaseStatus(str, Enum):
    FILED = "filed"
    ADMITTED = "admitted"
    HEARING = "hearing"
    JUDGMENT = "judgment"
    CLOSED = "closed"
    ARCHIVED = "archived"


class CasePriority(str, Enum):
    NORMAL = "normal"
    URGENT = "urgent"
    HIGH = "high"


class CaseStage(str, Enum):
    PRELIMINARY = "preliminary"
    TRIAL = "trial"
    FINAL = "final"


class Case(Base):
    __tablename__ = "cases"

    id = Column(String, primary_key=True, index=True)
    case_number = Column(String, unique=True, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    filed_by = Column(String, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=False, default=CaseStatus.FILED.value, index=True)
    priority = Column(String, nullable=False, default=CasePriority.NORMAL.value)
    stage = Column(String, nullable=False, default=CaseStage.PRELIMINARY.value)
    filing_date = Column(Date, nullable=False)
    admission_date = Column(DateTime)
    judgment_date = Column(DateTime)
    next_hearing_date = Column(Date, index=True)
    hearing_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    bookmark_count = Column(Integer, nullable=False, default=0)
    verdict = Column(Text)
    is_public = Column(Boolean, nullable=False, default=True, index=True)
    is_sensitive = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    filer = relationship(User, lazy="joined")
