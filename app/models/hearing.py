from enum import Enum

from sqlalchemy import Column, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from app.core.base import Base


class HearingPurpose(str, Enum):
    PRELIMINARY = "preliminary"
    EVIDENCE = "evidence"
    ARGUMENT = "argument"
    JUDGMENT = "judgment"
    MENTION = "mention"


class HearingStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    ADJOURNED = "adjourned"
    CANCELLED = "cancelled"


class Hearing(Base):
    __tablename__ = "hearings"

    id = Column(String, primary_key=True, index=True)
    case_id = Column(String, ForeignKey("cases.id"), nullable=False, index=True)
    hearing_number = Column(String, nullable=False)
    hearing_date = Column(Date, nullable=False, index=True)
    hearing_time = Column(String, nullable=False)
    judge_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    court_room = Column(String)
    purpose = Column(String, nullable=False)
    status = Column(String, nullable=False, default=HearingStatus.SCHEDULED.value, index=True)
    notes = Column(Text)
    next_hearing_date = Column(Date)
    adjournment_reason = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
