from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from app.models.hearing import HearingPurpose, HearingStatus
from app.schemas.case import CountBucket

class HearingBase(BaseModel):
    hearing_number: str = Field(..., min_length=1)
    hearing_date: date
    hearing_time: str
    judge_id: str
    court_room: Optional[str] = None
    purpose: HearingPurpose

class HearingCreate(HearingBase):
    case_id: str

class HearingStatusUpdate(BaseModel):
    status: HearingStatus
    notes: Optional[str] = None
    next_hearing_date: Optional[date] = None
    adjournment_reason: Optional[str] = None

class Hearing(HearingBase):
    id: str
    case_id: str
    status: HearingStatus
    notes: Optional[str] = None
    next_hearing_date: Optional[date] = None
    adjournment_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class HearingStatistics(BaseModel):
    total_hearings: int
    upcoming_hearings: int
    hearings_by_status: List[CountBucket]
    hearings_by_purpose: List[CountBucket]
