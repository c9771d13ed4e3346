from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional

from app.models.case import CaseStatus, CasePriority, CaseStage

class CaseBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    filing_date: date
    priority: CasePriority = CasePriority.NORMAL
    stage: CaseStage = CaseStage.PRELIMINARY
    is_public: bool = True
    is_sensitive: bool = False

class CaseCreate(CaseBase):
    case_number: str = Field(..., min_length=1)

class CaseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[CasePriority] = None
    stage: Optional[CaseStage] = None
    is_public: Optional[bool] = None
    is_sensitive: Optional[bool] = None
    verdict: Optional[str] = None

class CaseStatusUpdate(BaseModel):
    status: CaseStatus

class Case(CaseBase):
    id: str
    case_number: str
    filed_by: str
    status: CaseStatus
    admission_date: Optional[datetime] = None
    judgment_date: Optional[datetime] = None
    next_hearing_date: Optional[date] = None
    hearing_count: int = 0
    view_count: int = 0
    bookmark_count: int = 0
    verdict: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CountBucket(BaseModel):
    value: Optional[str] = None
    count: int

class CaseStatistics(BaseModel):
    total_cases: int
    public_cases: int
    sensitive_cases: int
    cases_by_status: List[CountBucket]
    cases_by_priority: List[CountBucket]
    cases_by_stage: List[CountBucket]
