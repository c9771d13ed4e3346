from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

class CaseViewCreate(BaseModel):
    case_id: str

class CaseView(BaseModel):
    id: str
    case_id: str
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    viewed_at: datetime

    class Config:
        from_attributes = True

class RankedCase(BaseModel):
    case_id: str
    view_count: int
    unique_viewer_count: Optional[int] = None
    case_number: str
    title: str
    status: str

class HourCount(BaseModel):
    hour: int
    count: int

class DayCount(BaseModel):
    date: str
    total_views: int
    unique_user_count: int = 0

class DateRangeStatistics(BaseModel):
    total: int
    unique_users: int
    anonymous_views: int
    registered_user_views: int
    per_day_counts: List[DayCount]

class CaseViewAnalytics(BaseModel):
    total_views: int
    unique_users: int
    anonymous_views: int
    registered_user_views: int
    views_by_date: List[DayCount]
    views_by_hour: List[HourCount]
    recent_views: List[CaseView]

class OverallViewStatistics(BaseModel):
    total_views: int
    unique_users: int
    anonymous_views: int
    registered_user_views: int
    today_views: int
    last_7_days_views: int
    last_30_days_views: int
