from pydantic import BaseModel
from datetime import date, datetime
from typing import List, Optional

class BookmarkCreate(BaseModel):
    case_id: str
    notes: Optional[str] = None

class BookmarkUpdate(BaseModel):
    notes: Optional[str] = None

class BookmarkedCase(BaseModel):
    id: str
    case_number: str
    title: str
    status: str
    next_hearing_date: Optional[date] = None
    bookmark_count: int

    class Config:
        from_attributes = True

class Bookmark(BaseModel):
    id: str
    user_id: str
    case_id: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    case: Optional[BookmarkedCase] = None

    class Config:
        from_attributes = True

class BookmarkCheck(BaseModel):
    is_bookmarked: bool
    bookmark_id: Optional[str] = None

class TopBookmarkedCase(BaseModel):
    case_id: str
    case_number: str
    title: str
    bookmark_count: int

class BookmarkStatistics(BaseModel):
    total_bookmarks: int
    unique_users_bookmarking: int
    unique_cases_bookmarked: int
    top_bookmarked_cases: List[TopBookmarkedCase]
