from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response

from app.api.deps import get_view_analytics
from app.core.auth import AuthContext, get_auth_context, require_user
from app.schemas.case_view import (
    CaseView,
    CaseViewAnalytics,
    CaseViewCreate,
    DateRangeStatistics,
    HourCount,
    OverallViewStatistics,
    RankedCase,
)
from app.services.view_analytics_engine import ViewAnalyticsEngine

router = APIRouter()

@router.post("/", status_code=201)
def track_case_view(
    view_in: CaseViewCreate,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
    engine: ViewAnalyticsEngine = Depends(get_view_analytics),
):
    """Record one view of a case; anonymous callers are allowed"""
    engine.track_view(
        view_in.case_id,
        user_id=auth.user_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return Response(status_code=201)

@router.get("/trending", response_model=List[RankedCase])
def get_trending_cases(
    days: Optional[int] = None,
    limit: Optional[int] = None,
    engine: ViewAnalyticsEngine = Depends(get_view_analytics),
):
    return engine.trending(window_days=days, limit=limit)

@router.get("/most-viewed", response_model=List[RankedCase])
def get_most_viewed_cases(limit: Optional[int] = None, engine: ViewAnalyticsEngine = Depends(get_view_analytics)):
    return engine.most_viewed(limit=limit)

@router.get("/peak-hours", response_model=List[HourCount])
def get_peak_viewing_hours(engine: ViewAnalyticsEngine = Depends(get_view_analytics)):
    return engine.peak_hours()

@router.get("/statistics", response_model=OverallViewStatistics)
def get_overall_statistics(engine: ViewAnalyticsEngine = Depends(get_view_analytics)):
    return engine.overall_statistics()

@router.get("/statistics/date-range", response_model=DateRangeStatistics)
def get_date_range_statistics(
    start_date: date,
    end_date: date,
    engine: ViewAnalyticsEngine = Depends(get_view_analytics),
):
    return engine.date_range_statistics(start_date, end_date)

@router.get("/me", response_model=List[CaseView])
def get_my_viewed_cases(
    limit: int = 20,
    auth: AuthContext = Depends(require_user),
    engine: ViewAnalyticsEngine = Depends(get_view_analytics),
):
    return engine.user_viewed_cases(auth.user_id, limit=limit)

@router.get("/case/{case_id}", response_model=CaseViewAnalytics)
def get_case_view_analytics(
    case_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    engine: ViewAnalyticsEngine = Depends(get_view_analytics),
):
    return engine.case_analytics(case_id, start=start_date, end=end_date)
