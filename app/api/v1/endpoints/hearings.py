from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from app.api.deps import get_hearing_scheduler
from app.core.auth import AuthContext, require_court_staff
from app.schemas.hearing import Hearing, HearingCreate, HearingStatistics, HearingStatusUpdate
from app.services.hearing_scheduler import HearingScheduler

router = APIRouter()

@router.post("/", response_model=Hearing, status_code=201)
def create_hearing(
    hearing_in: HearingCreate,
    auth: AuthContext = Depends(require_court_staff),
    scheduler: HearingScheduler = Depends(get_hearing_scheduler),
):
    """Schedule a hearing for a case"""
    return scheduler.create(hearing_in)

@router.get("/upcoming", response_model=List[Hearing])
def get_upcoming_hearings(
    judge_id: Optional[str] = None,
    limit: int = 10,
    scheduler: HearingScheduler = Depends(get_hearing_scheduler),
):
    return scheduler.upcoming(judge_id=judge_id, limit=limit)

@router.get("/today", response_model=List[Hearing])
def get_todays_hearings(
    judge_id: Optional[str] = None,
    scheduler: HearingScheduler = Depends(get_hearing_scheduler),
):
    return scheduler.todays(judge_id=judge_id)

@router.get("/statistics", response_model=HearingStatistics)
def get_hearing_statistics(scheduler: HearingScheduler = Depends(get_hearing_scheduler)):
    return scheduler.statistics()

@router.get("/case/{case_id}", response_model=List[Hearing])
def get_case_hearings(case_id: str, scheduler: HearingScheduler = Depends(get_hearing_scheduler)):
    """All hearings of a case, latest first"""
    return scheduler.list_for_case(case_id)

@router.get("/{hearing_id}", response_model=Hearing)
def get_hearing(hearing_id: str, scheduler: HearingScheduler = Depends(get_hearing_scheduler)):
    return scheduler.get(hearing_id)

@router.patch("/{hearing_id}/status", response_model=Hearing)
def update_hearing_status(
    hearing_id: str,
    status_in: HearingStatusUpdate,
    auth: AuthContext = Depends(require_court_staff),
    scheduler: HearingScheduler = Depends(get_hearing_scheduler),
):
    """Record the outcome of a hearing, optionally with the next date"""
    return scheduler.update_status(
        hearing_id,
        status_in.status,
        notes=status_in.notes,
        next_hearing_date=status_in.next_hearing_date,
        adjournment_reason=status_in.adjournment_reason,
    )

@router.delete("/{hearing_id}", status_code=204)
def delete_hearing(
    hearing_id: str,
    auth: AuthContext = Depends(require_court_staff),
    scheduler: HearingScheduler = Depends(get_hearing_scheduler),
):
    scheduler.delete(hearing_id)
    return Response(status_code=204)
