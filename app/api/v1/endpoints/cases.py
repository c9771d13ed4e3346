from fastapi import APIRouter, Depends
from loguru import logger

from app.api.deps import get_case_manager
from app.core.auth import AuthContext, require_court_staff, require_user
from app.schemas.case import Case, CaseCreate, CaseStatistics, CaseStatusUpdate, CaseUpdate
from app.services.case_lifecycle_manager import CaseLifecycleManager

router = APIRouter()

@router.post("/", response_model=Case, status_code=201)
def create_case(
    case_in: CaseCreate,
    auth: AuthContext = Depends(require_user),
    manager: CaseLifecycleManager = Depends(get_case_manager),
):
    """File a new case on behalf of the calling user"""
    return manager.create_case(case_in, filed_by=auth.user_id)

@router.get("/statistics", response_model=CaseStatistics)
def get_case_statistics(manager: CaseLifecycleManager = Depends(get_case_manager)):
    """Case counts by status, priority and stage"""
    return manager.statistics()

@router.get("/{case_id}", response_model=Case)
def get_case(case_id: str, manager: CaseLifecycleManager = Depends(get_case_manager)):
    """Get a specific case by id"""
    return manager.get_case(case_id)

@router.patch("/{case_id}", response_model=Case)
def update_case(
    case_id: str,
    case_in: CaseUpdate,
    auth: AuthContext = Depends(require_court_staff),
    manager: CaseLifecycleManager = Depends(get_case_manager),
):
    """Update the descriptive fields of a case"""
    return manager.update_case(case_id, case_in)

@router.patch("/{case_id}/status", response_model=Case)
def update_case_status(
    case_id: str,
    status_in: CaseStatusUpdate,
    auth: AuthContext = Depends(require_court_staff),
    manager: CaseLifecycleManager = Depends(get_case_manager),
):
    """Move a case to a new status and notify everyone involved"""
    logger.info(f"User {auth.user_id} changing status of case {case_id} to {status_in.status.value}")
    return manager.transition(case_id, status_in.status)
