from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.bookmark_counter_service import BookmarkCounterService
from app.services.case_lifecycle_manager import CaseLifecycleManager
from app.services.document_service import DocumentService
from app.services.hearing_scheduler import HearingScheduler
from app.services.notification_dispatcher import NotificationDispatcher
from app.services.view_analytics_engine import ViewAnalyticsEngine


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_case_manager(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> CaseLifecycleManager:
    return CaseLifecycleManager(db, dispatcher)


def get_hearing_scheduler(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> HearingScheduler:
    return HearingScheduler(db, dispatcher)


def get_document_service(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> DocumentService:
    return DocumentService(db, dispatcher)


def get_view_analytics(db: Session = Depends(get_db)) -> ViewAnalyticsEngine:
    return ViewAnalyticsEngine(db)


def get_bookmark_service(db: Session = Depends(get_db)) -> BookmarkCounterService:
    return BookmarkCounterService(db)
