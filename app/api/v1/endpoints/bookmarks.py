from typing import List

from fastapi import APIRouter, Depends, Response

from app.api.deps import get_bookmark_service
from app.core.auth import AuthContext, require_user
from app.schemas.case_bookmark import Bookmark, BookmarkCheck, BookmarkCreate, BookmarkStatistics, BookmarkUpdate
from app.services.bookmark_counter_service import BookmarkCounterService

router = APIRouter()

@router.post("/", response_model=Bookmark, status_code=201)
def add_bookmark(
    bookmark_in: BookmarkCreate,
    auth: AuthContext = Depends(require_user),
    service: BookmarkCounterService = Depends(get_bookmark_service),
):
    return service.add_bookmark(auth.user_id, bookmark_in.case_id, notes=bookmark_in.notes)

@router.get("/", response_model=List[Bookmark])
def get_my_bookmarks(
    auth: AuthContext = Depends(require_user),
    service: BookmarkCounterService = Depends(get_bookmark_service),
):
    return service.get_user_bookmarks(auth.user_id)

@router.get("/upcoming-hearings", response_model=List[Bookmark])
def get_bookmarks_with_upcoming_hearings(
    auth: AuthContext = Depends(require_user),
    service: BookmarkCounterService = Depends(get_bookmark_service),
):
    return service.bookmarks_with_upcoming_hearings(auth.user_id)

@router.get("/statistics", response_model=BookmarkStatistics)
def get_bookmark_statistics(service: BookmarkCounterService = Depends(get_bookmark_service)):
    return service.statistics()

@router.get("/check/{case_id}", response_model=BookmarkCheck)
def check_bookmark(
    case_id: str,
    auth: AuthContext = Depends(require_user),
    service: BookmarkCounterService = Depends(get_bookmark_service),
):
    return service.check_bookmark(auth.user_id, case_id)

@router.patch("/{bookmark_id}", response_model=Bookmark)
def update_bookmark(
    bookmark_id: str,
    bookmark_in: BookmarkUpdate,
    auth: AuthContext = Depends(require_user),
    service: BookmarkCounterService = Depends(get_bookmark_service),
):
    return service.update_notes(bookmark_id, auth.user_id, bookmark_in.notes)

@router.delete("/case/{case_id}", status_code=204)
def remove_bookmark_by_case(
    case_id: str,
    auth: AuthContext = Depends(require_user),
    service: BookmarkCounterService = Depends(get_bookmark_service),
):
    service.remove_bookmark_by_case(auth.user_id, case_id)
    return Response(status_code=204)

@router.delete("/{bookmark_id}", status_code=204)
def remove_bookmark(
    bookmark_id: str,
    auth: AuthContext = Depends(require_user),
    service: BookmarkCounterService = Depends(get_bookmark_service),
):
    service.remove_bookmark(bookmark_id, auth.user_id)
    return Response(status_code=204)
