import uuid
from typing import Callable, Dict, List, Optional

from loguru import logger
from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from app.core.database import atomic, store_errors
from app.core.exceptions import ConflictError, NotFoundError
from app.models.case import Case
from app.models.case_bookmark import CaseBookmark
from app.models.user import User
from app.utils.dates import utcnow


class BookmarkCounterService:
    """Bookmarks plus the denormalized ``bookmark_count`` on the case.

    Creating or deleting a bookmark and moving the counter commit together.
    """

    def __init__(self, db: Session, clock: Callable = utcnow):
        self.db = db
        self.clock = clock

    def _adjust_counter(self, case_id: str, delta: int) -> None:
        query = self.db.query(Case).filter(Case.id == case_id)
        if delta < 0:
            query = query.filter(Case.bookmark_count >= -delta)
        query.update({Case.bookmark_count: Case.bookmark_count + delta}, synchronize_session=False)

    def add_bookmark(self, user_id: str, case_id: str, notes: Optional[str] = None) -> CaseBookmark:
        logger.info(f"User {user_id} bookmarking case {case_id}")

        with atomic(self.db, f"bookmarking case {case_id} for user {user_id}"):
            if self.db.query(Case.id).filter(Case.id == case_id).first() is None:
                raise NotFoundError("Case not found", {"case_id": case_id})
            if self.db.get(User, user_id) is None:
                raise NotFoundError("User not found", {"user_id": user_id})

            existing = self.db.query(CaseBookmark.id).filter(
                CaseBookmark.user_id == user_id,
                CaseBookmark.case_id == case_id,
            ).first()
            if existing is not None:
                raise ConflictError("Case already bookmarked", {"user_id": user_id, "case_id": case_id})

            bookmark = CaseBookmark(id=str(uuid.uuid4()), user_id=user_id, case_id=case_id, notes=notes)
            self.db.add(bookmark)
            # A concurrent duplicate fails here on the unique constraint, before the counter moves
            self.db.flush()
            self._adjust_counter(case_id, 1)

        self.db.refresh(bookmark)
        return bookmark

    def _delete(self, bookmark: CaseBookmark) -> None:
        case_id = bookmark.case_id
        self.db.delete(bookmark)
        self.db.flush()
        self._adjust_counter(case_id, -1)

    def remove_bookmark(self, bookmark_id: str, user_id: str) -> None:
        """Remove one of the user's own bookmarks by id"""
        with atomic(self.db, f"removing bookmark {bookmark_id}"):
            bookmark = self.db.query(CaseBookmark).filter(
                CaseBookmark.id == bookmark_id,
                CaseBookmark.user_id == user_id,
            ).first()
            if bookmark is None:
                raise NotFoundError("Bookmark not found or unauthorized", {"bookmark_id": bookmark_id})
            self._delete(bookmark)
        logger.info(f"Removed bookmark {bookmark_id} of user {user_id}")

    def remove_bookmark_by_case(self, user_id: str, case_id: str) -> None:
        with atomic(self.db, f"removing bookmark of case {case_id} for user {user_id}"):
            bookmark = self.db.query(CaseBookmark).filter(
                CaseBookmark.user_id == user_id,
                CaseBookmark.case_id == case_id,
            ).first()
            if bookmark is None:
                raise NotFoundError("Bookmark not found", {"user_id": user_id, "case_id": case_id})
            self._delete(bookmark)
        logger.info(f"Removed bookmark of case {case_id} for user {user_id}")

    def get_bookmark(self, bookmark_id: str) -> CaseBookmark:
        with store_errors(f"fetching bookmark {bookmark_id}"):
            bookmark = self.db.get(CaseBookmark, bookmark_id)
        if bookmark is None:
            raise NotFoundError("Bookmark not found", {"bookmark_id": bookmark_id})
        return bookmark

    def get_user_bookmarks(self, user_id: str) -> List[CaseBookmark]:
        with store_errors(f"listing bookmarks of user {user_id}"):
            return (
                self.db.query(CaseBookmark)
                .filter(CaseBookmark.user_id == user_id)
                .order_by(CaseBookmark.created_at.desc(), CaseBookmark.id)
                .all()
            )

    def check_bookmark(self, user_id: str, case_id: str) -> Dict:
        with store_errors(f"checking bookmark of case {case_id}"):
            bookmark = self.db.query(CaseBookmark.id).filter(
                CaseBookmark.user_id == user_id,
                CaseBookmark.case_id == case_id,
            ).first()
        return {"is_bookmarked": bookmark is not None, "bookmark_id": bookmark.id if bookmark else None}

    def update_notes(self, bookmark_id: str, user_id: str, notes: Optional[str]) -> CaseBookmark:
        with atomic(self.db, f"updating bookmark {bookmark_id}"):
            bookmark = self.db.query(CaseBookmark).filter(
                CaseBookmark.id == bookmark_id,
                CaseBookmark.user_id == user_id,
            ).first()
            if bookmark is None:
                raise NotFoundError("Bookmark not found or unauthorized", {"bookmark_id": bookmark_id})
            bookmark.notes = notes
        self.db.refresh(bookmark)
        return bookmark

    def bookmarks_with_upcoming_hearings(self, user_id: str) -> List[CaseBookmark]:
        today = self.clock().date()
        with store_errors(f"listing bookmarks with upcoming hearings for user {user_id}"):
            return (
                self.db.query(CaseBookmark)
                .join(Case, Case.id == CaseBookmark.case_id)
                .filter(CaseBookmark.user_id == user_id, Case.next_hearing_date >= today)
                .order_by(Case.next_hearing_date, CaseBookmark.id)
                .all()
            )

    def statistics(self, top: int = 10) -> Dict:
        count = func.count(CaseBookmark.id).label("bookmark_count")
        with store_errors("computing bookmark statistics"):
            top_cases = (
                self.db.query(CaseBookmark.case_id, Case.case_number, Case.title, count)
                .join(Case, Case.id == CaseBookmark.case_id)
                .group_by(CaseBookmark.case_id, Case.case_number, Case.title)
                .order_by(count.desc(), CaseBookmark.case_id)
                .limit(top)
                .all()
            )
            return {
                "total_bookmarks": self.db.query(func.count(CaseBookmark.id)).scalar(),
                "unique_users_bookmarking": self.db.query(func.count(distinct(CaseBookmark.user_id))).scalar(),
                "unique_cases_bookmarked": self.db.query(func.count(distinct(CaseBookmark.case_id))).scalar(),
                "top_bookmarked_cases": [
                    {
                        "case_id": row.case_id,
                        "case_number": row.case_number,
                        "title": row.title,
                        "bookmark_count": row.bookmark_count,
                    }
                    for row in top_cases
                ],
            }
