from datetime import date, datetime

import pytest

from app.core.exceptions import ConflictError, NotFoundError
from app.models.case import Case
from app.services.bookmark_counter_service import BookmarkCounterService
from conftest import FixedClock, make_case, make_user


def bookmark_count(db, case):
    db.refresh(case)
    return case.bookmark_count


class TestBookmarkCounter:
    def test_add_then_remove_restores_counter(self, db, case):
        user = make_user(db)
        service = BookmarkCounterService(db)

        bookmark = service.add_bookmark(user.id, case.id, notes="follow closely")
        assert bookmark_count(db, case) == 1
        assert bookmark.notes == "follow closely"

        service.remove_bookmark(bookmark.id, user.id)
        assert bookmark_count(db, case) == 0

    def test_duplicate_bookmark_conflicts_and_keeps_counter(self, db, case):
        user = make_user(db)
        service = BookmarkCounterService(db)
        service.add_bookmark(user.id, case.id)

        with pytest.raises(ConflictError):
            service.add_bookmark(user.id, case.id)
        assert bookmark_count(db, case) == 1

    def test_remove_by_case(self, db, case):
        user = make_user(db)
        service = BookmarkCounterService(db)

        service.add_bookmark(user.id, case.id)
        assert bookmark_count(db, case) == 1
        service.remove_bookmark_by_case(user.id, case.id)
        assert bookmark_count(db, case) == 0
        assert service.check_bookmark(user.id, case.id) == {"is_bookmarked": False, "bookmark_id": None}

    def test_bookmark_on_missing_case(self, db):
        user = make_user(db)
        with pytest.raises(NotFoundError):
            BookmarkCounterService(db).add_bookmark(user.id, "missing")

    def test_bookmark_by_unknown_user(self, db, case):
        with pytest.raises(NotFoundError):
            BookmarkCounterService(db).add_bookmark("ghost", case.id)
        assert bookmark_count(db, case) == 0

    def test_cannot_remove_someone_elses_bookmark(self, db, case):
        owner = make_user(db)
        stranger = make_user(db)
        service = BookmarkCounterService(db)
        bookmark = service.add_bookmark(owner.id, case.id)

        with pytest.raises(NotFoundError):
            service.remove_bookmark(bookmark.id, stranger.id)
        assert bookmark_count(db, case) == 1

    def test_remove_missing_pair_leaves_counter(self, db, case):
        user = make_user(db)
        with pytest.raises(NotFoundError):
            BookmarkCounterService(db).remove_bookmark_by_case(user.id, case.id)
        assert bookmark_count(db, case) == 0

    def test_counter_is_floored_at_zero(self, db, case):
        user = make_user(db)
        service = BookmarkCounterService(db)
        service.add_bookmark(user.id, case.id)
        db.query(Case).filter(Case.id == case.id).update({Case.bookmark_count: 0})
        db.commit()

        service.remove_bookmark_by_case(user.id, case.id)
        assert bookmark_count(db, case) == 0


class TestBookmarkQueries:
    def test_update_notes_and_check(self, db, case):
        user = make_user(db)
        service = BookmarkCounterService(db)
        bookmark = service.add_bookmark(user.id, case.id)

        updated = service.update_notes(bookmark.id, user.id, "verdict expected in July")
        assert updated.notes == "verdict expected in July"
        assert service.check_bookmark(user.id, case.id) == {"is_bookmarked": True, "bookmark_id": bookmark.id}
        assert [b.id for b in service.get_user_bookmarks(user.id)] == [bookmark.id]

    def test_upcoming_hearings_filter(self, db, filer):
        user = make_user(db)
        soon = make_case(db, filer)
        past = make_case(db, filer)
        soon.next_hearing_date = date(2024, 6, 10)
        past.next_hearing_date = date(2024, 5, 10)
        db.commit()

        service = BookmarkCounterService(db, clock=FixedClock(datetime(2024, 6, 1)))
        service.add_bookmark(user.id, soon.id)
        service.add_bookmark(user.id, past.id)

        assert [b.case_id for b in service.bookmarks_with_upcoming_hearings(user.id)] == [soon.id]

    def test_statistics(self, db, filer):
        first, second = make_case(db, filer), make_case(db, filer)
        alice, bob = make_user(db), make_user(db)
        service = BookmarkCounterService(db)
        service.add_bookmark(alice.id, first.id)
        service.add_bookmark(bob.id, first.id)
        service.add_bookmark(alice.id, second.id)

        stats = service.statistics()

        assert stats["total_bookmarks"] == 3
        assert stats["unique_users_bookmarking"] == 2
        assert stats["unique_cases_bookmarked"] == 2
        assert stats["top_bookmarked_cases"][0]["case_id"] == first.id
        assert stats["top_bookmarked_cases"][0]["bookmark_count"] == 2
