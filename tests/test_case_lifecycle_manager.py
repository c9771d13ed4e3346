from datetime import date, datetime

import pytest

from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.models.case import CaseStatus
from app.schemas.case import CaseCreate, CaseUpdate
from app.services.case_lifecycle_manager import CaseLifecycleManager, is_legal_transition
from conftest import FixedClock, make_case, make_party, make_user


class TestTransition:
    """Status changes, date stamping and the notifications they trigger."""

    @pytest.mark.parametrize("status", [s.value for s in CaseStatus])
    def test_any_status_can_be_assigned(self, db, case, status):
        manager = CaseLifecycleManager(db, strict_transitions=False)
        updated = manager.transition(case.id, status)
        assert updated.status == status

    def test_missing_case_raises_not_found(self, db):
        manager = CaseLifecycleManager(db)
        with pytest.raises(NotFoundError):
            manager.transition("does-not-exist", "admitted")

    def test_unknown_status_is_rejected(self, db, case):
        manager = CaseLifecycleManager(db)
        with pytest.raises(InvalidArgumentError):
            manager.transition(case.id, "dismissed")

    def test_admission_date_is_stamped_once(self, db, case, dispatcher, mailer):
        clock = FixedClock(datetime(2024, 3, 1, 9, 30))
        manager = CaseLifecycleManager(db, dispatcher, strict_transitions=False, clock=clock)

        first = manager.transition(case.id, "admitted")
        assert first.admission_date == datetime(2024, 3, 1, 9, 30)

        clock.now = datetime(2024, 4, 1, 12, 0)
        second = manager.transition(case.id, "admitted")
        assert second.admission_date == datetime(2024, 3, 1, 9, 30)

        dispatcher.shutdown(wait=True)
        # The no-op transition still notifies the filer again
        assert [a["address"] for a in mailer.attempts] == ["filer@example.com", "filer@example.com"]

    def test_judgment_date_survives_leaving_and_reentering_judgment(self, db, case):
        clock = FixedClock(datetime(2024, 5, 2, 10, 0))
        manager = CaseLifecycleManager(db, strict_transitions=False, clock=clock)

        manager.transition(case.id, "judgment")
        clock.now = datetime(2024, 6, 2, 10, 0)
        manager.transition(case.id, "hearing")
        updated = manager.transition(case.id, "judgment")

        assert updated.judgment_date == datetime(2024, 5, 2, 10, 0)
        assert updated.admission_date is None

    def test_transition_notifies_filer_and_parties(self, db, case, dispatcher, mailer):
        make_party(db, case, name="Paul Party", email="p1@example.com")
        make_party(db, case, name="Petra Party", email="p2@example.com")

        manager = CaseLifecycleManager(db, dispatcher)
        manager.transition(case.id, "hearing")
        dispatcher.shutdown(wait=True)

        assert mailer.addresses == ["filer@example.com", "p1@example.com", "p2@example.com"]
        assert all(a["template"] == "case_status_changed" for a in mailer.attempts)
        assert mailer.attempts[0]["data"]["old_status"] == "filed"
        assert mailer.attempts[0]["data"]["new_status"] == "hearing"

    def test_failed_delivery_does_not_fail_transition(self, db, case, dispatcher, mailer):
        mailer.failing.add("filer@example.com")
        manager = CaseLifecycleManager(db, dispatcher)

        updated = manager.transition(case.id, "closed")
        dispatcher.shutdown(wait=True)

        assert updated.status == "closed"
        assert mailer.addresses == ["filer@example.com"]

    def test_strict_mode_rejects_illegal_move(self, db, case):
        manager = CaseLifecycleManager(db, strict_transitions=True)
        with pytest.raises(InvalidArgumentError):
            manager.transition(case.id, "judgment")
        db.refresh(case)
        assert case.status == "filed"

    def test_strict_mode_allows_legal_path(self, db, case):
        manager = CaseLifecycleManager(db, strict_transitions=True)
        for status in ["admitted", "hearing", "judgment", "closed", "archived"]:
            assert manager.transition(case.id, status).status == status

    def test_reentering_same_status_is_always_legal(self):
        for status in CaseStatus:
            assert is_legal_transition(status, status)
        assert not is_legal_transition(CaseStatus.ARCHIVED, CaseStatus.FILED)


class TestCaseCrud:
    def test_create_case_normalizes_number(self, db, filer):
        manager = CaseLifecycleManager(db)
        case = manager.create_case(
            CaseCreate(case_number="  cr-2024-777 ", title="People v. Smith", filing_date=date(2024, 2, 1)),
            filed_by=filer.id,
        )
        assert case.case_number == "CR-2024-777"
        assert case.status == "filed"
        assert case.priority == "normal"
        assert (case.hearing_count, case.view_count, case.bookmark_count) == (0, 0, 0)

    def test_duplicate_case_number_conflicts(self, db, filer, case):
        manager = CaseLifecycleManager(db)
        with pytest.raises(ConflictError):
            manager.create_case(
                CaseCreate(case_number="cr-2024-001", title="Duplicate", filing_date=date(2024, 2, 1)),
                filed_by=filer.id,
            )

    def test_unknown_filer_is_not_found(self, db):
        manager = CaseLifecycleManager(db)
        with pytest.raises(NotFoundError):
            manager.create_case(
                CaseCreate(case_number="CR-1", title="Orphan", filing_date=date(2024, 2, 1)),
                filed_by="nobody",
            )

    def test_update_case_only_touches_given_fields(self, db, case):
        manager = CaseLifecycleManager(db)
        updated = manager.update_case(case.id, CaseUpdate(verdict="Acquitted", priority="urgent"))
        assert updated.verdict == "Acquitted"
        assert updated.priority == "urgent"
        assert updated.title == "State v. Doe"

    def test_statistics_groups_by_status(self, db, filer):
        make_case(db, filer, status="filed")
        make_case(db, filer, status="filed")
        make_case(db, filer, status="closed")

        stats = CaseLifecycleManager(db).statistics()

        assert stats["total_cases"] == 3
        assert stats["cases_by_status"] == [{"value": "filed", "count": 2}, {"value": "closed", "count": 1}]
