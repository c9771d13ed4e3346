import pytest

from app.models.user import UserRole
from app.services.notification_dispatcher import (
    NotificationDispatcher,
    Recipient,
    dedupe_recipients,
    resolve_party_recipient,
)
from app.templates.email import CASE_STATUS_CHANGED, DOCUMENT_UPLOADED
from conftest import RecordingMailer, make_party, make_user


class TestRecipientResolution:
    def test_linked_party_uses_account_email(self, db, case):
        account = make_user(db, email="Account@Example.com", full_name="Ann Account")
        party = make_party(db, case, name="Ann", email="other@example.com", user=account)
        assert resolve_party_recipient(party) == Recipient("account@example.com", "Ann Account")

    def test_external_party_uses_own_email(self, db, case):
        party = make_party(db, case, name="Eddie External", email=" eddie@example.com ")
        assert resolve_party_recipient(party) == Recipient("eddie@example.com", "Eddie External")

    def test_party_without_address_yields_nobody(self, db, case):
        party = make_party(db, case, name="Silent Sam")
        assert resolve_party_recipient(party) is None

    def test_dedupe_keeps_first_occurrence(self):
        recipients = [
            Recipient("a@example.com", "First"),
            None,
            Recipient("a@example.com", "Second"),
            Recipient("b@example.com", "Bee"),
        ]
        assert dedupe_recipients(recipients) == [
            Recipient("a@example.com", "First"),
            Recipient("b@example.com", "Bee"),
        ]


class TestFanOut:
    def test_one_attempt_per_distinct_address(self, db, case, dispatcher, mailer):
        make_party(db, case, name="P1", email="p1@example.com")
        make_party(db, case, name="P2", email="p2@example.com")
        make_party(db, case, name="Filer again", email="FILER@example.com")
        make_party(db, case, name="No mail")

        dispatcher.fan_out(db, case, CASE_STATUS_CHANGED, {"old_status": "filed", "new_status": "admitted"})
        dispatcher.shutdown(wait=True)

        assert mailer.addresses == ["filer@example.com", "p1@example.com", "p2@example.com"]
        assert all(a["timeout"] == 3 for a in mailer.attempts)

    def test_failure_is_isolated_per_recipient(self, db, case, dispatcher, mailer):
        make_party(db, case, name="P1", email="p1@example.com")
        make_party(db, case, name="P2", email="p2@example.com")
        mailer.failing.add("p1@example.com")

        dispatcher.fan_out(db, case, CASE_STATUS_CHANGED, {"old_status": "filed", "new_status": "hearing"})
        dispatcher.shutdown(wait=True)

        assert mailer.addresses == ["filer@example.com", "p1@example.com", "p2@example.com"]
        assert mailer.delivered == ["filer@example.com", "p2@example.com"]

    def test_rejected_send_is_not_retried(self, db, case, dispatcher, mailer):
        mailer.rejecting.add("filer@example.com")
        dispatcher.fan_out(db, case, CASE_STATUS_CHANGED, {})
        dispatcher.shutdown(wait=True)
        assert mailer.addresses == ["filer@example.com"]

    def test_confidential_document_sends_nothing(self, db, case, dispatcher, mailer):
        for i in range(5):
            make_party(db, case, name=f"P{i}", email=f"p{i}@example.com")

        dispatcher.fan_out(
            db,
            case,
            DOCUMENT_UPLOADED,
            {"documents": [{"id": "d1", "is_confidential": False}, {"id": "d2", "is_confidential": True}]},
        )
        dispatcher.shutdown(wait=True)

        assert mailer.attempts == []

    def test_recipient_name_is_per_recipient(self, db, case, dispatcher, mailer):
        make_party(db, case, name="Rita Respondent", email="rita@example.com")
        dispatcher.fan_out(db, case, CASE_STATUS_CHANGED, {})
        dispatcher.shutdown(wait=True)

        names = {a["address"]: a["data"]["recipient_name"] for a in mailer.attempts}
        assert names == {"filer@example.com": "Fiona Filer", "rita@example.com": "Rita Respondent"}
        assert all(a["data"]["case_number"] == "CR-2024-001" for a in mailer.attempts)

    def test_fan_out_after_shutdown_does_not_raise(self, db, case, mailer):
        dispatcher = NotificationDispatcher(mailer, max_workers=1)
        dispatcher.shutdown(wait=True)
        dispatcher.fan_out(db, case, CASE_STATUS_CHANGED, {})
        assert mailer.attempts == []
