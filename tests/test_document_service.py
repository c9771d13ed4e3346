import pytest

from app.core.exceptions import NotFoundError
from app.schemas.document import DocumentCreate
from app.services.document_service import DocumentService
from conftest import make_party


def document_for(case, confidential=False, **extra):
    return DocumentCreate(case_id=case.id, title="Charge sheet", type="petition", is_confidential=confidential, **extra)


class TestRecordUpload:
    def test_public_document_notifies_everyone(self, db, case, filer, dispatcher, mailer):
        make_party(db, case, name="Rhea", email="rhea@example.com")
        document = DocumentService(db, dispatcher).record_upload(document_for(case), uploaded_by=filer.id)
        dispatcher.shutdown(wait=True)

        assert document.type == "petition"
        assert mailer.addresses == ["filer@example.com", "rhea@example.com"]
        assert mailer.attempts[0]["data"]["uploaded_by"] == "Fiona Filer"

    def test_confidential_document_notifies_nobody(self, db, case, filer, dispatcher, mailer):
        for i in range(3):
            make_party(db, case, name=f"P{i}", email=f"p{i}@example.com")

        DocumentService(db, dispatcher).record_upload(document_for(case, confidential=True), uploaded_by=filer.id)
        dispatcher.shutdown(wait=True)

        assert mailer.attempts == []

    def test_unknown_hearing_is_not_found(self, db, case, filer):
        with pytest.raises(NotFoundError):
            DocumentService(db).record_upload(document_for(case, hearing_id="missing"), uploaded_by=filer.id)

    def test_list_filters(self, db, case, filer):
        service = DocumentService(db)
        service.record_upload(document_for(case), uploaded_by=filer.id)
        service.record_upload(
            DocumentCreate(case_id=case.id, title="Sealed order", type="order", is_public=False),
            uploaded_by=filer.id,
        )

        assert len(service.list_for_case(case.id)) == 2
        assert [d.title for d in service.list_for_case(case.id, doc_type="order")] == ["Sealed order"]
        assert [d.title for d in service.list_for_case(case.id, is_public=True)] == ["Charge sheet"]
