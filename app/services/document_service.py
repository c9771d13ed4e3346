import uuid
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.core.database import atomic, store_errors
from app.core.exceptions import NotFoundError
from app.models.case import Case
from app.models.document import Document
from app.models.hearing import Hearing
from app.models.user import User
from app.schemas.document import DocumentCreate
from app.templates.email import DOCUMENT_UPLOADED


class DocumentService:
    """Records uploaded document metadata and announces it to the case.

    File storage happens elsewhere; only the resulting URL is kept.
    """

    def __init__(self, db: Session, dispatcher=None):
        self.db = db
        self.dispatcher = dispatcher

    def record_upload(self, document_in: DocumentCreate, uploaded_by: str) -> Document:
        logger.info(f"Recording document '{document_in.title}' for case {document_in.case_id}")

        with atomic(self.db, f"recording document for case {document_in.case_id}"):
            case = self.db.get(Case, document_in.case_id)
            if case is None:
                raise NotFoundError("Case not found", {"case_id": document_in.case_id})
            if document_in.hearing_id and self.db.get(Hearing, document_in.hearing_id) is None:
                raise NotFoundError("Hearing not found", {"hearing_id": document_in.hearing_id})
            uploader = self.db.get(User, uploaded_by)
            if uploader is None:
                raise NotFoundError("User not found", {"user_id": uploaded_by})

            data = document_in.model_dump()
            data["type"] = document_in.type.value
            document = Document(id=str(uuid.uuid4()), uploaded_by=uploaded_by, **data)
            self.db.add(document)

        self.db.refresh(document)
        self.db.refresh(case)

        if self.dispatcher is not None:
            self.dispatcher.fan_out(
                self.db,
                case,
                DOCUMENT_UPLOADED,
                {
                    "document_id": document.id,
                    "document_title": document.title,
                    "document_type": document.type,
                    "uploaded_by": uploader.full_name,
                    "documents": [{"id": document.id, "is_confidential": document.is_confidential}],
                },
            )
        return document

    def list_for_case(self, case_id: str, doc_type: Optional[str] = None, is_public: Optional[bool] = None) -> List[Document]:
        with store_errors(f"listing documents of case {case_id}"):
            if self.db.get(Case, case_id) is None:
                raise NotFoundError("Case not found", {"case_id": case_id})
            query = self.db.query(Document).filter(Document.case_id == case_id)
            if doc_type:
                query = query.filter(Document.type == doc_type)
            if is_public is not None:
                query = query.filter(Document.is_public.is_(is_public))
            return query.order_by(Document.created_at.desc(), Document.id).all()
