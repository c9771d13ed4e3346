from typing import List, Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_document_service
from app.core.auth import AuthContext, require_user
from app.models.document import DocumentType
from app.schemas.document import Document, DocumentCreate
from app.services.document_service import DocumentService

router = APIRouter()

@router.post("/", response_model=Document, status_code=201)
def record_document(
    document_in: DocumentCreate,
    auth: AuthContext = Depends(require_user),
    service: DocumentService = Depends(get_document_service),
):
    """Record an uploaded document and notify the case, unless it is confidential"""
    return service.record_upload(document_in, uploaded_by=auth.user_id)

@router.get("/case/{case_id}", response_model=List[Document])
def get_case_documents(
    case_id: str,
    type: Optional[DocumentType] = None,
    is_public: Optional[bool] = None,
    service: DocumentService = Depends(get_document_service),
):
    return service.list_for_case(case_id, doc_type=type.value if type else None, is_public=is_public)
