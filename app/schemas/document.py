from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional

from app.models.document import DocumentType

class DocumentCreate(BaseModel):
    case_id: str
    hearing_id: Optional[str] = None
    title: str = Field(..., min_length=1)
    type: DocumentType
    url: Optional[str] = None
    description: Optional[str] = None
    document_date: Optional[date] = None
    is_confidential: bool = False
    is_public: bool = True

class Document(DocumentCreate):
    id: str
    uploaded_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
