from enum import Enum

from sqlalchemy import Column, String, Boolean, Date, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from app.core.base import Base


class DocumentType(str, Enum):
    PETITION = "petition"
    AFFIDAVIT = "affidavit"
    ORDER = "order"
    JUDGMENT = "judgment"
    EVIDENCE = "evidence"
    NOTICE = "notice"
    PLEADING = "pleading"
    MISC = "misc"


class Document(Base):
    __tablename__ = "documents"

    id = Column(String, primary_key=True, index=True)
    case_id = Column(String, ForeignKey("cases.id"), nullable=False, index=True)
    hearing_id = Column(String, ForeignKey("hearings.id"))
    uploaded_by = Column(String, ForeignKey("users.id"), nullable=False)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)
    url = Column(String)
    description = Column(Text)
    document_date = Column(Date)
    is_confidential = Column(Boolean, nullable=False, default=False)
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
