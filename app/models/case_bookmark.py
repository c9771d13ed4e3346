from sqlalchemy import Column, String, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.base import Base
from app.models.case import Case


class CaseBookmark(Base):
    __tablename__ = "case_bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "case_id", name="uq_case_bookmarks_user_case"),)

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    case_id = Column(String, ForeignKey("cases.id"), nullable=False, index=True)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    case = relationship(Case, lazy="joined")
