from sqlalchemy import Column, String, DateTime, ForeignKey
from app.core.base import Base


class CaseView(Base):
    __tablename__ = "case_views"

    id = Column(String, primary_key=True, index=True)
    case_id = Column(String, ForeignKey("cases.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    ip_address = Column(String)
    user_agent = Column(String)
    viewed_at = Column(DateTime, nullable=False, index=True)
