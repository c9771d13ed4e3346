from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.base import Base
from app.models.user import User


class CaseParty(Base):
    __tablename__ = "case_parties"

    id = Column(String, primary_key=True, index=True)
    case_id = Column(String, ForeignKey("cases.id"), nullable=False, index=True)
    # Null when the party has no registered account
    user_id = Column(String, ForeignKey("users.id"))
    party_type = Column(String, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String)
    phone = Column(String)
    address = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship(User, lazy="joined")
