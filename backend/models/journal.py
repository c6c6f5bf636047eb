from sqlalchemy import Column, String, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Journal(Base, TimestampMixin):
    __tablename__ = "journals"

    # Business-meaningful hierarchical code, e.g. "3" -> "31" -> "311"
    id = Column(String(50), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(String(50), ForeignKey("journals.id"), nullable=True, index=True)
    is_terminal = Column(Boolean, nullable=False, default=True)
    additional_details = Column(JSON, nullable=True)

    # Relationships
    parent = relationship("Journal", remote_side=[id], back_populates="children")
    children = relationship("Journal", back_populates="parent")
    partner_links = relationship("JournalPartnerLink", back_populates="journal", passive_deletes=True)
    good_links = relationship("JournalGoodLink", back_populates="journal", passive_deletes=True)
