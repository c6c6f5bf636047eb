from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class JournalGoodLink(Base, TimestampMixin):
    __tablename__ = "journal_good_links"
    __table_args__ = (UniqueConstraint('journal_id', 'good_id', name='_journal_good_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    journal_id = Column(String(50), ForeignKey("journals.id", ondelete="CASCADE"), nullable=False, index=True)
    good_id = Column(Integer, ForeignKey("goods.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    journal = relationship("Journal", back_populates="good_links")
    good = relationship("Good", back_populates="journal_links")
