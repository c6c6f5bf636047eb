from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class JournalPartnerLink(Base, TimestampMixin):
    __tablename__ = "journal_partner_links"
    __table_args__ = (
        UniqueConstraint('journal_id', 'partner_id', 'partnership_type', name='_journal_partner_type_uc'),
    )

    id = Column(Integer, primary_key=True, index=True)
    journal_id = Column(String(50), ForeignKey("journals.id", ondelete="CASCADE"), nullable=False, index=True)
    partner_id = Column(Integer, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    partnership_type = Column(String(50), nullable=False)

    # Relationships
    journal = relationship("Journal", back_populates="partner_links")
    partner = relationship("Partner", back_populates="journal_links")
    good_links = relationship("JournalPartnerGoodLink", back_populates="journal_partner_link", passive_deletes=True)
