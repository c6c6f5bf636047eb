from sqlalchemy import Column, Integer, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class JournalPartnerGoodLink(Base, TimestampMixin):
    __tablename__ = "journal_partner_good_links"
    __table_args__ = (
        UniqueConstraint('journal_partner_link_id', 'good_id', name='_journal_partner_link_good_uc'),
    )

    id = Column(Integer, primary_key=True, index=True)
    # The journal and partner are reached through the two-way link, never stored here
    journal_partner_link_id = Column(
        Integer, ForeignKey("journal_partner_links.id", ondelete="CASCADE"), nullable=False, index=True
    )
    good_id = Column(Integer, ForeignKey("goods.id", ondelete="CASCADE"), nullable=False, index=True)
    descriptive_text = Column(Text, nullable=True)
    contextual_tax_code_id = Column(Integer, ForeignKey("tax_codes.id"), nullable=True)

    # Relationships
    journal_partner_link = relationship("JournalPartnerLink", back_populates="good_links")
    good = relationship("Good")
    contextual_tax_code = relationship("TaxCode")
