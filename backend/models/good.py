from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin


class Good(Base, AuditMixin):
    __tablename__ = "goods"

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String(255), nullable=False, index=True)
    reference_code = Column(String(100), nullable=True)
    barcode = Column(String(100), nullable=True)
    type_code = Column(String(50), nullable=True)  # e.g. "GOOD", "SERVICE"
    description = Column(Text, nullable=True)
    tax_code_id = Column(Integer, ForeignKey("tax_codes.id"), nullable=True)

    # Relationships
    tax_code = relationship("TaxCode")
    journal_links = relationship("JournalGoodLink", back_populates="good")
