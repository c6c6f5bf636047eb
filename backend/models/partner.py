from sqlalchemy import Column, Integer, String, Text, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import AuditMixin


class PartnerType(enum.Enum):
    LEGAL_ENTITY = "LEGAL_ENTITY"
    NATURAL_PERSON = "NATURAL_PERSON"


class Partner(Base, AuditMixin):
    __tablename__ = "partners"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    partner_type = Column(Enum(PartnerType), default=PartnerType.LEGAL_ENTITY, nullable=False)
    notes = Column(Text, nullable=True)
    tax_id = Column(String(100), nullable=True)
    registration_number = Column(String(100), nullable=True)

    # Relationships
    journal_links = relationship("JournalPartnerLink", back_populates="partner")
