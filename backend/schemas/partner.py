from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from models.partner import PartnerType


class PartnerBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    partner_type: PartnerType = PartnerType.LEGAL_ENTITY
    notes: Optional[str] = None
    tax_id: Optional[str] = Field(default=None, max_length=100)
    registration_number: Optional[str] = Field(default=None, max_length=100)


class PartnerCreate(PartnerBase):
    pass


class PartnerUpdate(BaseModel):
    # partner_type is fixed at creation
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    notes: Optional[str] = None
    tax_id: Optional[str] = Field(default=None, max_length=100)
    registration_number: Optional[str] = Field(default=None, max_length=100)


class Partner(PartnerBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
