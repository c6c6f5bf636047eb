from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from schemas.tax_code import TaxCode


class GoodBase(BaseModel):
    label: str = Field(min_length=1, max_length=255)
    reference_code: Optional[str] = None
    barcode: Optional[str] = None
    type_code: Optional[str] = None
    description: Optional[str] = None
    tax_code_id: Optional[int] = Field(default=None, gt=0)


class GoodCreate(GoodBase):
    pass


class GoodUpdate(BaseModel):
    # reference_code and barcode are immutable identifiers
    label: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type_code: Optional[str] = None
    description: Optional[str] = None
    tax_code_id: Optional[int] = Field(default=None, gt=0)


class Good(GoodBase):
    id: int
    tax_code: Optional[TaxCode] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
