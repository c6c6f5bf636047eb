from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal


class TaxCodeBase(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    description: Optional[str] = None
    rate: Decimal = Field(ge=0, le=1)


class TaxCodeCreate(TaxCodeBase):
    pass


class TaxCodeUpdate(BaseModel):
    description: Optional[str] = None
    rate: Optional[Decimal] = Field(default=None, ge=0, le=1)


class TaxCode(TaxCodeBase):
    id: int

    class Config:
        from_attributes = True
