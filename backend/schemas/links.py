from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
import enum

from config import DEFAULT_PARTNERSHIP_TYPE
from schemas.journal import Journal
from schemas.partner import Partner
from schemas.good import Good
from schemas.tax_code import TaxCode
from utils import clean_partnership_type


class LinkEntityType(str, enum.Enum):
    PARTNER = "partner"
    GOOD = "good"


def _clean_journal_id(v):
    v = v.strip()
    if not v:
        raise ValueError("journal_id must not be empty")
    return v


# --- Two-way links ---

class JournalPartnerLinkCreate(BaseModel):
    journal_id: str
    partner_id: int = Field(gt=0)
    partnership_type: str = DEFAULT_PARTNERSHIP_TYPE

    @field_validator('journal_id')
    @classmethod
    def validate_journal_id(cls, v):
        return _clean_journal_id(v)

    @field_validator('partnership_type')
    @classmethod
    def validate_partnership_type(cls, v):
        return clean_partnership_type(v)


class JournalPartnerLink(BaseModel):
    id: int
    journal_id: str
    partner_id: int
    partnership_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JournalPartnerLinkDetail(JournalPartnerLink):
    journal: Optional[Journal] = None
    partner: Optional[Partner] = None


class JournalGoodLinkCreate(BaseModel):
    journal_id: str
    good_id: int = Field(gt=0)

    @field_validator('journal_id')
    @classmethod
    def validate_journal_id(cls, v):
        return _clean_journal_id(v)


class JournalGoodLink(BaseModel):
    id: int
    journal_id: str
    good_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LinkPropagationRequest(BaseModel):
    """Link an entity to a terminal journal and every ancestor above it."""
    entity_id: int = Field(gt=0)
    terminal_journal_id: str
    partnership_type: Optional[str] = None

    @field_validator('terminal_journal_id')
    @classmethod
    def validate_journal_id(cls, v):
        return _clean_journal_id(v)

    @field_validator('partnership_type')
    @classmethod
    def validate_partnership_type(cls, v):
        if v is None:
            return v
        return clean_partnership_type(v)


# --- Three-way links ---

class JournalPartnerGoodLinkCreate(BaseModel):
    """Raw creation, for callers that already resolved the two-way link."""
    journal_partner_link_id: int = Field(gt=0)
    good_id: int = Field(gt=0)
    descriptive_text: Optional[str] = None
    contextual_tax_code_id: Optional[int] = Field(default=None, gt=0)


class JournalPartnerGoodLinkOrchestratedCreate(BaseModel):
    """Creation from (journal, partner, good); the two-way link is found or created."""
    journal_id: str
    partner_id: int = Field(gt=0)
    good_id: int = Field(gt=0)
    partnership_type: str = DEFAULT_PARTNERSHIP_TYPE
    descriptive_text: Optional[str] = None
    contextual_tax_code_id: Optional[int] = Field(default=None, gt=0)

    @field_validator('journal_id')
    @classmethod
    def validate_journal_id(cls, v):
        return _clean_journal_id(v)

    @field_validator('partnership_type')
    @classmethod
    def validate_partnership_type(cls, v):
        return clean_partnership_type(v)


class JournalPartnerGoodLink(BaseModel):
    id: int
    journal_partner_link_id: int
    good_id: int
    descriptive_text: Optional[str] = None
    contextual_tax_code_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JournalPartnerGoodLinkDetail(JournalPartnerGoodLink):
    journal_partner_link: Optional[JournalPartnerLinkDetail] = None
    good: Optional[Good] = None
    contextual_tax_code: Optional[TaxCode] = None


# --- Bulk operations ---

class BulkCreateRequest(BaseModel):
    links: List[JournalPartnerGoodLinkOrchestratedCreate] = Field(min_length=1)


class BulkDeleteRequest(BaseModel):
    link_ids: List[int] = Field(min_length=1)


class BulkItemError(BaseModel):
    index: int
    link_id: Optional[int] = None
    error: str
    error_type: str


class BulkCreateResult(BaseModel):
    outcome: Literal["success", "partial", "failed"]
    links: List[JournalPartnerGoodLink] = []
    errors: List[BulkItemError] = []
    message: str


class BulkDeleteResult(BaseModel):
    outcome: Literal["success", "partial", "failed"]
    deleted_ids: List[int] = []
    errors: List[BulkItemError] = []
    message: str
