from pydantic import BaseModel, field_validator
from typing import Optional, List, Any
from datetime import datetime


def _clean_journal_code(v):
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("journal id must not be empty")
    if any(ch.isspace() for ch in v):
        raise ValueError("journal id must not contain whitespace")
    return v


class JournalBase(BaseModel):
    name: str
    additional_details: Optional[Any] = None


class JournalCreate(JournalBase):
    id: str
    parent_id: Optional[str] = None

    @field_validator('id', 'parent_id')
    @classmethod
    def validate_codes(cls, v):
        return _clean_journal_code(v)


class JournalUpdate(BaseModel):
    name: Optional[str] = None
    additional_details: Optional[Any] = None


class Journal(JournalBase):
    id: str
    parent_id: Optional[str] = None
    is_terminal: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JournalDeleteRequest(BaseModel):
    # None means "the whole hierarchy"
    journal_ids: Optional[List[str]] = None

    @field_validator('journal_ids')
    @classmethod
    def validate_codes(cls, v):
        if v is None:
            return v
        return [_clean_journal_code(code) for code in v]


class JournalDeletionReport(BaseModel):
    deleted_ids: List[str]
    passes: List[List[str]]
    skipped_ids: List[str] = []
