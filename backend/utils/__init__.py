import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import class_mapper

# Bookkeeping columns that would make every audit diff noisy
_AUDIT_SKIP = ("created_at", "updated_at")


def sqlalchemy_to_dict(obj, skip=_AUDIT_SKIP):
    """Convert a mapped row to a JSON-safe dict for the audit log."""
    if obj is None:
        return None
    result = {}
    for column in class_mapper(obj.__class__).columns:
        if column.key in skip:
            continue
        value = getattr(obj, column.key)
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, enum.Enum):
            value = value.value
        result[column.key] = value
    return result


def clean_partnership_type(value):
    """Partnership types are stored stripped and upper case."""
    value = value.strip().upper()
    if not value:
        raise ValueError("partnership_type must not be empty")
    return value


__all__ = ['clean_partnership_type', 'sqlalchemy_to_dict']
