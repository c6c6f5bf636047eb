from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz

from config import APP_TIMEZONE


def now_in_app_timezone():
    return datetime.now(pytz.timezone(APP_TIMEZONE))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    This is the minimal mixin used for the journal tree and the link tables. It
    does NOT include soft-delete columns: links are keyed by unique constraints
    and must be physically removed so they can be recreated later.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_in_app_timezone)
    updated_at = Column(DateTime(timezone=True), onupdate=now_in_app_timezone)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)


class SoftDeleteMixin:
    """Mixin for soft-delete columns (deleted_at, deleted_by).

    Applied to partners and goods. Rows with deleted_at set are hidden from
    every ORM select by the filter registered in database.py.
    """
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)


class AuditMixin(TimestampMixin, SoftDeleteMixin):
    """Timestamps + soft-delete, for master data entities."""
    pass
