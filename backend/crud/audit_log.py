import logging

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from schemas.audit_log import AuditLogCreate

logger = logging.getLogger(__name__)


def create_audit_log(db: Session, log_entry: AuditLogCreate):
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    db.commit()
    db.refresh(db_log_entry)
    return db_log_entry


def record_change(db: Session, table_name: str, record_id, action: str, changed_by: str = "system",
                  old_values: dict = None, new_values: dict = None):
    """
    Write an audit row after the main change has been committed.

    A failing audit write never undoes the change it describes; it is rolled
    back on its own and reported as a warning.
    """
    try:
        log_entry = AuditLogCreate(
            table_name=table_name,
            record_id=str(record_id),
            changed_by=changed_by,
            action=action,
            old_values=old_values or {},
            new_values=new_values or {},
        )
        return create_audit_log(db, log_entry)
    except (SQLAlchemyError, SchemaValidationError) as e:
        db.rollback()
        logger.warning(f"Audit log for {table_name} {record_id} ({action}) was not written: {e}")
        return None
