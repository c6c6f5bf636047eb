from sqlalchemy import Column, Integer, String, DateTime, JSON
from database import Base
from models.audit_mixin import now_in_app_timezone


class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, index=True)
    table_name = Column(String, nullable=False)
    record_id = Column(String, nullable=False)  # journal codes are strings, link ids are stringified
    changed_at = Column(DateTime(timezone=True), default=now_in_app_timezone)
    changed_by = Column(String, nullable=False)
    action = Column(String, nullable=False)  # e.g. 'CREATE', 'UPDATE', 'DELETE'
    old_values = Column(JSON)
    new_values = Column(JSON)
