import pytest
from sqlalchemy.exc import OperationalError

from crud import audit_log as crud_audit_log
from models.audit_log import AuditLog


def test_record_change_writes_row(db):
    row = crud_audit_log.record_change(db, "journals", "1", "CREATE", "alice", new_values={"name": "Assets"})

    assert row.record_id == "1"
    assert row.changed_by == "alice"
    assert db.query(AuditLog).count() == 1


def test_database_failure_is_reported_not_raised(db, monkeypatch):
    def failing_write(*args, **kwargs):
        raise OperationalError("INSERT INTO audit_log", {}, Exception("disk full"))

    monkeypatch.setattr(crud_audit_log, "create_audit_log", failing_write)

    assert crud_audit_log.record_change(db, "journals", "1", "CREATE") is None


def test_programming_errors_propagate(db, monkeypatch):
    def broken_write(*args, **kwargs):
        raise TypeError("unexpected keyword")

    monkeypatch.setattr(crud_audit_log, "create_audit_log", broken_write)

    with pytest.raises(TypeError):
        crud_audit_log.record_change(db, "journals", "1", "CREATE")
