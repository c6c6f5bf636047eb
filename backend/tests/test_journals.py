import pytest
from sqlalchemy import update

from crud import journals as crud_journals
from exceptions import ConflictError, InvariantViolationError, NotFoundError
from models.audit_log import AuditLog
from models.journal import Journal
from schemas.journal import JournalCreate, JournalUpdate
from tests.factories import make_journals


def _ids(db):
    return sorted(j.id for j in crud_journals.get_journals(db))


def test_create_journal_marks_parent_non_terminal(db):
    make_journals(db, ("1", None), ("10", "1"))

    assert crud_journals.get_journal(db, "1").is_terminal is False
    assert crud_journals.get_journal(db, "10").is_terminal is True
    assert [j.id for j in crud_journals.get_root_journals(db)] == ["1"]
    assert [j.id for j in crud_journals.get_journal_children(db, "1")] == ["10"]


def test_create_journal_with_missing_parent(db):
    with pytest.raises(NotFoundError):
        crud_journals.create_journal(db, JournalCreate(id="10", name="Orphan", parent_id="1"))
    assert _ids(db) == []


def test_create_duplicate_journal(db):
    make_journals(db, ("1", None))
    with pytest.raises(ConflictError):
        crud_journals.create_journal(db, JournalCreate(id="1", name="Again"))


def test_create_journal_writes_audit_row(db):
    make_journals(db, ("1", None))
    rows = db.query(AuditLog).filter(AuditLog.table_name == "journals").all()
    assert [(r.record_id, r.action) for r in rows] == [("1", "CREATE")]


def test_update_journal_keeps_parent(db):
    make_journals(db, ("1", None), ("10", "1"))
    updated = crud_journals.update_journal(db, "10", JournalUpdate(name="Receivables"))
    assert updated.name == "Receivables"
    assert updated.parent_id == "1"


def test_ancestors_root_first(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"))
    assert [j.id for j in crud_journals.get_journal_ancestors(db, "101")] == ["1", "10", "101"]
    assert [j.id for j in crud_journals.get_journal_ancestors(db, "1")] == ["1"]
    assert crud_journals.get_journal_ancestors(db, "missing") == []


def test_descendants_include_inputs_and_merge_overlaps(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"), ("11", "1"), ("2", None))
    assert crud_journals.get_descendant_journal_ids(db, ["1"]) == ["1", "10", "101", "11"]
    assert crud_journals.get_descendant_journal_ids(db, ["1", "10"]) == ["1", "10", "101", "11"]
    assert crud_journals.get_descendant_journal_ids(db, ["101", "2", "nope"]) == ["101", "2"]
    assert crud_journals.get_descendant_journal_ids(db, []) == []


def test_delete_leaf_in_one_pass(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"))

    report = crud_journals.delete_journals_safely(db, ["101"])

    assert report["passes"] == [["101"]]
    assert _ids(db) == ["1", "10"]
    assert crud_journals.get_journal(db, "10").is_terminal is True


def test_delete_all_prunes_leaves_first(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"), ("11", "1"), ("2", None))

    report = crud_journals.delete_journals_safely(db, None)

    assert report["passes"] == [["101", "11", "2"], ["10"], ["1"]]
    assert sorted(report["deleted_ids"]) == ["1", "10", "101", "11", "2"]
    assert _ids(db) == []


def test_delete_order_of_request_does_not_matter(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"))
    report = crud_journals.delete_journals_safely(db, ["1", "10", "101"])
    assert len(report["passes"]) == 3
    assert _ids(db) == []


def test_delete_reports_unknown_ids(db):
    make_journals(db, ("1", None))
    report = crud_journals.delete_journals_safely(db, ["1", "404"])
    assert report["deleted_ids"] == ["1"]
    assert report["skipped_ids"] == ["404"]


def test_delete_parent_with_untargeted_child_rolls_back(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"), ("11", "1"))

    with pytest.raises(InvariantViolationError):
        crud_journals.delete_journals_safely(db, ["1", "11"])

    # the pass that removed "11" is undone as well
    assert _ids(db) == ["1", "10", "101", "11"]


def test_delete_stops_at_pass_limit(db, monkeypatch):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"))
    monkeypatch.setattr(crud_journals, "MAX_DELETION_PASSES", 2)

    with pytest.raises(InvariantViolationError):
        crud_journals.delete_journals_safely(db, None)
    assert _ids(db) == ["1", "10", "101"]


def test_cycle_is_reported_not_looped(db):
    make_journals(db, ("a", None), ("b", "a"))
    # a write from outside the service closes the loop a -> b -> a
    db.execute(update(Journal).where(Journal.id == "a").values(parent_id="b"))
    db.commit()

    with pytest.raises(InvariantViolationError):
        crud_journals.get_journal_ancestors(db, "b")
    with pytest.raises(InvariantViolationError):
        crud_journals.get_descendant_journal_ids(db, ["a"])
    with pytest.raises(InvariantViolationError):
        crud_journals.delete_journals_safely(db, None)
    assert _ids(db) == ["a", "b"]


def test_delete_single_journal(db):
    make_journals(db, ("1", None), ("10", "1"))

    with pytest.raises(ConflictError):
        crud_journals.delete_journal(db, "1")
    crud_journals.delete_journal(db, "10")

    assert _ids(db) == ["1"]
    assert crud_journals.get_journal(db, "1").is_terminal is True
    with pytest.raises(NotFoundError):
        crud_journals.delete_journal(db, "10")
