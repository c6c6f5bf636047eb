import logging
from typing import Iterable, List, Optional

from sqlalchemy import Integer, delete, literal_column, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from config import MAX_DELETION_PASSES, MAX_HIERARCHY_DEPTH
from crud.audit_log import record_change
from exceptions import ConflictError, InvariantViolationError, NotFoundError
from models.journal import Journal
from schemas.journal import JournalCreate, JournalUpdate
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)


def get_journal(db: Session, journal_id: str):
    return db.query(Journal).filter(Journal.id == journal_id).first()


def get_journals(db: Session):
    return db.query(Journal).order_by(Journal.id).all()


def get_root_journals(db: Session):
    return db.query(Journal).filter(Journal.parent_id.is_(None)).order_by(Journal.id).all()


def get_journal_children(db: Session, journal_id: str):
    return db.query(Journal).filter(Journal.parent_id == journal_id).order_by(Journal.id).all()


def _has_children(db: Session, journal_id: str) -> bool:
    return db.query(Journal.id).filter(Journal.parent_id == journal_id).first() is not None


def _parents_with_children():
    return select(Journal.parent_id).where(Journal.parent_id.isnot(None))


def _refresh_terminal_flags(db: Session, journal_ids: Iterable[str]):
    """Mark as terminal every given journal that no longer has children."""
    journal_ids = [journal_id for journal_id in journal_ids if journal_id is not None]
    if not journal_ids:
        return
    db.execute(
        update(Journal)
        .where(Journal.id.in_(journal_ids), Journal.id.not_in(_parents_with_children()))
        .values(is_terminal=True)
        .execution_options(synchronize_session=False)
    )


def create_journal(db: Session, journal: JournalCreate, user_id: str = "system"):
    if get_journal(db, journal.id) is not None:
        raise ConflictError(f"Journal '{journal.id}' already exists", journal_id=journal.id)

    parent = None
    if journal.parent_id is not None:
        parent = get_journal(db, journal.parent_id)
        if parent is None:
            raise NotFoundError(f"Parent journal '{journal.parent_id}' not found", journal_id=journal.parent_id)

    db_journal = Journal(
        id=journal.id,
        name=journal.name,
        parent_id=journal.parent_id,
        is_terminal=True,
        additional_details=journal.additional_details,
        created_by=user_id,
    )
    db.add(db_journal)
    if parent is not None and parent.is_terminal:
        parent.is_terminal = False
        parent.updated_by = user_id
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Journal '{journal.id}' already exists", journal_id=journal.id)
    db.refresh(db_journal)
    logger.info(f"Journal '{db_journal.id}' created under '{db_journal.parent_id}' by {user_id}")

    record_change(db, 'journals', db_journal.id, 'CREATE', user_id, new_values=sqlalchemy_to_dict(db_journal))
    return db_journal


def update_journal(db: Session, journal_id: str, journal_update: JournalUpdate, user_id: str = "system"):
    """Rename a journal or replace its details. The parent is fixed at creation."""
    db_journal = get_journal(db, journal_id)
    if db_journal is None:
        raise NotFoundError(f"Journal '{journal_id}' not found", journal_id=journal_id)

    old_values = sqlalchemy_to_dict(db_journal)
    for key, value in journal_update.model_dump(exclude_unset=True).items():
        setattr(db_journal, key, value)
    db_journal.updated_by = user_id
    db.commit()
    db.refresh(db_journal)

    record_change(db, 'journals', journal_id, 'UPDATE', user_id,
                  old_values=old_values, new_values=sqlalchemy_to_dict(db_journal))
    return db_journal


def delete_journal(db: Session, journal_id: str, user_id: str = "system"):
    db_journal = get_journal(db, journal_id)
    if db_journal is None:
        raise NotFoundError(f"Journal '{journal_id}' not found", journal_id=journal_id)
    if _has_children(db, journal_id):
        raise ConflictError(f"Journal '{journal_id}' still has child journals", journal_id=journal_id)

    old_values = sqlalchemy_to_dict(db_journal)
    parent_id = db_journal.parent_id
    # Core delete so the database cascades to the journal's links
    db.execute(delete(Journal).where(Journal.id == journal_id).execution_options(synchronize_session="fetch"))
    _refresh_terminal_flags(db, [parent_id])
    db.commit()
    logger.info(f"Journal '{journal_id}' deleted by {user_id}")

    record_change(db, 'journals', journal_id, 'DELETE', user_id, old_values=old_values)
    return old_values


def get_journal_ancestors(db: Session, journal_id: str) -> List[Journal]:
    """
    Return the path from the root down to ``journal_id``, both ends included.

    Walks parent pointers with a recursive CTE. The walk is cut off at
    MAX_HIERARCHY_DEPTH; a path that long means the parent graph has a cycle.
    """
    chain = (
        select(Journal.id, Journal.parent_id, literal_column("0", Integer).label("depth"))
        .where(Journal.id == journal_id)
        .cte(name="journal_ancestors", recursive=True)
    )
    parent = aliased(Journal)
    chain = chain.union_all(
        select(parent.id, parent.parent_id, (chain.c.depth + 1).label("depth"))
        .where(parent.id == chain.c.parent_id, chain.c.depth < MAX_HIERARCHY_DEPTH)
    )
    rows = db.execute(select(chain.c.id, chain.c.depth).order_by(chain.c.depth.desc())).all()
    if not rows:
        return []
    if rows[0].depth >= MAX_HIERARCHY_DEPTH:
        logger.error(f"Ancestor walk from '{journal_id}' reached depth {MAX_HIERARCHY_DEPTH}")
        raise InvariantViolationError(
            f"Ancestor chain of journal '{journal_id}' exceeds {MAX_HIERARCHY_DEPTH} levels (possible cycle)",
            journal_id=journal_id,
        )

    path_ids = [row.id for row in rows]
    journals = {j.id: j for j in db.query(Journal).filter(Journal.id.in_(path_ids)).all()}
    return [journals[path_id] for path_id in path_ids]


def get_descendant_journal_ids(db: Session, journal_ids: Iterable[str]) -> List[str]:
    """
    Return every journal reachable downwards from ``journal_ids``.

    Inputs that exist are part of the result; unknown ids are ignored. The
    result is deduplicated across overlapping subtrees and sorted.
    """
    journal_ids = list(dict.fromkeys(journal_ids))
    if not journal_ids:
        return []

    tree = (
        select(Journal.id, literal_column("0", Integer).label("depth"))
        .where(Journal.id.in_(journal_ids))
        .cte(name="journal_descendants", recursive=True)
    )
    child = aliased(Journal)
    tree = tree.union_all(
        select(child.id, (tree.c.depth + 1).label("depth"))
        .where(child.parent_id == tree.c.id, tree.c.depth < MAX_HIERARCHY_DEPTH)
    )
    rows = db.execute(select(tree.c.id, tree.c.depth)).all()
    if any(row.depth >= MAX_HIERARCHY_DEPTH for row in rows):
        logger.error(f"Descendant walk from {journal_ids} reached depth {MAX_HIERARCHY_DEPTH}")
        raise InvariantViolationError(
            f"Journal subtree exceeds {MAX_HIERARCHY_DEPTH} levels (possible cycle)",
            journal_ids=journal_ids,
        )
    return sorted({row.id for row in rows})


def delete_journals_safely(db: Session, journal_ids: Optional[List[str]] = None, user_id: str = "system"):
    """
    Delete the given journals (or the whole hierarchy when ``journal_ids`` is
    None) by repeated leaf pruning.

    Each pass removes every targeted journal that currently has no children.
    Passes continue until no target is left. A pass that removes nothing, or
    running past MAX_DELETION_PASSES, raises InvariantViolationError and the
    whole deletion is rolled back.

    Returns a dict with the deleted ids, the ids removed per pass and the
    requested ids that did not exist.
    """
    if journal_ids is None:
        targets = set(db.scalars(select(Journal.id)).all())
        skipped_ids = []
    else:
        requested = set(journal_ids)
        targets = set(db.scalars(select(Journal.id).where(Journal.id.in_(requested))).all()) if requested else set()
        skipped_ids = sorted(requested - targets)
        if skipped_ids:
            logger.warning(f"Safe deletion skipped unknown journals {skipped_ids}")

    passes = []
    try:
        while targets:
            if len(passes) >= MAX_DELETION_PASSES:
                raise InvariantViolationError(
                    f"Journal deletion did not finish within {MAX_DELETION_PASSES} passes",
                    remaining_ids=sorted(targets),
                )
            leaves = set(db.scalars(
                select(Journal.id).where(Journal.id.in_(targets), Journal.id.not_in(_parents_with_children()))
            ).all())
            if not leaves:
                raise InvariantViolationError(
                    "Journal deletion made no progress; the remaining journals still have children",
                    remaining_ids=sorted(targets),
                    passes=len(passes),
                )
            parent_ids = set(db.scalars(
                select(Journal.parent_id).where(Journal.id.in_(leaves), Journal.parent_id.isnot(None))
            ).all())
            db.execute(
                delete(Journal).where(Journal.id.in_(leaves)).execution_options(synchronize_session="fetch")
            )
            _refresh_terminal_flags(db, parent_ids - leaves)
            targets -= leaves
            passes.append(sorted(leaves))
            logger.info(f"Deletion pass {len(passes)} removed {len(leaves)} journals")
        db.commit()
    except InvariantViolationError as e:
        db.rollback()
        logger.error(f"{e.message}: {e.details}")
        raise

    deleted_ids = [journal_id for deleted in passes for journal_id in deleted]
    for journal_id in deleted_ids:
        record_change(db, 'journals', journal_id, 'DELETE', user_id)
    return {"deleted_ids": deleted_ids, "passes": passes, "skipped_ids": skipped_ids}
