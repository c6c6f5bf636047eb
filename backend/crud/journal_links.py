import logging
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import DEFAULT_PARTNERSHIP_TYPE
from crud.audit_log import record_change
from crud.goods import get_good
from crud.journals import get_journal, get_journal_ancestors
from crud.partners import get_partner
from exceptions import ConflictError, NotFoundError, ValidationError
from models.journal_good_link import JournalGoodLink
from models.journal_partner_link import JournalPartnerLink
from schemas.links import JournalGoodLinkCreate, JournalPartnerLinkCreate, LinkEntityType
from utils import clean_partnership_type, sqlalchemy_to_dict

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _partnership_type(value):
    try:
        return clean_partnership_type(value)
    except ValueError as e:
        raise ValidationError(str(e), partnership_type=value)


def _require_journal(db: Session, journal_id: str):
    journal = get_journal(db, journal_id)
    if journal is None:
        raise NotFoundError(f"Journal '{journal_id}' not found", journal_id=journal_id)
    return journal


def _require_entity(db: Session, entity_type: LinkEntityType, entity_id: int):
    if entity_type == LinkEntityType.PARTNER:
        entity = get_partner(db, entity_id)
    else:
        entity = get_good(db, entity_id)
    if entity is None:
        raise NotFoundError(f"{entity_type.value.capitalize()} {entity_id} not found",
                            entity_type=entity_type.value, entity_id=entity_id)
    return entity


def _insert_if_absent(db: Session, model, values: dict, key_columns: List[str]):
    """
    Insert a row unless one with the same natural key exists.

    PostgreSQL and SQLite get a single INSERT ... ON CONFLICT DO NOTHING.
    Other backends look the row up first and treat a unique violation on
    insert as "someone else created it".
    """
    insert_fn = _DIALECT_INSERTS.get(db.get_bind().dialect.name)
    if insert_fn is not None:
        db.execute(insert_fn(model).values(**values).on_conflict_do_nothing(index_elements=key_columns))
        return

    key = {column: values[column] for column in key_columns}
    if db.query(model).filter_by(**key).first() is not None:
        return
    try:
        with db.begin_nested():
            db.add(model(**values))
    except IntegrityError:
        logger.warning(f"{model.__tablename__} row {key} was created concurrently")


def link_entity_to_journal_hierarchy(
    db: Session,
    entity_id: int,
    entity_type,
    terminal_journal_id: str,
    partnership_type: Optional[str] = None,
    user_id: str = "system",
):
    """
    Link a partner or good to ``terminal_journal_id`` and to every ancestor up
    to the root.

    Links that already exist are left as they are. Returns the links along the
    path, root first.
    """
    try:
        entity_type = LinkEntityType(entity_type)
    except ValueError:
        raise ValidationError(f"Unknown entity type '{entity_type}'", entity_type=str(entity_type))

    path = get_journal_ancestors(db, terminal_journal_id)
    if not path:
        raise NotFoundError(f"Journal '{terminal_journal_id}' not found", journal_id=terminal_journal_id)
    _require_entity(db, entity_type, entity_id)
    path_ids = [journal.id for journal in path]

    if entity_type == LinkEntityType.PARTNER:
        partnership_type = _partnership_type(partnership_type or DEFAULT_PARTNERSHIP_TYPE)
        for journal_id in path_ids:
            _insert_if_absent(
                db,
                JournalPartnerLink,
                {
                    "journal_id": journal_id,
                    "partner_id": entity_id,
                    "partnership_type": partnership_type,
                    "created_by": user_id,
                },
                ["journal_id", "partner_id", "partnership_type"],
            )
        db.commit()
        links = db.query(JournalPartnerLink).filter(
            JournalPartnerLink.journal_id.in_(path_ids),
            JournalPartnerLink.partner_id == entity_id,
            JournalPartnerLink.partnership_type == partnership_type,
        ).all()
        table_name = 'journal_partner_links'
    else:
        for journal_id in path_ids:
            _insert_if_absent(
                db,
                JournalGoodLink,
                {"journal_id": journal_id, "good_id": entity_id, "created_by": user_id},
                ["journal_id", "good_id"],
            )
        db.commit()
        links = db.query(JournalGoodLink).filter(
            JournalGoodLink.journal_id.in_(path_ids),
            JournalGoodLink.good_id == entity_id,
        ).all()
        table_name = 'journal_good_links'

    depth = {journal_id: index for index, journal_id in enumerate(path_ids)}
    links.sort(key=lambda link: depth[link.journal_id])
    logger.info(
        f"{entity_type.value} {entity_id} linked to journal '{terminal_journal_id}' "
        f"and {len(path_ids) - 1} ancestors by {user_id}"
    )

    record_change(db, table_name, f"{entity_type.value}:{entity_id}@{terminal_journal_id}", 'LINK', user_id,
                  new_values={"journal_ids": path_ids, "partnership_type": partnership_type})
    return links


# --- Journal <-> partner ---

def get_journal_partner_link(db: Session, link_id: int):
    return db.query(JournalPartnerLink).filter(JournalPartnerLink.id == link_id).first()


def find_journal_partner_link(db: Session, journal_id: str, partner_id: int, partnership_type: str):
    partnership_type = _partnership_type(partnership_type)
    return db.query(JournalPartnerLink).filter(
        JournalPartnerLink.journal_id == journal_id,
        JournalPartnerLink.partner_id == partner_id,
        JournalPartnerLink.partnership_type == partnership_type,
    ).first()


def get_journal_partner_links(
    db: Session,
    journal_id: Optional[str] = None,
    partner_id: Optional[int] = None,
    partnership_type: Optional[str] = None,
):
    query = db.query(JournalPartnerLink)
    if journal_id is not None:
        query = query.filter(JournalPartnerLink.journal_id == journal_id)
    if partner_id is not None:
        query = query.filter(JournalPartnerLink.partner_id == partner_id)
    if partnership_type is not None:
        partnership_type = _partnership_type(partnership_type)
        query = query.filter(JournalPartnerLink.partnership_type == partnership_type)
    return query.order_by(JournalPartnerLink.journal_id, JournalPartnerLink.id).all()


def create_journal_partner_link(db: Session, link: JournalPartnerLinkCreate, user_id: str = "system"):
    _require_journal(db, link.journal_id)
    _require_entity(db, LinkEntityType.PARTNER, link.partner_id)

    db_link = JournalPartnerLink(**link.model_dump(), created_by=user_id)
    db.add(db_link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            f"Partner {link.partner_id} is already linked to journal '{link.journal_id}' as {link.partnership_type}",
            **link.model_dump(),
        )
    db.refresh(db_link)
    logger.info(f"Journal-partner link {db_link.id} created by {user_id}")

    record_change(db, 'journal_partner_links', db_link.id, 'CREATE', user_id, new_values=sqlalchemy_to_dict(db_link))
    return db_link


def delete_journal_partner_link(db: Session, link_id: int, user_id: str = "system"):
    """Delete by id. Returns the removed row as a dict, or None if it was already gone."""
    db_link = get_journal_partner_link(db, link_id)
    if db_link is None:
        logger.warning(f"Journal-partner link {link_id} not found for deletion")
        return None

    old_values = sqlalchemy_to_dict(db_link)
    db.execute(
        delete(JournalPartnerLink)
        .where(JournalPartnerLink.id == link_id)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    logger.info(f"Journal-partner link {link_id} deleted by {user_id}")

    record_change(db, 'journal_partner_links', link_id, 'DELETE', user_id, old_values=old_values)
    return old_values


def delete_journal_partner_links_by_key(
    db: Session,
    journal_id: str,
    partner_id: int,
    partnership_type: Optional[str] = None,
    user_id: str = "system",
) -> int:
    """Delete by composite key; without a partnership type every type is removed."""
    stmt = delete(JournalPartnerLink).where(
        JournalPartnerLink.journal_id == journal_id,
        JournalPartnerLink.partner_id == partner_id,
    )
    if partnership_type is not None:
        partnership_type = _partnership_type(partnership_type)
        stmt = stmt.where(JournalPartnerLink.partnership_type == partnership_type)
    result = db.execute(stmt.execution_options(synchronize_session="fetch"))
    db.commit()
    if result.rowcount:
        logger.info(f"{result.rowcount} journal-partner links for ({journal_id}, {partner_id}) deleted by {user_id}")
        record_change(db, 'journal_partner_links', f"{journal_id}:{partner_id}", 'DELETE', user_id,
                      old_values={"partnership_type": partnership_type, "count": result.rowcount})
    else:
        logger.warning(f"No journal-partner link for ({journal_id}, {partner_id}, {partnership_type}) to delete")
    return result.rowcount


# --- Journal <-> good ---

def get_journal_good_link(db: Session, link_id: int):
    return db.query(JournalGoodLink).filter(JournalGoodLink.id == link_id).first()


def get_journal_good_links(db: Session, journal_id: Optional[str] = None, good_id: Optional[int] = None):
    query = db.query(JournalGoodLink)
    if journal_id is not None:
        query = query.filter(JournalGoodLink.journal_id == journal_id)
    if good_id is not None:
        query = query.filter(JournalGoodLink.good_id == good_id)
    return query.order_by(JournalGoodLink.journal_id, JournalGoodLink.id).all()


def create_journal_good_link(db: Session, link: JournalGoodLinkCreate, user_id: str = "system"):
    _require_journal(db, link.journal_id)
    _require_entity(db, LinkEntityType.GOOD, link.good_id)

    db_link = JournalGoodLink(**link.model_dump(), created_by=user_id)
    db.add(db_link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            f"Good {link.good_id} is already linked to journal '{link.journal_id}'",
            **link.model_dump(),
        )
    db.refresh(db_link)
    logger.info(f"Journal-good link {db_link.id} created by {user_id}")

    record_change(db, 'journal_good_links', db_link.id, 'CREATE', user_id, new_values=sqlalchemy_to_dict(db_link))
    return db_link


def delete_journal_good_link(db: Session, link_id: int, user_id: str = "system"):
    db_link = get_journal_good_link(db, link_id)
    if db_link is None:
        logger.warning(f"Journal-good link {link_id} not found for deletion")
        return None

    old_values = sqlalchemy_to_dict(db_link)
    db.execute(
        delete(JournalGoodLink)
        .where(JournalGoodLink.id == link_id)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    logger.info(f"Journal-good link {link_id} deleted by {user_id}")

    record_change(db, 'journal_good_links', link_id, 'DELETE', user_id, old_values=old_values)
    return old_values


def delete_journal_good_links_by_key(db: Session, journal_id: str, good_id: int, user_id: str = "system") -> int:
    result = db.execute(
        delete(JournalGoodLink)
        .where(JournalGoodLink.journal_id == journal_id, JournalGoodLink.good_id == good_id)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    if result.rowcount:
        logger.info(f"Journal-good link ({journal_id}, {good_id}) deleted by {user_id}")
        record_change(db, 'journal_good_links', f"{journal_id}:{good_id}", 'DELETE', user_id)
    else:
        logger.warning(f"No journal-good link for ({journal_id}, {good_id}) to delete")
    return result.rowcount
