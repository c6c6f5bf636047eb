import logging
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud.audit_log import record_change
from crud.goods import get_good
from crud.journal_links import find_journal_partner_link, get_journal_partner_link
from crud.journals import get_journal
from crud.partners import get_partner
from crud.tax_codes import get_tax_code
from exceptions import ConflictError, InvariantViolationError, LinkingError, NotFoundError
from models.good import Good
from models.journal_partner_good_link import JournalPartnerGoodLink
from models.journal_partner_link import JournalPartnerLink
from schemas.links import JournalPartnerGoodLinkCreate, JournalPartnerGoodLinkOrchestratedCreate
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)


def _resolve_journal_partner_link(db: Session, journal_id: str, partner_id: int, partnership_type: str,
                                  user_id: str) -> JournalPartnerLink:
    """
    Find the two-way link for (journal, partner, type), creating it if needed.

    If the insert hits the unique constraint, another request created the
    link first: roll back and read it once more. An empty second read is an
    invariant violation and is not retried.
    """
    db_link = find_journal_partner_link(db, journal_id, partner_id, partnership_type)
    if db_link is not None:
        return db_link

    db_link = JournalPartnerLink(
        journal_id=journal_id,
        partner_id=partner_id,
        partnership_type=partnership_type,
        created_by=user_id,
    )
    db.add(db_link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            f"Journal-partner link ({journal_id}, {partner_id}, {partnership_type}) created concurrently, refetching"
        )
        db_link = find_journal_partner_link(db, journal_id, partner_id, partnership_type)
        if db_link is None:
            logger.error(
                f"Journal-partner link ({journal_id}, {partner_id}, {partnership_type}) "
                f"missing after unique violation"
            )
            raise InvariantViolationError(
                "Journal-partner link vanished after a concurrent create",
                journal_id=journal_id,
                partner_id=partner_id,
                partnership_type=partnership_type,
            )
        return db_link

    db.refresh(db_link)
    logger.info(f"Journal-partner link {db_link.id} created while resolving a full link")
    record_change(db, 'journal_partner_links', db_link.id, 'CREATE', user_id, new_values=sqlalchemy_to_dict(db_link))
    return db_link


def _insert_link(db: Session, journal_partner_link_id: int, good_id: int, descriptive_text: Optional[str],
                 contextual_tax_code_id: Optional[int], user_id: str) -> JournalPartnerGoodLink:
    if get_good(db, good_id) is None:
        raise NotFoundError(f"Good {good_id} not found", good_id=good_id)
    if contextual_tax_code_id is not None and get_tax_code(db, contextual_tax_code_id) is None:
        raise NotFoundError(f"Tax code {contextual_tax_code_id} not found", tax_code_id=contextual_tax_code_id)

    db_link = JournalPartnerGoodLink(
        journal_partner_link_id=journal_partner_link_id,
        good_id=good_id,
        descriptive_text=descriptive_text,
        contextual_tax_code_id=contextual_tax_code_id,
        created_by=user_id,
    )
    db.add(db_link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            f"Good {good_id} is already linked to journal-partner link {journal_partner_link_id}",
            journal_partner_link_id=journal_partner_link_id,
            good_id=good_id,
        )
    db.refresh(db_link)
    logger.info(f"Journal-partner-good link {db_link.id} created by {user_id}")

    record_change(db, 'journal_partner_good_links', db_link.id, 'CREATE', user_id,
                  new_values=sqlalchemy_to_dict(db_link))
    return db_link


def create_full_link(db: Session, link: JournalPartnerGoodLinkOrchestratedCreate, user_id: str = "system"):
    """
    Record that ``link.good_id`` is traded with ``link.partner_id`` under
    ``link.journal_id``.

    The journal-partner link is found or created first, so repeating the call
    reuses it. The three-way link itself is unique per (two-way link, good):
    a repeat raises ConflictError.
    """
    if get_journal(db, link.journal_id) is None:
        raise NotFoundError(f"Journal '{link.journal_id}' not found", journal_id=link.journal_id)
    if get_partner(db, link.partner_id) is None:
        raise NotFoundError(f"Partner {link.partner_id} not found", partner_id=link.partner_id)

    journal_partner_link = _resolve_journal_partner_link(
        db, link.journal_id, link.partner_id, link.partnership_type, user_id
    )
    return _insert_link(
        db,
        journal_partner_link.id,
        link.good_id,
        link.descriptive_text,
        link.contextual_tax_code_id,
        user_id,
    )


def create_link(db: Session, link: JournalPartnerGoodLinkCreate, user_id: str = "system"):
    """Create a three-way link for an already resolved journal-partner link."""
    if get_journal_partner_link(db, link.journal_partner_link_id) is None:
        raise NotFoundError(
            f"Journal-partner link {link.journal_partner_link_id} not found",
            journal_partner_link_id=link.journal_partner_link_id,
        )
    return _insert_link(
        db,
        link.journal_partner_link_id,
        link.good_id,
        link.descriptive_text,
        link.contextual_tax_code_id,
        user_id,
    )


def get_link(db: Session, link_id: int):
    return db.query(JournalPartnerGoodLink).filter(JournalPartnerGoodLink.id == link_id).first()


def delete_link(db: Session, link_id: int, user_id: str = "system"):
    """Delete by id. Returns the removed row as a dict, or None when there was nothing to delete."""
    db_link = get_link(db, link_id)
    if db_link is None:
        logger.warning(f"Journal-partner-good link {link_id} not found for deletion")
        return None

    old_values = sqlalchemy_to_dict(db_link)
    db.execute(
        delete(JournalPartnerGoodLink)
        .where(JournalPartnerGoodLink.id == link_id)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    logger.info(f"Journal-partner-good link {link_id} deleted by {user_id}")

    record_change(db, 'journal_partner_good_links', link_id, 'DELETE', user_id, old_values=old_values)
    return old_values


def get_full_links_for_journal_partner_link(db: Session, journal_partner_link_id: int):
    return db.query(JournalPartnerGoodLink).filter(
        JournalPartnerGoodLink.journal_partner_link_id == journal_partner_link_id
    ).order_by(JournalPartnerGoodLink.id).all()


def get_goods_for_journal_partner_link(db: Session, journal_partner_link_id: int):
    return db.query(Good).join(
        JournalPartnerGoodLink, JournalPartnerGoodLink.good_id == Good.id
    ).filter(
        JournalPartnerGoodLink.journal_partner_link_id == journal_partner_link_id
    ).order_by(Good.label, Good.id).all()


def get_journal_partner_links_for_good(db: Session, good_id: int):
    return db.query(JournalPartnerLink).join(
        JournalPartnerGoodLink, JournalPartnerGoodLink.journal_partner_link_id == JournalPartnerLink.id
    ).filter(
        JournalPartnerGoodLink.good_id == good_id
    ).order_by(JournalPartnerLink.journal_id, JournalPartnerLink.id).all()


def get_links_for_good_and_journal(db: Session, good_id: int, journal_id: str):
    """Three-way links for a good recorded directly at ``journal_id``, any partner."""
    return db.query(JournalPartnerGoodLink).join(
        JournalPartnerLink, JournalPartnerGoodLink.journal_partner_link_id == JournalPartnerLink.id
    ).filter(
        JournalPartnerGoodLink.good_id == good_id,
        JournalPartnerLink.journal_id == journal_id,
    ).order_by(JournalPartnerGoodLink.id).all()


def _outcome(succeeded: int, failed: int) -> str:
    if not failed:
        return "success"
    if not succeeded:
        return "failed"
    return "partial"


def bulk_create_full_links(db: Session, links: List[JournalPartnerGoodLinkOrchestratedCreate],
                           user_id: str = "system"):
    """
    Create each link independently. Per-item failures are collected by index
    and do not stop the batch; an invariant violation does.
    """
    created = []
    errors = []
    for index, link in enumerate(links):
        try:
            created.append(create_full_link(db, link, user_id))
        except InvariantViolationError:
            raise
        except LinkingError as e:
            logger.warning(f"Bulk create item {index} failed: {e.message}")
            errors.append({"index": index, "error": e.message, "error_type": type(e).__name__})

    outcome = _outcome(len(created), len(errors))
    return {
        "outcome": outcome,
        "links": created,
        "errors": errors,
        "message": f"{len(created)} of {len(links)} links created",
    }


def bulk_delete_links(db: Session, link_ids: List[int], user_id: str = "system"):
    deleted_ids = []
    errors = []
    for index, link_id in enumerate(link_ids):
        if delete_link(db, link_id, user_id) is None:
            errors.append({
                "index": index,
                "link_id": link_id,
                "error": f"Journal-partner-good link {link_id} not found",
                "error_type": NotFoundError.__name__,
            })
        else:
            deleted_ids.append(link_id)

    outcome = _outcome(len(deleted_ids), len(errors))
    return {
        "outcome": outcome,
        "deleted_ids": deleted_ids,
        "errors": errors,
        "message": f"{len(deleted_ids)} of {len(link_ids)} links deleted",
    }
