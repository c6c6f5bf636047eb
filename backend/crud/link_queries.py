"""
Read-side queries over the journal links.

Journal filters accept several ids at once and, when ``include_descendants``
is set, widen them to everything below each id. The partner/good to journal
direction is never widened: it reports exactly where a link was recorded.
"""

import logging
from typing import Iterable, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from crud.journals import get_descendant_journal_ids
from models.good import Good
from models.journal import Journal
from models.journal_good_link import JournalGoodLink
from models.journal_partner_good_link import JournalPartnerGoodLink
from models.journal_partner_link import JournalPartnerLink
from models.partner import Partner

logger = logging.getLogger(__name__)


def _journal_scope(db: Session, journal_ids: Iterable[str], include_descendants: bool) -> List[str]:
    journal_ids = list(dict.fromkeys(journal_ids or []))
    if not journal_ids:
        return []
    if include_descendants:
        return get_descendant_journal_ids(db, journal_ids)
    return journal_ids


def _goods_by_ids(db: Session, good_ids):
    return db.query(Good).filter(Good.id.in_(good_ids)).order_by(Good.label, Good.id).all()


def _partners_by_ids(db: Session, partner_ids):
    return db.query(Partner).filter(Partner.id.in_(partner_ids)).order_by(Partner.name, Partner.id).all()


def _journals_by_ids(db: Session, journal_ids):
    return db.query(Journal).filter(Journal.id.in_(journal_ids)).order_by(Journal.id).all()


def get_goods_for_journals_and_partner(db: Session, journal_ids: List[str], partner_id: int,
                                       include_descendants: bool = True):
    """Goods with a three-way link for ``partner_id`` under any of ``journal_ids``, sorted by label."""
    scope = _journal_scope(db, journal_ids, include_descendants)
    if not scope:
        return []

    link_ids = db.scalars(
        select(JournalPartnerLink.id).where(
            JournalPartnerLink.journal_id.in_(scope),
            JournalPartnerLink.partner_id == partner_id,
        )
    ).all()
    if not link_ids:
        return []

    good_ids = db.scalars(
        select(JournalPartnerGoodLink.good_id)
        .where(JournalPartnerGoodLink.journal_partner_link_id.in_(link_ids))
        .distinct()
    ).all()
    if not good_ids:
        return []
    return _goods_by_ids(db, good_ids)


def get_partners_for_journals_and_good(db: Session, journal_ids: List[str], good_id: int,
                                       include_descendants: bool = True):
    """Partners with a three-way link for ``good_id`` under any of ``journal_ids``, sorted by name."""
    scope = _journal_scope(db, journal_ids, include_descendants)
    if not scope:
        return []

    partner_ids = db.scalars(
        select(JournalPartnerLink.partner_id)
        .join(JournalPartnerGoodLink, JournalPartnerGoodLink.journal_partner_link_id == JournalPartnerLink.id)
        .where(
            JournalPartnerLink.journal_id.in_(scope),
            JournalPartnerGoodLink.good_id == good_id,
        )
        .distinct()
    ).all()
    if not partner_ids:
        return []
    return _partners_by_ids(db, partner_ids)


def get_journals_for_partner_and_good(db: Session, partner_id: int, good_id: int):
    journal_ids = db.scalars(
        select(JournalPartnerLink.journal_id)
        .join(JournalPartnerGoodLink, JournalPartnerGoodLink.journal_partner_link_id == JournalPartnerLink.id)
        .where(
            JournalPartnerLink.partner_id == partner_id,
            JournalPartnerGoodLink.good_id == good_id,
        )
        .distinct()
    ).all()
    if not journal_ids:
        return []
    return _journals_by_ids(db, journal_ids)


def get_goods_for_journals(db: Session, journal_ids: List[str], include_descendants: bool = True):
    scope = _journal_scope(db, journal_ids, include_descendants)
    if not scope:
        return []
    good_ids = db.scalars(
        select(JournalGoodLink.good_id).where(JournalGoodLink.journal_id.in_(scope)).distinct()
    ).all()
    if not good_ids:
        return []
    return _goods_by_ids(db, good_ids)


def get_partners_for_journals(db: Session, journal_ids: List[str], include_descendants: bool = True):
    scope = _journal_scope(db, journal_ids, include_descendants)
    if not scope:
        return []
    partner_ids = db.scalars(
        select(JournalPartnerLink.partner_id).where(JournalPartnerLink.journal_id.in_(scope)).distinct()
    ).all()
    if not partner_ids:
        return []
    return _partners_by_ids(db, partner_ids)


def get_journals_for_good(db: Session, good_id: int):
    journal_ids = db.scalars(
        select(JournalGoodLink.journal_id).where(JournalGoodLink.good_id == good_id).distinct()
    ).all()
    if not journal_ids:
        return []
    return _journals_by_ids(db, journal_ids)


def get_journals_for_partner(db: Session, partner_id: int):
    journal_ids = db.scalars(
        select(JournalPartnerLink.journal_id).where(JournalPartnerLink.partner_id == partner_id).distinct()
    ).all()
    if not journal_ids:
        return []
    return _journals_by_ids(db, journal_ids)


def get_goods_for_partners_intersection(db: Session, partner_ids: List[int], journal_id: str):
    """Goods that every one of ``partner_ids`` has a three-way link for at ``journal_id``."""
    partner_ids = list(dict.fromkeys(partner_ids or []))
    if not partner_ids:
        return []

    good_ids = db.scalars(
        select(JournalPartnerGoodLink.good_id)
        .join(JournalPartnerLink, JournalPartnerGoodLink.journal_partner_link_id == JournalPartnerLink.id)
        .where(
            JournalPartnerLink.journal_id == journal_id,
            JournalPartnerLink.partner_id.in_(partner_ids),
        )
        .group_by(JournalPartnerGoodLink.good_id)
        .having(func.count(func.distinct(JournalPartnerLink.partner_id)) == len(partner_ids))
    ).all()
    if not good_ids:
        logger.debug(f"No goods shared by partners {partner_ids} at journal '{journal_id}'")
        return []
    return _goods_by_ids(db, good_ids)
