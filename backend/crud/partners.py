import logging
from typing import Optional

from sqlalchemy.orm import Session

from crud.audit_log import record_change
from exceptions import NotFoundError
from models.audit_mixin import now_in_app_timezone
from models.partner import Partner, PartnerType
from schemas.partner import PartnerCreate, PartnerUpdate
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)


def get_partner(db: Session, partner_id: int):
    return db.query(Partner).filter(Partner.id == partner_id).first()


def get_partners(db: Session, partner_type: Optional[PartnerType] = None, skip: int = 0, limit: int = 100):
    query = db.query(Partner)
    if partner_type:
        query = query.filter(Partner.partner_type == partner_type)
    return query.order_by(Partner.name, Partner.id).offset(skip).limit(limit).all()


def create_partner(db: Session, partner: PartnerCreate, user_id: str = "system"):
    db_partner = Partner(**partner.model_dump(), created_by=user_id)
    db.add(db_partner)
    db.commit()
    db.refresh(db_partner)
    logger.info(f"Partner '{db_partner.name}' ({db_partner.id}) created by {user_id}")

    record_change(db, 'partners', db_partner.id, 'CREATE', user_id, new_values=sqlalchemy_to_dict(db_partner))
    return db_partner


def update_partner(db: Session, partner_id: int, partner_update: PartnerUpdate, user_id: str = "system"):
    db_partner = get_partner(db, partner_id)
    if db_partner is None:
        raise NotFoundError(f"Partner {partner_id} not found", partner_id=partner_id)

    old_values = sqlalchemy_to_dict(db_partner)
    for key, value in partner_update.model_dump(exclude_unset=True).items():
        setattr(db_partner, key, value)
    db_partner.updated_by = user_id
    db.commit()
    db.refresh(db_partner)

    record_change(db, 'partners', partner_id, 'UPDATE', user_id,
                  old_values=old_values, new_values=sqlalchemy_to_dict(db_partner))
    return db_partner


def delete_partner(db: Session, partner_id: int, user_id: str = "system"):
    """Soft delete. Existing links stay in place but the partner drops out of every query."""
    db_partner = get_partner(db, partner_id)
    if db_partner is None:
        raise NotFoundError(f"Partner {partner_id} not found", partner_id=partner_id)

    old_values = sqlalchemy_to_dict(db_partner)
    db_partner.deleted_at = now_in_app_timezone()
    db_partner.deleted_by = user_id
    db.commit()
    logger.info(f"Partner {partner_id} soft deleted by {user_id}")

    record_change(db, 'partners', partner_id, 'DELETE', user_id, old_values=old_values)
    return True
