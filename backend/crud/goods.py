import logging
from typing import Optional

from sqlalchemy.orm import Session

from crud.audit_log import record_change
from crud.tax_codes import get_tax_code
from exceptions import NotFoundError
from models.audit_mixin import now_in_app_timezone
from models.good import Good
from schemas.good import GoodCreate, GoodUpdate
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)


def _check_tax_code(db: Session, tax_code_id: Optional[int]):
    if tax_code_id is not None and get_tax_code(db, tax_code_id) is None:
        raise NotFoundError(f"Tax code {tax_code_id} not found", tax_code_id=tax_code_id)


def get_good(db: Session, good_id: int):
    return db.query(Good).filter(Good.id == good_id).first()


def get_goods(db: Session, type_code: Optional[str] = None, skip: int = 0, limit: int = 100):
    query = db.query(Good)
    if type_code:
        query = query.filter(Good.type_code == type_code)
    return query.order_by(Good.label, Good.id).offset(skip).limit(limit).all()


def create_good(db: Session, good: GoodCreate, user_id: str = "system"):
    _check_tax_code(db, good.tax_code_id)
    db_good = Good(**good.model_dump(), created_by=user_id)
    db.add(db_good)
    db.commit()
    db.refresh(db_good)
    logger.info(f"Good '{db_good.label}' ({db_good.id}) created by {user_id}")

    record_change(db, 'goods', db_good.id, 'CREATE', user_id, new_values=sqlalchemy_to_dict(db_good))
    return db_good


def update_good(db: Session, good_id: int, good_update: GoodUpdate, user_id: str = "system"):
    db_good = get_good(db, good_id)
    if db_good is None:
        raise NotFoundError(f"Good {good_id} not found", good_id=good_id)

    update_data = good_update.model_dump(exclude_unset=True)
    if 'tax_code_id' in update_data:
        _check_tax_code(db, update_data['tax_code_id'])

    old_values = sqlalchemy_to_dict(db_good)
    for key, value in update_data.items():
        setattr(db_good, key, value)
    db_good.updated_by = user_id
    db.commit()
    db.refresh(db_good)

    record_change(db, 'goods', good_id, 'UPDATE', user_id,
                  old_values=old_values, new_values=sqlalchemy_to_dict(db_good))
    return db_good


def delete_good(db: Session, good_id: int, user_id: str = "system"):
    """Soft delete; the good disappears from the linking queries."""
    db_good = get_good(db, good_id)
    if db_good is None:
        raise NotFoundError(f"Good {good_id} not found", good_id=good_id)

    old_values = sqlalchemy_to_dict(db_good)
    db_good.deleted_at = now_in_app_timezone()
    db_good.deleted_by = user_id
    db.commit()
    logger.info(f"Good {good_id} soft deleted by {user_id}")

    record_change(db, 'goods', good_id, 'DELETE', user_id, old_values=old_values)
    return True
