import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import ConflictError, NotFoundError
from models.tax_code import TaxCode
from schemas.tax_code import TaxCodeCreate, TaxCodeUpdate

logger = logging.getLogger(__name__)


def get_tax_code(db: Session, tax_code_id: int):
    return db.query(TaxCode).filter(TaxCode.id == tax_code_id).first()


def get_tax_codes(db: Session):
    return db.query(TaxCode).order_by(TaxCode.code).all()


def create_tax_code(db: Session, tax_code: TaxCodeCreate):
    db_tax_code = TaxCode(**tax_code.model_dump())
    db.add(db_tax_code)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Tax code '{tax_code.code}' already exists", code=tax_code.code)
    db.refresh(db_tax_code)
    logger.info(f"Tax code '{db_tax_code.code}' created")
    return db_tax_code


def update_tax_code(db: Session, tax_code_id: int, tax_code_update: TaxCodeUpdate):
    db_tax_code = get_tax_code(db, tax_code_id)
    if db_tax_code is None:
        raise NotFoundError(f"Tax code {tax_code_id} not found", tax_code_id=tax_code_id)
    for key, value in tax_code_update.model_dump(exclude_unset=True).items():
        setattr(db_tax_code, key, value)
    db.commit()
    db.refresh(db_tax_code)
    return db_tax_code


def delete_tax_code(db: Session, tax_code_id: int):
    db_tax_code = get_tax_code(db, tax_code_id)
    if db_tax_code is None:
        raise NotFoundError(f"Tax code {tax_code_id} not found", tax_code_id=tax_code_id)
    db.delete(db_tax_code)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Tax code {tax_code_id} is still referenced", tax_code_id=tax_code_id)
    logger.info(f"Tax code {tax_code_id} deleted")
    return True
