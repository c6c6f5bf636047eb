from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from schemas.tax_code import TaxCode, TaxCodeCreate, TaxCodeUpdate
from crud import tax_codes as crud_tax_codes

router = APIRouter(prefix="/tax-codes", tags=["Tax Codes"])


@router.post("/", response_model=TaxCode, status_code=status.HTTP_201_CREATED)
def create_tax_code(tax_code: TaxCodeCreate, db: Session = Depends(get_db)):
    return crud_tax_codes.create_tax_code(db=db, tax_code=tax_code)


@router.get("/", response_model=List[TaxCode])
def read_tax_codes(db: Session = Depends(get_db)):
    return crud_tax_codes.get_tax_codes(db=db)


@router.get("/{tax_code_id}", response_model=TaxCode)
def read_tax_code(tax_code_id: int, db: Session = Depends(get_db)):
    db_tax_code = crud_tax_codes.get_tax_code(db=db, tax_code_id=tax_code_id)
    if db_tax_code is None:
        raise HTTPException(status_code=404, detail="Tax code not found")
    return db_tax_code


@router.patch("/{tax_code_id}", response_model=TaxCode)
def update_tax_code(tax_code_id: int, tax_code: TaxCodeUpdate, db: Session = Depends(get_db)):
    return crud_tax_codes.update_tax_code(db=db, tax_code_id=tax_code_id, tax_code_update=tax_code)


@router.delete("/{tax_code_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tax_code(tax_code_id: int, db: Session = Depends(get_db)):
    crud_tax_codes.delete_tax_code(db=db, tax_code_id=tax_code_id)
