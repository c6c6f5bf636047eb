from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from models.partner import PartnerType
from schemas.partner import Partner, PartnerCreate, PartnerUpdate
from schemas.journal import Journal
from crud import partners as crud_partners
from crud import link_queries
from utils.request_user import get_request_user

router = APIRouter(prefix="/partners", tags=["Partners"])


@router.post("/", response_model=Partner, status_code=status.HTTP_201_CREATED)
def create_partner(
    partner: PartnerCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_partners.create_partner(db=db, partner=partner, user_id=user_id)


@router.get("/", response_model=List[Partner])
def read_partners(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    partner_type: Optional[PartnerType] = None,
    db: Session = Depends(get_db)
):
    return crud_partners.get_partners(db=db, partner_type=partner_type, skip=skip, limit=limit)


@router.get("/for-journals-and-good", response_model=List[Partner])
def read_partners_for_journals_and_good(
    journal_ids: List[str] = Query(...),
    good_id: int = Query(..., gt=0),
    include_descendants: bool = Query(True),
    db: Session = Depends(get_db)
):
    """Partners that trade the good under any of the journals (and, by default, below them)."""
    return link_queries.get_partners_for_journals_and_good(
        db=db, journal_ids=journal_ids, good_id=good_id, include_descendants=include_descendants
    )


@router.get("/for-journals", response_model=List[Partner])
def read_partners_for_journals(
    journal_ids: List[str] = Query(...),
    include_descendants: bool = Query(True),
    db: Session = Depends(get_db)
):
    return link_queries.get_partners_for_journals(
        db=db, journal_ids=journal_ids, include_descendants=include_descendants
    )


@router.get("/{partner_id}", response_model=Partner)
def read_partner(partner_id: int, db: Session = Depends(get_db)):
    db_partner = crud_partners.get_partner(db=db, partner_id=partner_id)
    if db_partner is None:
        raise HTTPException(status_code=404, detail="Partner not found")
    return db_partner


@router.get("/{partner_id}/journals", response_model=List[Journal])
def read_partner_journals(partner_id: int, db: Session = Depends(get_db)):
    return link_queries.get_journals_for_partner(db=db, partner_id=partner_id)


@router.patch("/{partner_id}", response_model=Partner)
def update_partner(
    partner_id: int,
    partner: PartnerUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_partners.update_partner(db=db, partner_id=partner_id, partner_update=partner, user_id=user_id)


@router.delete("/{partner_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_partner(
    partner_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    crud_partners.delete_partner(db=db, partner_id=partner_id, user_id=user_id)
