from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from schemas.good import Good, GoodCreate, GoodUpdate
from schemas.journal import Journal
from crud import goods as crud_goods
from crud import link_queries
from utils.request_user import get_request_user

router = APIRouter(prefix="/goods", tags=["Goods"])


@router.post("/", response_model=Good, status_code=status.HTTP_201_CREATED)
def create_good(
    good: GoodCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_goods.create_good(db=db, good=good, user_id=user_id)


@router.get("/", response_model=List[Good])
def read_goods(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    type_code: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return crud_goods.get_goods(db=db, type_code=type_code, skip=skip, limit=limit)


@router.get("/for-journals-and-partner", response_model=List[Good])
def read_goods_for_journals_and_partner(
    journal_ids: List[str] = Query(...),
    partner_id: int = Query(..., gt=0),
    include_descendants: bool = Query(True),
    db: Session = Depends(get_db)
):
    """Goods the partner trades under any of the journals (and, by default, below them)."""
    return link_queries.get_goods_for_journals_and_partner(
        db=db, journal_ids=journal_ids, partner_id=partner_id, include_descendants=include_descendants
    )


@router.get("/for-journals", response_model=List[Good])
def read_goods_for_journals(
    journal_ids: List[str] = Query(...),
    include_descendants: bool = Query(True),
    db: Session = Depends(get_db)
):
    return link_queries.get_goods_for_journals(
        db=db, journal_ids=journal_ids, include_descendants=include_descendants
    )


@router.get("/for-partners-intersection", response_model=List[Good])
def read_goods_for_partners_intersection(
    partner_ids: List[int] = Query(...),
    journal_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db)
):
    """Goods that all of the partners trade at one journal."""
    return link_queries.get_goods_for_partners_intersection(db=db, partner_ids=partner_ids, journal_id=journal_id)


@router.get("/{good_id}", response_model=Good)
def read_good(good_id: int, db: Session = Depends(get_db)):
    db_good = crud_goods.get_good(db=db, good_id=good_id)
    if db_good is None:
        raise HTTPException(status_code=404, detail="Good not found")
    return db_good


@router.get("/{good_id}/journals", response_model=List[Journal])
def read_good_journals(good_id: int, db: Session = Depends(get_db)):
    return link_queries.get_journals_for_good(db=db, good_id=good_id)


@router.patch("/{good_id}", response_model=Good)
def update_good(
    good_id: int,
    good: GoodUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_goods.update_good(db=db, good_id=good_id, good_update=good, user_id=user_id)


@router.delete("/{good_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_good(
    good_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    crud_goods.delete_good(db=db, good_id=good_id, user_id=user_id)
