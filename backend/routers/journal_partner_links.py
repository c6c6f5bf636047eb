from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.links import JournalPartnerLink, JournalPartnerLinkCreate, JournalPartnerLinkDetail, \
    LinkPropagationRequest, LinkEntityType
from schemas.good import Good
from crud import journal_links as crud_links
from crud import journal_partner_good_links as crud_full_links
from utils.request_user import get_request_user

router = APIRouter(prefix="/journal-partner-links", tags=["Journal Partner Links"])
logger = logging.getLogger("journal_partner_links")


@router.post("/", response_model=JournalPartnerLink, status_code=status.HTTP_201_CREATED)
def create_journal_partner_link(
    link: JournalPartnerLinkCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_links.create_journal_partner_link(db=db, link=link, user_id=user_id)


@router.post("/propagate", response_model=List[JournalPartnerLink])
def propagate_journal_partner_link(
    request: LinkPropagationRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    """Link a partner to a journal and to every ancestor of that journal."""
    return crud_links.link_entity_to_journal_hierarchy(
        db=db,
        entity_id=request.entity_id,
        entity_type=LinkEntityType.PARTNER,
        terminal_journal_id=request.terminal_journal_id,
        partnership_type=request.partnership_type,
        user_id=user_id,
    )


@router.get("/", response_model=List[JournalPartnerLink])
def read_journal_partner_links(
    journal_id: Optional[str] = None,
    partner_id: Optional[int] = None,
    partnership_type: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return crud_links.get_journal_partner_links(
        db=db, journal_id=journal_id, partner_id=partner_id, partnership_type=partnership_type
    )


@router.get("/find", response_model=JournalPartnerLinkDetail)
def find_journal_partner_link(
    journal_id: str = Query(..., min_length=1),
    partner_id: int = Query(..., gt=0),
    partnership_type: str = Query(..., min_length=1),
    db: Session = Depends(get_db)
):
    db_link = crud_links.find_journal_partner_link(
        db=db, journal_id=journal_id, partner_id=partner_id, partnership_type=partnership_type
    )
    if db_link is None:
        raise HTTPException(status_code=404, detail="Journal-partner link not found")
    return db_link


@router.delete("/by-key", status_code=status.HTTP_200_OK)
def delete_journal_partner_links_by_key(
    journal_id: str = Query(..., min_length=1),
    partner_id: int = Query(..., gt=0),
    partnership_type: Optional[str] = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    deleted = crud_links.delete_journal_partner_links_by_key(
        db=db,
        journal_id=journal_id,
        partner_id=partner_id,
        partnership_type=partnership_type,
        user_id=user_id,
    )
    return {"deleted": deleted}


@router.get("/{link_id}", response_model=JournalPartnerLinkDetail)
def read_journal_partner_link(link_id: int, db: Session = Depends(get_db)):
    db_link = crud_links.get_journal_partner_link(db=db, link_id=link_id)
    if db_link is None:
        raise HTTPException(status_code=404, detail="Journal-partner link not found")
    return db_link


@router.get("/{link_id}/goods", response_model=List[Good])
def read_journal_partner_link_goods(link_id: int, db: Session = Depends(get_db)):
    """Goods attached to this journal-partner link through three-way links."""
    return crud_full_links.get_goods_for_journal_partner_link(db=db, journal_partner_link_id=link_id)


@router.delete("/{link_id}", status_code=status.HTTP_200_OK)
def delete_journal_partner_link(
    link_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    """Deleting a link that is already gone is not an error."""
    deleted = crud_links.delete_journal_partner_link(db=db, link_id=link_id, user_id=user_id)
    return {"deleted": deleted is not None}
