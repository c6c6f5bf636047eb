from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from schemas.links import JournalGoodLink, JournalGoodLinkCreate, LinkPropagationRequest, LinkEntityType
from crud import journal_links as crud_links
from utils.request_user import get_request_user

router = APIRouter(prefix="/journal-good-links", tags=["Journal Good Links"])


@router.post("/", response_model=JournalGoodLink, status_code=status.HTTP_201_CREATED)
def create_journal_good_link(
    link: JournalGoodLinkCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_links.create_journal_good_link(db=db, link=link, user_id=user_id)


@router.post("/propagate", response_model=List[JournalGoodLink])
def propagate_journal_good_link(
    request: LinkPropagationRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    """Link a good to a journal and to every ancestor of that journal."""
    return crud_links.link_entity_to_journal_hierarchy(
        db=db,
        entity_id=request.entity_id,
        entity_type=LinkEntityType.GOOD,
        terminal_journal_id=request.terminal_journal_id,
        user_id=user_id,
    )


@router.get("/", response_model=List[JournalGoodLink])
def read_journal_good_links(
    journal_id: Optional[str] = None,
    good_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    return crud_links.get_journal_good_links(db=db, journal_id=journal_id, good_id=good_id)


@router.delete("/by-key", status_code=status.HTTP_200_OK)
def delete_journal_good_links_by_key(
    journal_id: str = Query(..., min_length=1),
    good_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    deleted = crud_links.delete_journal_good_links_by_key(db=db, journal_id=journal_id, good_id=good_id, user_id=user_id)
    return {"deleted": deleted}


@router.get("/{link_id}", response_model=JournalGoodLink)
def read_journal_good_link(link_id: int, db: Session = Depends(get_db)):
    db_link = crud_links.get_journal_good_link(db=db, link_id=link_id)
    if db_link is None:
        raise HTTPException(status_code=404, detail="Journal-good link not found")
    return db_link


@router.delete("/{link_id}", status_code=status.HTTP_200_OK)
def delete_journal_good_link(
    link_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    deleted = crud_links.delete_journal_good_link(db=db, link_id=link_id, user_id=user_id)
    return {"deleted": deleted is not None}
