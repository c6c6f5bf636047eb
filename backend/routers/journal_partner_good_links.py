from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.links import (
    JournalPartnerGoodLink,
    JournalPartnerGoodLinkCreate,
    JournalPartnerGoodLinkDetail,
    JournalPartnerGoodLinkOrchestratedCreate,
    JournalPartnerLink,
    BulkCreateRequest,
    BulkCreateResult,
    BulkDeleteRequest,
    BulkDeleteResult,
)
from crud import journal_partner_good_links as crud_full_links
from utils.request_user import get_request_user

router = APIRouter(prefix="/journal-partner-good-links", tags=["Journal Partner Good Links"])
logger = logging.getLogger("journal_partner_good_links")

_BULK_STATUS = {
    "partial": status.HTTP_207_MULTI_STATUS,
    "failed": status.HTTP_400_BAD_REQUEST,
}


@router.post("/", response_model=JournalPartnerGoodLink, status_code=status.HTTP_201_CREATED)
def create_full_link(
    link: JournalPartnerGoodLinkOrchestratedCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    """
    Attach a good to (journal, partner). The journal-partner link is created
    on demand; attaching the same good twice is a conflict.
    """
    return crud_full_links.create_full_link(db=db, link=link, user_id=user_id)


@router.post("/raw", response_model=JournalPartnerGoodLink, status_code=status.HTTP_201_CREATED)
def create_link(
    link: JournalPartnerGoodLinkCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_full_links.create_link(db=db, link=link, user_id=user_id)


@router.post("/bulk", response_model=BulkCreateResult, status_code=status.HTTP_201_CREATED)
def bulk_create_full_links(
    request: BulkCreateRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    result = crud_full_links.bulk_create_full_links(db=db, links=request.links, user_id=user_id)
    payload = BulkCreateResult(
        outcome=result["outcome"],
        links=[JournalPartnerGoodLink.model_validate(link) for link in result["links"]],
        errors=result["errors"],
        message=result["message"],
    )
    logger.info(f"Bulk create finished: {payload.message}")
    return JSONResponse(
        status_code=_BULK_STATUS.get(payload.outcome, status.HTTP_201_CREATED),
        content=payload.model_dump(mode="json"),
    )


@router.post("/bulk-delete", response_model=BulkDeleteResult)
def bulk_delete_links(
    request: BulkDeleteRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    payload = BulkDeleteResult(**crud_full_links.bulk_delete_links(db=db, link_ids=request.link_ids, user_id=user_id))
    logger.info(f"Bulk delete finished: {payload.message}")
    return JSONResponse(
        status_code=_BULK_STATUS.get(payload.outcome, status.HTTP_200_OK),
        content=payload.model_dump(mode="json"),
    )


@router.get("/for-context", response_model=List[JournalPartnerGoodLinkDetail])
def read_links_for_context(
    good_id: int = Query(..., gt=0),
    journal_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db)
):
    """Three-way links for a good recorded at one journal, across partners."""
    return crud_full_links.get_links_for_good_and_journal(db=db, good_id=good_id, journal_id=journal_id)


@router.get("/for-good/{good_id}/journal-partner-links", response_model=List[JournalPartnerLink])
def read_journal_partner_links_for_good(good_id: int, db: Session = Depends(get_db)):
    return crud_full_links.get_journal_partner_links_for_good(db=db, good_id=good_id)


@router.get("/for-journal-partner-link/{journal_partner_link_id}", response_model=List[JournalPartnerGoodLink])
def read_links_for_journal_partner_link(journal_partner_link_id: int, db: Session = Depends(get_db)):
    return crud_full_links.get_full_links_for_journal_partner_link(
        db=db, journal_partner_link_id=journal_partner_link_id
    )


@router.get("/{link_id}", response_model=JournalPartnerGoodLinkDetail)
def read_link(link_id: int, db: Session = Depends(get_db)):
    db_link = crud_full_links.get_link(db=db, link_id=link_id)
    if db_link is None:
        raise HTTPException(status_code=404, detail="Journal-partner-good link not found")
    return db_link


@router.delete("/{link_id}", status_code=status.HTTP_200_OK)
def delete_link(
    link_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    deleted = crud_full_links.delete_link(db=db, link_id=link_id, user_id=user_id)
    return {"deleted": deleted is not None}
