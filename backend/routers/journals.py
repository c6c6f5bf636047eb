from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.journal import Journal, JournalCreate, JournalUpdate, JournalDeleteRequest, JournalDeletionReport
from crud import journals as crud_journals
from crud import link_queries
from utils.request_user import get_request_user

router = APIRouter(prefix="/journals", tags=["Journals"])
logger = logging.getLogger("journals")


@router.post("/", response_model=Journal, status_code=status.HTTP_201_CREATED)
def create_journal(
    journal: JournalCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    """Create a journal under an existing parent, or a new root."""
    return crud_journals.create_journal(db=db, journal=journal, user_id=user_id)


@router.get("/", response_model=List[Journal])
def read_journals(db: Session = Depends(get_db)):
    return crud_journals.get_journals(db=db)


@router.get("/roots", response_model=List[Journal])
def read_root_journals(db: Session = Depends(get_db)):
    return crud_journals.get_root_journals(db=db)


@router.get("/for-partner-and-good", response_model=List[Journal])
def read_journals_for_partner_and_good(
    partner_id: int = Query(..., gt=0),
    good_id: int = Query(..., gt=0),
    db: Session = Depends(get_db)
):
    """Journals where the partner has a three-way link for the good. Not widened to descendants."""
    return link_queries.get_journals_for_partner_and_good(db=db, partner_id=partner_id, good_id=good_id)


@router.post("/delete-safely", response_model=JournalDeletionReport)
def delete_journals_safely(
    request: JournalDeleteRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    """
    Delete the listed journals, or every journal when no list is given,
    leaves first.
    """
    report = crud_journals.delete_journals_safely(db=db, journal_ids=request.journal_ids, user_id=user_id)
    logger.info(f"Safe deletion removed {len(report['deleted_ids'])} journals in {len(report['passes'])} passes")
    return report


@router.get("/{journal_id}", response_model=Journal)
def read_journal(journal_id: str, db: Session = Depends(get_db)):
    db_journal = crud_journals.get_journal(db=db, journal_id=journal_id)
    if db_journal is None:
        raise HTTPException(status_code=404, detail="Journal not found")
    return db_journal


@router.get("/{journal_id}/children", response_model=List[Journal])
def read_journal_children(journal_id: str, db: Session = Depends(get_db)):
    if crud_journals.get_journal(db=db, journal_id=journal_id) is None:
        raise HTTPException(status_code=404, detail="Journal not found")
    return crud_journals.get_journal_children(db=db, journal_id=journal_id)


@router.get("/{journal_id}/ancestors", response_model=List[Journal])
def read_journal_ancestors(journal_id: str, db: Session = Depends(get_db)):
    """Path from the root down to the journal, both included."""
    path = crud_journals.get_journal_ancestors(db=db, journal_id=journal_id)
    if not path:
        raise HTTPException(status_code=404, detail="Journal not found")
    return path


@router.get("/{journal_id}/descendants", response_model=List[str])
def read_journal_descendants(journal_id: str, db: Session = Depends(get_db)):
    descendant_ids = crud_journals.get_descendant_journal_ids(db=db, journal_ids=[journal_id])
    if not descendant_ids:
        raise HTTPException(status_code=404, detail="Journal not found")
    return descendant_ids


@router.patch("/{journal_id}", response_model=Journal)
def update_journal(
    journal_id: str,
    journal: JournalUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    return crud_journals.update_journal(db=db, journal_id=journal_id, journal_update=journal, user_id=user_id)


@router.delete("/{journal_id}", status_code=status.HTTP_200_OK)
def delete_journal(
    journal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_request_user)
):
    """Delete a single journal. Journals with children are rejected."""
    crud_journals.delete_journal(db=db, journal_id=journal_id, user_id=user_id)
    return {"message": f"Journal '{journal_id}' deleted"}
