"""Collection API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from church_ledger.api.deps import get_actor, get_period
from church_ledger.database import get_db
from church_ledger.schemas.collections import (
    CollectionPayload,
    CollectionResponse,
    FundAllocationSummary,
)
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.periods import Period

router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.get("", response_model=list[CollectionResponse])
def list_collections(
    period: Optional[Period] = Depends(get_period), db: Session = Depends(get_db)  # noqa: B008
):
    """List collections newest first, optionally for one year or month."""
    return LedgerService(db).list_collections(period)


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
def create_collection(
    payload: CollectionPayload,
    actor: str = Depends(get_actor),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    """
    Record a collection.

    Returns:
        201: Stored collection with computed total and fund shares
        400: Validation issues (every failing field is listed)
        409: Control number already used
    """
    return LedgerService(db).record_collection(
        payload.record_data(), created_by=actor, custom_values=payload.custom_fields
    )


@router.get("/fund-allocation/summary", response_model=FundAllocationSummary)
def fund_allocation_summary(
    period: Optional[Period] = Depends(get_period), db: Session = Depends(get_db)  # noqa: B008
):
    return LedgerService(db).fund_allocation_summary(period)


@router.get("/summary/detailed")
def detailed_summary(
    period: Optional[Period] = Depends(get_period), db: Session = Depends(get_db)  # noqa: B008
):
    """Per-category sums and record count."""
    return LedgerService(db).collection_summary(period)


@router.get("/{collection_id}", response_model=CollectionResponse)
def get_collection(collection_id: int, db: Session = Depends(get_db)):  # noqa: B008
    return LedgerService(db).get_collection(collection_id)


@router.put("/{collection_id}", response_model=CollectionResponse)
def update_collection(
    collection_id: int, payload: CollectionPayload, db: Session = Depends(get_db)  # noqa: B008
):
    return LedgerService(db).update_collection(collection_id, payload.record_data())


@router.delete("/{collection_id}")
def delete_collection(collection_id: int, db: Session = Depends(get_db)):  # noqa: B008
    LedgerService(db).delete_collection(collection_id)
    return {"message": "Collection deleted successfully"}
