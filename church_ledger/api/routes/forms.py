"""Relayed Google Form submission routes.

Form scripts post the raw question/answer map; field mapping happens in the
intake service. Calls must carry the shared X-Webhook-Secret.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from church_ledger.api.deps import require_webhook_secret
from church_ledger.database import get_db
from church_ledger.schemas.collections import CollectionResponse
from church_ledger.schemas.expenses import ExpenseResponse
from church_ledger.services.intake import FormRelayService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/forms",
    tags=["forms"],
    dependencies=[Depends(require_webhook_secret)],
)


@router.post("/collection", status_code=status.HTTP_201_CREATED)
def submit_collection(
    payload: dict[str, Any] = Body(...),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    result = FormRelayService(db).submit_collection(payload)
    logger.info(f"Form collection recorded: ID={result.record.id}")
    return {
        "message": "Collection recorded successfully",
        "collection": CollectionResponse.model_validate(result.record).model_dump(mode="json"),
    }


@router.post("/expense", status_code=status.HTTP_201_CREATED)
def submit_expense(
    payload: dict[str, Any] = Body(...),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    """Record an expense form; a double submit returns the earlier record with 200."""
    result = FormRelayService(db).submit_expense(payload)
    expense = ExpenseResponse.model_validate(result.record).model_dump(mode="json")
    if result.duplicate:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"message": "Duplicate submission ignored", "duplicate": True, "expense": expense},
        )
    return {"message": "Expense recorded successfully", "duplicate": False, "expense": expense}
