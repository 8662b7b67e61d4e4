"""Expense API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from church_ledger.api.deps import get_actor, get_period
from church_ledger.database import get_db
from church_ledger.schemas.expenses import ExpensePayload, ExpenseResponse
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.periods import Period

router = APIRouter(prefix="/api/expenses", tags=["expenses"])


@router.get("", response_model=list[ExpenseResponse])
def list_expenses(
    period: Optional[Period] = Depends(get_period), db: Session = Depends(get_db)  # noqa: B008
):
    return LedgerService(db).list_expenses(period)


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpensePayload,
    actor: str = Depends(get_actor),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    """Record an expense; the total is the itemized sum unless given explicitly."""
    return LedgerService(db).record_expense(
        payload.record_data(), created_by=actor, custom_values=payload.custom_fields
    )


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(expense_id: int, db: Session = Depends(get_db)):  # noqa: B008
    return LedgerService(db).get_expense(expense_id)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int, payload: ExpensePayload, db: Session = Depends(get_db)  # noqa: B008
):
    return LedgerService(db).update_expense(expense_id, payload.record_data())


@router.delete("/{expense_id}")
def delete_expense(expense_id: int, db: Session = Depends(get_db)):  # noqa: B008
    LedgerService(db).delete_expense(expense_id)
    return {"message": "Expense deleted successfully"}
