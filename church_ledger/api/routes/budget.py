"""Budget plan and budget-vs-actual API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from church_ledger.api.deps import get_actor, get_period
from church_ledger.api.errors import NotFoundError
from church_ledger.database import get_db
from church_ledger.schemas.budget import (
    AvailableBudgetResponse,
    BudgetComparisonLineResponse,
    BudgetPlanPayload,
    BudgetPlanResponse,
)
from church_ledger.services.budget_service import BudgetService

router = APIRouter(prefix="/api/budget", tags=["budget"])


@router.get("/plan/{year}", response_model=BudgetPlanResponse)
def get_plan(year: int, db: Session = Depends(get_db)):  # noqa: B008
    plan = BudgetService(db).get_plan(year)
    if plan is None:
        raise NotFoundError(f"No budget plan for {year}")
    return plan


@router.post("/plan", response_model=BudgetPlanResponse)
def save_plan(
    payload: BudgetPlanPayload,
    actor: str = Depends(get_actor),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    """Create or replace the plan for a year, including all category lines."""
    return BudgetService(db).save_plan(
        year=payload.year,
        target_offering=payload.target_offering,
        shared_fund_percentage=payload.shared_fund_percentage,
        pastoral_team_percentage=payload.pastoral_team_percentage,
        operational_percentage=payload.operational_percentage,
        categories=payload.category_dicts(),
        created_by=actor,
    )


@router.get("/comparison/{year}", response_model=list[BudgetComparisonLineResponse])
def compare(
    year: int,
    month: Optional[int] = Query(None, description="Restrict actuals to one month"),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    period = get_period(year, month)
    return BudgetService(db).compare(period.year, period.month)


@router.get("/available/{year}/{category}", response_model=AvailableBudgetResponse)
def available_budget(
    year: int,
    category: str,
    subcategory: Optional[str] = Query(None),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    return BudgetService(db).available_budget(year, category, subcategory)
