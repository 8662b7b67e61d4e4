"""Read-mostly endpoints for automation tools and the sheets export.

Every route requires the shared X-Webhook-Secret header.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from church_ledger.api.deps import require_webhook_secret
from church_ledger.database import get_db
from church_ledger.models import Collection, Expense
from church_ledger.services.budget_service import BudgetService
from church_ledger.services.google_sheets import SheetExportService, collection_rows, expense_rows
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.reconciliation import COLLECTION_KIND, EXPENSE_KIND

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/webhooks",
    tags=["webhooks"],
    dependencies=[Depends(require_webhook_secret)],
)


class ExportRequest(BaseModel):
    """Request payload for POST /api/webhooks/export-to-sheets."""

    kinds: list[Literal["collection", "expense"]] = [COLLECTION_KIND, EXPENSE_KIND]
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    include_summary: bool = True


def _default_range(start_date: Optional[date], end_date: Optional[date]) -> tuple[date, date]:
    end = end_date or date.today()
    return start_date or end - timedelta(days=30), end


@router.get("/recent-submissions")
def recent_submissions(
    hours: int = Query(24, ge=1),  # noqa: B008
    limit: int = Query(50, ge=1, le=500),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    submissions = LedgerService(db).recent_submissions(hours=hours, limit=limit)
    return {"count": len(submissions), "submissions": submissions}


@router.get("/financial-summary")
def financial_summary(
    start_date: Optional[date] = Query(None),  # noqa: B008
    end_date: Optional[date] = Query(None),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    """Collections vs expenses; defaults to the last 30 days."""
    start, end = _default_range(start_date, end_date)
    return LedgerService(db).financial_summary(start, end)


@router.get("/budget-alerts")
def budget_alerts(
    year: Optional[int] = Query(None),  # noqa: B008
    threshold: Decimal = Query(Decimal("80")),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    return BudgetService(db).budget_alerts(year or date.today().year, threshold)


@router.get("/collections-for-sheets")
def collections_for_sheets(
    start_date: Optional[date] = Query(None),  # noqa: B008
    end_date: Optional[date] = Query(None),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    records = LedgerService(db).repository.list_records(
        Collection, start_date=start_date, end_date=end_date
    )
    return {"values": collection_rows(records)}


@router.get("/expenses-for-sheets")
def expenses_for_sheets(
    start_date: Optional[date] = Query(None),  # noqa: B008
    end_date: Optional[date] = Query(None),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    records = LedgerService(db).repository.list_records(
        Expense, start_date=start_date, end_date=end_date
    )
    return {"values": expense_rows(records)}


@router.post("/export-to-sheets")
def export_to_sheets(request: ExportRequest, db: Session = Depends(get_db)):  # noqa: B008
    """Replace the Collections/Expenses (and Summary) sheets with current records."""
    exporter = SheetExportService(db)
    results = [exporter.export(kind, request.start_date, request.end_date) for kind in request.kinds]
    if request.include_summary:
        start, end = _default_range(request.start_date, request.end_date)
        results.append(exporter.export_summary(start, end))
    logger.info(f"Exported {len(results)} sheets to Google Sheets")
    return {"message": "Export completed", "sheets": results}
