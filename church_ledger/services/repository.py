"""Persistence collaborator for the ledger core.

Wraps a SQLAlchemy Session with the handful of queries the core needs. Writes
only flush; the calling service owns the transaction and commits or rolls back.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, NamedTuple, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from church_ledger.models import BudgetPlan, Collection, Expense
from church_ledger.services.parsers import round_currency
from church_ledger.services.periods import Period

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", Collection, Expense)


class CategorySum(NamedTuple):
    """Expense total for one (category, subcategory) group."""

    category: str
    subcategory: Optional[str]
    total: Decimal


class LedgerRepository:
    """SQLAlchemy-backed queries for collections, expenses and budget plans."""

    def __init__(self, db: Session):
        """Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def find_by_control_number(self, control_number: str) -> Optional[Collection]:
        """Find the collection holding a control number, if any."""
        if not control_number:
            return None
        return self.db.query(Collection).filter_by(control_number=control_number).first()

    def insert(self, record: Any) -> int:
        """Add a record and flush to obtain its ID."""
        self.db.add(record)
        self.db.flush()
        return record.id

    def update(self, record: Any, values: dict[str, Any]) -> None:
        """Apply column values to a loaded record and flush."""
        for name, value in values.items():
            setattr(record, name, value)
        self.db.flush()

    def get(self, model: Type[RecordT], record_id: int) -> Optional[RecordT]:
        return self.db.get(model, record_id)

    def delete(self, model: Type[RecordT], record_id: int) -> bool:
        """Delete a record by ID. Returns False when it does not exist."""
        record = self.db.get(model, record_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        return True

    def list_records(
        self,
        model: Type[RecordT],
        period: Optional[Period] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[RecordT]:
        """List records newest first, optionally filtered by period or date range."""
        query = self.db.query(model)
        if period is not None:
            query = query.filter(model.date >= period.start, model.date <= period.end)
        if start_date is not None:
            query = query.filter(model.date >= start_date)
        if end_date is not None:
            query = query.filter(model.date <= end_date)
        query = query.order_by(model.date.desc(), model.created_at.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def find_budget_plan(self, year: int) -> Optional[BudgetPlan]:
        """Load the budget plan for a year with its categories."""
        stmt = (
            select(BudgetPlan)
            .options(selectinload(BudgetPlan.categories))
            .where(BudgetPlan.year == year)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def sum_expenses_by_category_in_period(self, period: Period) -> list[CategorySum]:
        """Sum expense totals per (category, subcategory) within a period."""
        stmt = (
            select(
                Expense.category,
                Expense.subcategory,
                func.coalesce(func.sum(Expense.total_amount), 0),
            )
            .where(Expense.date >= period.start, Expense.date <= period.end)
            .group_by(Expense.category, Expense.subcategory)
            .order_by(Expense.category, Expense.subcategory)
        )
        rows = self.db.execute(stmt).all()
        return [
            CategorySum(category, subcategory, round_currency(Decimal(str(total))))
            for category, subcategory, total in rows
        ]

    def sum_columns(
        self,
        model: Type[RecordT],
        columns: Sequence[str],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[str, Any]:
        """Sum the named columns over a date range; also returns 'count'."""
        selected = [func.coalesce(func.sum(getattr(model, name)), 0) for name in columns]
        stmt = select(func.count(model.id), *selected)
        if start_date is not None:
            stmt = stmt.where(model.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(model.date <= end_date)
        row = self.db.execute(stmt).one()

        totals: dict[str, Any] = {"count": row[0]}
        for name, value in zip(columns, row[1:]):
            totals[name] = round_currency(Decimal(str(value)))
        return totals


__all__ = ["LedgerRepository", "CategorySum"]
