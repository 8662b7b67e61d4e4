"""Budget plan management and budget-vs-actual comparison.

The comparison joins expense totals per (category, subcategory) against the
plan's category lines. The stored budget_amount of a line is authoritative;
its percentage is informational and is never re-derived from the target
offering here. Expense groups the plan does not know about are reported as
zero-budget lines rather than rejected.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from church_ledger.config import settings
from church_ledger.models import BudgetCategory, BudgetPlan, Expense
from church_ledger.services.allocation_service import FundSplit
from church_ledger.services.errors import ErrorCode, PersistenceError, RecordValidationError
from church_ledger.services.parsers import (
    ZERO,
    clean_text,
    normalize_amount,
    parse_optional_decimal,
    round_currency,
)
from church_ledger.services.periods import Period
from church_ledger.services.repository import LedgerRepository
from church_ledger.services.validation import ValidationIssue

logger = logging.getLogger(__name__)

CategoryKey = tuple[str, Optional[str]]


@dataclass(frozen=True)
class BudgetComparisonLine:
    """Budget vs actual for one category line."""

    category: str
    subcategory: Optional[str]
    budget_amount: Decimal
    actual_amount: Decimal
    variance: Decimal
    percentage: Optional[Decimal] = None
    in_plan: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "subcategory": self.subcategory,
            "budget_amount": self.budget_amount,
            "actual_amount": self.actual_amount,
            "variance": self.variance,
            "percentage": self.percentage,
            "in_plan": self.in_plan,
        }


def _sort_key(key: CategoryKey) -> tuple[str, str]:
    return key[0], key[1] or ""


def join_budget_lines(
    plan_categories: Iterable[Any],
    actual_by_key: Mapping[CategoryKey, Decimal],
) -> list[BudgetComparisonLine]:
    """Join actual totals onto plan lines; unknown groups become zero-budget lines."""
    lines: list[BudgetComparisonLine] = []
    planned_keys: set[CategoryKey] = set()

    for item in sorted(plan_categories, key=lambda c: _sort_key((c.category, c.subcategory))):
        key = (item.category, item.subcategory)
        planned_keys.add(key)
        budget = round_currency(Decimal(str(item.budget_amount or 0)))
        actual = actual_by_key.get(key, ZERO)
        percentage = item.percentage
        lines.append(
            BudgetComparisonLine(
                category=item.category,
                subcategory=item.subcategory,
                budget_amount=budget,
                actual_amount=round_currency(actual),
                variance=round_currency(budget - actual),
                percentage=Decimal(str(percentage)) if percentage is not None else None,
            )
        )

    for key in sorted(set(actual_by_key) - planned_keys, key=_sort_key):
        actual = round_currency(actual_by_key[key])
        logger.info(f"Expense category {key[0]!r}/{key[1]!r} is not in the budget plan")
        lines.append(
            BudgetComparisonLine(
                category=key[0],
                subcategory=key[1],
                budget_amount=round_currency(ZERO),
                actual_amount=actual,
                variance=-actual,
                in_plan=False,
            )
        )
    return lines


def compare_budget(
    plan_categories: Iterable[Any],
    expenses: Iterable[Any],
    period: Period,
) -> list[BudgetComparisonLine]:
    """Compare plan lines with expenses dated inside a period.

    Args:
        plan_categories: Objects with category, subcategory, budget_amount, percentage
        expenses: Objects with date, category, subcategory, total_amount
        period: Year or year+month to include

    Returns:
        Plan lines in (category, subcategory) order, followed by unplanned groups
    """
    actual_by_key: dict[CategoryKey, Decimal] = {}
    for expense in expenses:
        if not period.contains(expense.date):
            continue
        key = (expense.category, expense.subcategory)
        actual_by_key[key] = actual_by_key.get(key, ZERO) + normalize_amount(expense.total_amount)
    return join_budget_lines(plan_categories, actual_by_key)


class BudgetService:
    """Budget plan persistence and reporting."""

    def __init__(self, db: Session):
        """Initialize budget service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.repository = LedgerRepository(db)

    def get_plan(self, year: int) -> Optional[BudgetPlan]:
        return self.repository.find_budget_plan(year)

    def current_split(self, year: int) -> FundSplit:
        """Fund split for collections dated in a year; settings default without a plan."""
        plan = self.repository.find_budget_plan(year)
        if plan is None:
            return FundSplit.from_settings(settings)
        return FundSplit.from_plan(plan)

    def _build_categories(self, categories: Iterable[Mapping[str, Any]]) -> list[BudgetCategory]:
        issues = []
        built = []
        for index, cat in enumerate(categories):
            name = clean_text(cat.get("category"))
            if not name:
                issues.append(
                    ValidationIssue(
                        f"categories[{index}].category",
                        ErrorCode.MISSING_REQUIRED_FIELD,
                        "Category is required",
                    )
                )
                continue
            try:
                percentage = parse_optional_decimal(cat.get("percentage"))
            except ValueError as e:
                issues.append(
                    ValidationIssue(f"categories[{index}].percentage", ErrorCode.INVALID_AMOUNT, str(e))
                )
                continue
            built.append(
                BudgetCategory(
                    category=name,
                    subcategory=clean_text(cat.get("subcategory")),
                    percentage=percentage,
                    budget_amount=round_currency(normalize_amount(cat.get("budget_amount"))),
                    description=clean_text(cat.get("description")),
                )
            )
        if issues:
            raise RecordValidationError(issues)
        return built

    def save_plan(
        self,
        year: Optional[int],
        target_offering: Any,
        shared_fund_percentage: Any = Decimal("10"),
        pastoral_team_percentage: Any = Decimal("10"),
        operational_percentage: Any = Decimal("80"),
        categories: Iterable[Mapping[str, Any]] = (),
        created_by: Optional[str] = None,
    ) -> BudgetPlan:
        """Create or replace the plan for a year.

        The plan row is upserted and its categories replaced wholesale in one
        transaction; readers never see the plan without categories.

        Raises:
            RecordValidationError: If year or target offering is missing
            PersistenceError: If the database write fails
        """
        target = normalize_amount(target_offering)
        issues = []
        if not year:
            issues.append(ValidationIssue("year", ErrorCode.MISSING_REQUIRED_FIELD, "Year is required"))
        if target <= ZERO:
            issues.append(
                ValidationIssue(
                    "target_offering", ErrorCode.MISSING_REQUIRED_FIELD, "Target offering is required"
                )
            )
        if issues:
            raise RecordValidationError(issues)

        new_categories = self._build_categories(categories)
        percentages = {
            "shared_fund_percentage": normalize_amount(shared_fund_percentage),
            "pastoral_team_percentage": normalize_amount(pastoral_team_percentage),
            "operational_percentage": normalize_amount(operational_percentage),
        }
        if sum(percentages.values()) != Decimal("100"):
            logger.warning(f"Budget plan {year} top-level percentages do not sum to 100: {percentages}")

        try:
            plan = self.repository.find_budget_plan(year)
            if plan is None:
                plan = BudgetPlan(year=year, target_offering=round_currency(target), **percentages)
                self.db.add(plan)
            else:
                plan.target_offering = round_currency(target)
                for name, value in percentages.items():
                    setattr(plan, name, value)
                # delete-orphan removes the previous lines in the same flush
                plan.categories.clear()
                self.db.flush()
            plan.created_by = created_by
            plan.categories.extend(new_categories)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save budget plan {year}: {e}")
            raise PersistenceError(f"Failed to save budget plan {year}") from e

        self.db.refresh(plan)
        logger.info(f"Saved budget plan {year} with {len(new_categories)} categories")
        return plan

    def compare(self, year: int, month: Optional[int] = None) -> list[BudgetComparisonLine]:
        """Budget vs actual for a year's plan; empty when no plan exists."""
        plan = self.repository.find_budget_plan(year)
        if plan is None:
            return []
        period = Period(year=year, month=month)
        sums = self.repository.sum_expenses_by_category_in_period(period)
        actual_by_key = {(row.category, row.subcategory): row.total for row in sums}
        return join_budget_lines(plan.categories, actual_by_key)

    def available_budget(
        self, year: int, category: str, subcategory: Optional[str] = None
    ) -> dict[str, Decimal]:
        """Budget, spent and remaining amount for a category in a year.

        A plan line without subcategory covers spending in every subcategory.
        """
        plan = self.repository.find_budget_plan(year)
        result = {"budget_amount": ZERO, "spent_amount": ZERO, "available_amount": ZERO}
        if plan is None:
            return result

        lines = [
            c
            for c in plan.categories
            if c.category == category and (subcategory is None or c.subcategory == subcategory)
        ]
        if not lines:
            return result

        sums = self.repository.sum_expenses_by_category_in_period(Period(year=year))
        budget = sum((Decimal(str(line.budget_amount)) for line in lines), ZERO)
        spent = ZERO
        for row in sums:
            if row.category != category:
                continue
            if any(line.subcategory is None or line.subcategory == row.subcategory for line in lines):
                spent += row.total

        return {
            "budget_amount": round_currency(budget),
            "spent_amount": round_currency(spent),
            "available_amount": round_currency(budget - spent),
        }

    def budget_alerts(self, year: int, threshold: Decimal = Decimal("80")) -> dict[str, Any]:
        """Year-to-date spending against the target offering, with threshold alerts."""
        plan = self.repository.find_budget_plan(year)
        if plan is None:
            return {"alerts": [], "budget": None, "message": "No budget plan found"}

        totals = self.repository.sum_columns(
            Expense,
            ["total_amount"],
            start_date=date(year, 1, 1),
            end_date=date(year, 12, 31),
        )
        ytd = totals["total_amount"]
        annual = Decimal(str(plan.target_offering))
        percent_used = round_currency(ytd / annual * 100) if annual > 0 else ZERO

        alerts = []
        if percent_used >= threshold:
            severity = "critical" if percent_used >= 95 else "warning"
            logger.warning(f"Budget {year} is {percent_used}% utilized ({severity})")
            alerts.append(
                {
                    "type": "budget_threshold",
                    "severity": severity,
                    "message": f"Budget {percent_used:.1f}% utilized",
                }
            )

        return {
            "alerts": alerts,
            "budget": {
                "year": year,
                "annual_budget": round_currency(annual),
                "ytd_expenses": ytd,
                "percent_used": percent_used,
                "remaining": round_currency(annual - ytd),
            },
        }


__all__ = [
    "BudgetService",
    "BudgetComparisonLine",
    "compare_budget",
    "join_budget_lines",
]
