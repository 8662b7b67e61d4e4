"""Pydantic schemas for budget plans and comparisons."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from church_ledger.schemas.collections import AmountInput


class BudgetCategoryPayload(BaseModel):
    category: str | None = None
    subcategory: str | None = None
    percentage: AmountInput = None
    budget_amount: AmountInput = None
    description: str | None = None


class BudgetPlanPayload(BaseModel):
    """Request payload for POST /api/budget/plan (creates or replaces a year)."""

    year: int | None = None
    target_offering: AmountInput = None
    shared_fund_percentage: AmountInput = Decimal("10")
    pastoral_team_percentage: AmountInput = Decimal("10")
    operational_percentage: AmountInput = Decimal("80")
    categories: list[BudgetCategoryPayload] = Field(default_factory=list)

    def category_dicts(self) -> list[dict[str, Any]]:
        return [category.model_dump() for category in self.categories]


class BudgetCategoryResponse(BaseModel):
    id: int
    category: str
    subcategory: str | None = None
    percentage: Decimal | None = None
    budget_amount: Decimal
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BudgetPlanResponse(BaseModel):
    id: int
    year: int
    target_offering: Decimal
    shared_fund_percentage: Decimal
    pastoral_team_percentage: Decimal
    operational_percentage: Decimal
    created_by: str | None = None
    categories: list[BudgetCategoryResponse] = []

    model_config = ConfigDict(from_attributes=True)


class BudgetComparisonLineResponse(BaseModel):
    """Budget vs actual for one category line."""

    category: str
    subcategory: str | None = None
    budget_amount: Decimal
    actual_amount: Decimal
    variance: Decimal
    percentage: Decimal | None = None
    in_plan: bool = True

    model_config = ConfigDict(from_attributes=True)


class AvailableBudgetResponse(BaseModel):
    budget_amount: Decimal
    spent_amount: Decimal
    available_amount: Decimal
