"""Pydantic schemas for expense records."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from church_ledger.models import FundSource, SubmissionChannel
from church_ledger.schemas.collections import AmountInput


class ExpensePayload(BaseModel):
    """Request payload for POST/PUT /api/expenses."""

    date: str | None = Field(None, description="YYYY-MM-DD or MM/DD/YYYY")
    particular: str | None = None
    forms_number: str | None = None
    cheque_number: str | None = None
    category: str | None = Field(None, description="Budget category the expense counts against")
    subcategory: str | None = None
    fund_source: str | None = Field(None, description="operational, pastoral_team or shared_fund")
    total_amount: AmountInput = None
    budget_amount: AmountInput = None
    percentage_allocation: AmountInput = None

    shared_fund_expense: AmountInput = None
    pastoral_worker_support: AmountInput = None
    cap_assistance: AmountInput = None
    honorarium: AmountInput = None
    conference_seminar: AmountInput = None
    fellowship_events: AmountInput = None
    anniversary_christmas: AmountInput = None
    supplies: AmountInput = None
    utilities: AmountInput = None
    vehicle_maintenance: AmountInput = None
    lto_registration: AmountInput = None
    transportation_gas: AmountInput = None
    building_maintenance: AmountInput = None
    abccop_national: AmountInput = None
    cbcc_share: AmountInput = None
    kabalikat_share: AmountInput = None
    abccop_community: AmountInput = None

    custom_fields: dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")

    def record_data(self) -> dict[str, Any]:
        return self.model_dump(exclude={"custom_fields"})


class ExpenseResponse(BaseModel):
    """Response schema for a stored expense."""

    id: int
    date: date
    particular: str
    forms_number: str | None = None
    cheque_number: str | None = None
    category: str
    subcategory: str | None = None
    fund_source: FundSource
    total_amount: Decimal
    budget_amount: Decimal | None = None
    percentage_allocation: Decimal | None = None

    shared_fund_expense: Decimal
    pastoral_worker_support: Decimal
    cap_assistance: Decimal
    honorarium: Decimal
    conference_seminar: Decimal
    fellowship_events: Decimal
    anniversary_christmas: Decimal
    supplies: Decimal
    utilities: Decimal
    vehicle_maintenance: Decimal
    lto_registration: Decimal
    transportation_gas: Decimal
    building_maintenance: Decimal
    abccop_national: Decimal
    cbcc_share: Decimal
    kabalikat_share: Decimal
    abccop_community: Decimal

    created_by: str
    submitted_via: SubmissionChannel
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
