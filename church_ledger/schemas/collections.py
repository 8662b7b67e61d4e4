"""Pydantic schemas for collection records."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from church_ledger.models import SubmissionChannel

# Amounts are normalized by the service ("₱1,250", "", None all accepted)
AmountInput = Decimal | float | str | None


class CollectionPayload(BaseModel):
    """Request payload for POST/PUT /api/collections."""

    date: str | None = Field(None, description="YYYY-MM-DD or MM/DD/YYYY")
    particular: str | None = Field(None, description="Description of the collection")
    control_number: str | None = Field(None, description="Unique reference tag")
    payment_method: str | None = Field(None, description="Cash, Cheque, Bank Transfer, ...")
    total_amount: AmountInput = Field(None, description="Manual total; breakdown sum when empty")

    general_tithes_offering: AmountInput = None
    bank_interest: AmountInput = None
    sisterhood_san_juan: AmountInput = None
    sisterhood_labuin: AmountInput = None
    brotherhood: AmountInput = None
    youth: AmountInput = None
    couples: AmountInput = None
    sunday_school: AmountInput = None
    special_purpose_pledge: AmountInput = None

    custom_fields: dict[str, Any] | None = Field(None, description="Custom field values by name")

    model_config = ConfigDict(extra="ignore")

    def record_data(self) -> dict[str, Any]:
        return self.model_dump(exclude={"custom_fields"})


class CollectionResponse(BaseModel):
    """Response schema for a stored collection."""

    id: int
    date: date
    particular: str
    control_number: str | None = None
    payment_method: str
    total_amount: Decimal

    general_tithes_offering: Decimal
    bank_interest: Decimal
    sisterhood_san_juan: Decimal
    sisterhood_labuin: Decimal
    brotherhood: Decimal
    youth: Decimal
    couples: Decimal
    sunday_school: Decimal
    special_purpose_pledge: Decimal

    shared_fund_share: Decimal
    pastoral_team_share: Decimal
    operational_fund_share: Decimal

    created_by: str
    submitted_via: SubmissionChannel
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FundAllocationSummary(BaseModel):
    """Totals of general tithes and the three allocated shares."""

    total_tithes: Decimal
    total_shared_fund: Decimal
    total_pastoral_team: Decimal
    total_operational: Decimal
