"""Pydantic schemas for custom field definitions and values."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from church_ledger.models import FieldType, RecordTable


class CustomFieldCreate(BaseModel):
    """Request payload for POST /api/custom-fields."""

    table_name: str = Field(..., description="collections or expenses")
    field_name: str = Field(..., description="Lowercase identifier, e.g. mission_offering")
    field_label: str = Field(..., description="Label shown on forms")
    field_type: str = Field(..., description="decimal, text, date, integer or boolean")
    default_value: Any = None
    is_required: bool = False
    display_order: int = 0
    category: str | None = None
    description: str | None = None


class CustomFieldUpdate(BaseModel):
    """Request payload for PUT /api/custom-fields/{id}; omitted attributes are kept."""

    field_label: str | None = None
    default_value: Any = None
    is_required: bool | None = None
    display_order: int | None = None
    category: str | None = None
    description: str | None = None
    is_active: bool | None = None


class CustomFieldResponse(BaseModel):
    id: int
    table_name: RecordTable
    field_name: str
    field_label: str
    field_type: FieldType
    default_value: str | None = None
    is_required: bool
    is_active: bool
    display_order: int
    category: str | None = None
    description: str | None = None
    created_by: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomFieldValues(BaseModel):
    """Request payload for POST /api/custom-fields/{table}/{record_id}/values."""

    values: dict[str, Any]
