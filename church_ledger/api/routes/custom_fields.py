"""Custom field API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from church_ledger.api.deps import get_actor
from church_ledger.api.errors import InvalidQueryError
from church_ledger.database import get_db
from church_ledger.models import RecordTable
from church_ledger.schemas.custom_fields import (
    CustomFieldCreate,
    CustomFieldResponse,
    CustomFieldUpdate,
    CustomFieldValues,
)
from church_ledger.services.custom_fields import CustomFieldService

router = APIRouter(prefix="/api/custom-fields", tags=["custom-fields"])


def _table(table_name: str) -> RecordTable:
    try:
        return RecordTable(table_name)
    except ValueError as e:
        raise InvalidQueryError(f"Invalid table name: {table_name}") from e


@router.get("/{table_name}", response_model=list[CustomFieldResponse])
def list_fields(table_name: str, db: Session = Depends(get_db)):  # noqa: B008
    """Active fields for a table in display order."""
    return CustomFieldService(db).list_fields(_table(table_name))


@router.post("", response_model=CustomFieldResponse, status_code=status.HTTP_201_CREATED)
def create_field(
    payload: CustomFieldCreate,
    actor: str = Depends(get_actor),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    return CustomFieldService(db).create_field(**payload.model_dump(), created_by=actor)


@router.put("/{field_id}", response_model=CustomFieldResponse)
def update_field(
    field_id: int, payload: CustomFieldUpdate, db: Session = Depends(get_db)  # noqa: B008
):
    return CustomFieldService(db).update_field(field_id, **payload.model_dump())


@router.delete("/{field_id}")
def delete_field(field_id: int, db: Session = Depends(get_db)):  # noqa: B008
    """Soft delete: the field is hidden, stored values are kept."""
    CustomFieldService(db).deactivate_field(field_id)
    return {"message": "Custom field deactivated successfully"}


@router.get("/{table_name}/{record_id}/values")
def get_values(table_name: str, record_id: int, db: Session = Depends(get_db)):  # noqa: B008
    return CustomFieldService(db).get_values(_table(table_name), record_id)


@router.post("/{table_name}/{record_id}/values")
def save_values(
    table_name: str,
    record_id: int,
    payload: CustomFieldValues,
    db: Session = Depends(get_db),  # noqa: B008
):
    """Save all values of one record at once; nothing is saved on failure."""
    saved = CustomFieldService(db).save_values(_table(table_name), record_id, payload.values)
    return {"message": "Custom field values saved successfully", "saved": saved}
