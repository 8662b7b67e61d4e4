"""Custom field definitions and per-record values.

Values are stored as text and converted by field type when read. Saving the
values of one record is all-or-nothing.
"""

import logging
import re
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from church_ledger.models import CustomField, CustomFieldValue, FieldType, RecordTable
from church_ledger.services.errors import (
    DuplicateFieldError,
    ErrorCode,
    PersistenceError,
    RecordNotFoundError,
    RecordValidationError,
)
from church_ledger.services.parsers import clean_text, normalize_amount, parse_boolean
from church_ledger.services.validation import ValidationIssue

logger = logging.getLogger(__name__)

FIELD_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

UPDATABLE_ATTRIBUTES = (
    "field_label",
    "default_value",
    "is_required",
    "display_order",
    "category",
    "description",
    "is_active",
)


def to_storage(value: Any) -> Optional[str]:
    """Serialize a value for the text column."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def from_storage(field_type: FieldType, value: Optional[str]) -> Any:
    """Convert a stored text value according to its field type."""
    if value is None:
        return None
    if field_type == FieldType.DECIMAL:
        return normalize_amount(value)
    if field_type == FieldType.INTEGER:
        return int(normalize_amount(value))
    if field_type == FieldType.BOOLEAN:
        return parse_boolean(value)
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class CustomFieldService:
    """Admin-defined extra fields for collections and expenses."""

    def __init__(self, db: Session):
        """Initialize custom field service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def list_fields(self, table_name: RecordTable, include_inactive: bool = False) -> list[CustomField]:
        query = self.db.query(CustomField).filter(CustomField.table_name == RecordTable(table_name))
        if not include_inactive:
            query = query.filter(CustomField.is_active.is_(True))
        return query.order_by(CustomField.display_order, CustomField.created_at).all()

    def get_field(self, field_id: int) -> CustomField:
        field = self.db.get(CustomField, field_id)
        if field is None:
            raise RecordNotFoundError("custom field", field_id)
        return field

    def create_field(
        self,
        table_name: str,
        field_name: str,
        field_label: str,
        field_type: str,
        default_value: Any = None,
        is_required: bool = False,
        display_order: int = 0,
        category: Optional[str] = None,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> CustomField:
        """Define a new custom field.

        Raises:
            RecordValidationError: If name, label, type or table is invalid
            DuplicateFieldError: If the name is already used on the table
        """
        issues = []
        label = clean_text(field_label)
        if not label:
            issues.append(
                ValidationIssue("field_label", ErrorCode.MISSING_REQUIRED_FIELD, "Field label is required")
            )
        if not field_name or not FIELD_NAME_PATTERN.match(field_name):
            issues.append(
                ValidationIssue(
                    "field_name",
                    ErrorCode.INVALID_VALUE,
                    "Field name must start with a letter and contain only lowercase letters, "
                    "numbers, and underscores",
                )
            )
        try:
            table = RecordTable(table_name)
        except ValueError:
            issues.append(ValidationIssue("table_name", ErrorCode.INVALID_VALUE, "Invalid table name"))
        try:
            ftype = FieldType(field_type)
        except ValueError:
            issues.append(ValidationIssue("field_type", ErrorCode.INVALID_VALUE, "Invalid field type"))
        if issues:
            raise RecordValidationError(issues)

        existing = (
            self.db.query(CustomField).filter_by(table_name=table, field_name=field_name).first()
        )
        if existing:
            raise DuplicateFieldError(f"Field name '{field_name}' already exists for {table.value}")

        field = CustomField(
            table_name=table,
            field_name=field_name,
            field_label=label,
            field_type=ftype,
            default_value=to_storage(default_value),
            is_required=bool(is_required),
            display_order=display_order or 0,
            category=clean_text(category),
            description=clean_text(description),
            created_by=created_by,
        )
        try:
            self.db.add(field)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateFieldError(
                f"Field name '{field_name}' already exists for {table.value}"
            ) from e
        self.db.refresh(field)
        logger.info(f"Created custom field {table.value}.{field_name} (ID={field.id})")
        return field

    def update_field(self, field_id: int, **changes: Any) -> CustomField:
        """Change field attributes; None leaves an attribute as it is."""
        field = self.get_field(field_id)
        for name in UPDATABLE_ATTRIBUTES:
            value = changes.get(name)
            if value is None:
                continue
            if name == "default_value":
                value = to_storage(value)
            setattr(field, name, value)
        self.db.commit()
        self.db.refresh(field)
        return field

    def deactivate_field(self, field_id: int) -> CustomField:
        """Soft-delete a field; stored values are kept."""
        field = self.get_field(field_id)
        field.is_active = False
        self.db.commit()
        logger.info(f"Deactivated custom field {field.field_name} (ID={field_id})")
        return field

    def get_values(self, table_name: str, record_id: int) -> dict[str, Any]:
        """Values of all active fields for a record, falling back to defaults."""
        table = RecordTable(table_name)
        fields = self.list_fields(table)
        stored = {
            v.custom_field_id: v.field_value
            for v in self.db.query(CustomFieldValue).filter_by(record_id=record_id, table_name=table)
        }
        return {
            field.field_name: from_storage(field.field_type, stored.get(field.id, field.default_value))
            for field in fields
        }

    def missing_required(self, table_name: str, values: Optional[Mapping[str, Any]]) -> list[ValidationIssue]:
        """Issues for required active fields without a usable value or default."""
        values = values or {}
        issues = []
        for field in self.list_fields(RecordTable(table_name)):
            if not field.is_required:
                continue
            if _is_blank(values.get(field.field_name)) and _is_blank(field.default_value):
                issues.append(
                    ValidationIssue(
                        f"custom_fields.{field.field_name}",
                        ErrorCode.MISSING_REQUIRED_FIELD,
                        f"{field.field_label} is required",
                    )
                )
        return issues

    def stage_values(self, table_name: str, record_id: int, values: Mapping[str, Any]) -> int:
        """Upsert values keyed by (field, record, table) without committing.

        Unknown or inactive field names are skipped.

        Returns:
            Number of values written
        """
        table = RecordTable(table_name)
        fields = {field.field_name: field for field in self.list_fields(table)}

        written = 0
        for name, value in values.items():
            field = fields.get(name)
            if field is None:
                logger.debug(f"Skipping unknown custom field {table.value}.{name}")
                continue
            existing = (
                self.db.query(CustomFieldValue)
                .filter_by(custom_field_id=field.id, record_id=record_id, table_name=table)
                .first()
            )
            if existing is None:
                self.db.add(
                    CustomFieldValue(
                        custom_field_id=field.id,
                        record_id=record_id,
                        table_name=table,
                        field_value=to_storage(value),
                    )
                )
            else:
                existing.field_value = to_storage(value)
            written += 1
        self.db.flush()
        return written

    def delete_values(self, table_name: str, record_id: int) -> int:
        """Remove every stored value of a record without committing."""
        removed = (
            self.db.query(CustomFieldValue)
            .filter_by(record_id=record_id, table_name=RecordTable(table_name))
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return removed

    def save_values(self, table_name: str, record_id: int, values: Mapping[str, Any]) -> int:
        """Save all values for one record in a single transaction.

        Raises:
            RecordValidationError: If a required field is given a blank value
            PersistenceError: If any write fails; nothing is saved
        """
        fields = {f.field_name: f for f in self.list_fields(RecordTable(table_name))}
        issues = [
            ValidationIssue(
                f"custom_fields.{name}",
                ErrorCode.MISSING_REQUIRED_FIELD,
                f"{fields[name].field_label} is required",
            )
            for name, value in values.items()
            if name in fields and fields[name].is_required and _is_blank(value)
        ]
        if issues:
            raise RecordValidationError(issues)

        try:
            written = self.stage_values(table_name, record_id, values)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save custom field values for {table_name} {record_id}: {e}")
            raise PersistenceError("Failed to save custom field values") from e
        logger.info(f"Saved {written} custom field values for {table_name} {record_id}")
        return written


__all__ = ["CustomFieldService", "FIELD_NAME_PATTERN", "to_storage", "from_storage"]
