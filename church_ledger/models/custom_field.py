"""Custom field models: admin-defined extra columns for collections and expenses."""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from church_ledger.models import Base, BaseModel


class RecordTable(str, Enum):
    """Record tables that accept custom fields."""

    COLLECTIONS = "collections"
    EXPENSES = "expenses"


class FieldType(str, Enum):
    """Storage/conversion type of a custom field value."""

    DECIMAL = "decimal"
    TEXT = "text"
    DATE = "date"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class CustomField(Base, BaseModel):
    """Definition of an extra field. Deactivated fields are kept, not deleted."""

    __tablename__ = "custom_fields"

    table_name: Mapped[RecordTable] = mapped_column(SQLEnum(RecordTable), nullable=False)
    field_name: Mapped[str] = mapped_column(String(64), nullable=False)
    field_label: Mapped[str] = mapped_column(String(255), nullable=False)
    field_type: Mapped[FieldType] = mapped_column(SQLEnum(FieldType), nullable=False)
    default_value: Mapped[str | None] = mapped_column(Text(), nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(nullable=False, default=0)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    values: Mapped[list["CustomFieldValue"]] = relationship(
        "CustomFieldValue", back_populates="field", cascade="all, delete-orphan"
    )

    __table_args__ = (UniqueConstraint("table_name", "field_name", name="uq_custom_field_name"),)

    def __repr__(self) -> str:
        return (
            f"<CustomField(id={self.id}, table={self.table_name}, name={self.field_name}, "
            f"type={self.field_type}, active={self.is_active})>"
        )


class CustomFieldValue(Base, BaseModel):
    """Stored value of a custom field for one record, kept as text."""

    __tablename__ = "custom_field_values"

    custom_field_id: Mapped[int] = mapped_column(
        ForeignKey("custom_fields.id"), nullable=False, index=True
    )
    record_id: Mapped[int] = mapped_column(nullable=False)
    table_name: Mapped[RecordTable] = mapped_column(SQLEnum(RecordTable), nullable=False)
    field_value: Mapped[str | None] = mapped_column(Text(), nullable=True)

    field: Mapped[CustomField] = relationship("CustomField", back_populates="values")

    __table_args__ = (
        UniqueConstraint(
            "custom_field_id", "record_id", "table_name", name="uq_custom_field_value_record"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<CustomFieldValue(field_id={self.custom_field_id}, record_id={self.record_id}, "
            f"value={self.field_value})>"
        )


__all__ = ["CustomField", "CustomFieldValue", "FieldType", "RecordTable"]
