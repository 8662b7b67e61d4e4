"""Record validation for collections and expenses before persistence.

All issues of a submission are collected so the form can show them together.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Protocol

from church_ledger.services.errors import ErrorCode, RecordValidationError
from church_ledger.services.parsers import clean_text

logger = logging.getLogger(__name__)

DEFAULT_EXPENSE_PARTICULAR = "Expense"


class ControlNumberLookup(Protocol):
    """Persistence query needed for control number uniqueness."""

    def find_by_control_number(self, control_number: str) -> Optional[Any]: ...


@dataclass(frozen=True)
class ValidationIssue:
    """Field-level validation problem."""

    field: str
    code: ErrorCode
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code.value, "message": self.message}


@dataclass
class ValidationResult:
    """Validated record values plus every issue found."""

    record: dict[str, Any]
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def add(self, field_name: str, code: ErrorCode, message: str) -> None:
        self.issues.append(ValidationIssue(field_name, code, message))

    def raise_for_issues(self) -> dict[str, Any]:
        """Return the record, or raise RecordValidationError with all issues."""
        if self.issues:
            raise RecordValidationError(self.issues)
        return self.record


class RecordValidator:
    """Field presence and uniqueness rules per record kind."""

    def __init__(self, lookup: Optional[ControlNumberLookup] = None):
        """Initialize validator.

        Args:
            lookup: Persistence collaborator used for control number uniqueness
        """
        self.lookup = lookup

    def _check_total(self, result: ValidationResult) -> None:
        total = result.record.get("total_amount")
        if total is None or Decimal(str(total)) <= 0:
            result.add("total_amount", ErrorCode.INVALID_AMOUNT, "Total amount must be greater than 0")

    def validate_collection(
        self, record: dict[str, Any], record_id: Optional[int] = None
    ) -> ValidationResult:
        """Validate a collection.

        Args:
            record: Reconciled collection values
            record_id: ID of the record being updated (excluded from uniqueness)

        Returns:
            ValidationResult; empty control numbers are normalized to None
        """
        values = dict(record)
        values["particular"] = clean_text(values.get("particular"))
        values["control_number"] = clean_text(values.get("control_number"))
        result = ValidationResult(record=values)

        if not values.get("date"):
            result.add("date", ErrorCode.MISSING_REQUIRED_FIELD, "Date is required")
        if not values["particular"]:
            result.add("particular", ErrorCode.MISSING_REQUIRED_FIELD, "Particular is required")
        self._check_total(result)

        control_number = values["control_number"]
        if control_number and self.lookup is not None:
            existing = self.lookup.find_by_control_number(control_number)
            if existing is not None and existing.id != record_id:
                result.add(
                    "control_number",
                    ErrorCode.DUPLICATE_CONTROL_NUMBER,
                    f"Control number '{control_number}' already exists",
                )

        if not result.ok:
            logger.warning(f"Collection rejected: {[issue.field for issue in result.issues]}")
        return result

    def validate_expense(self, record: dict[str, Any]) -> ValidationResult:
        """Validate an expense; a missing particular gets a placeholder instead of failing."""
        values = dict(record)
        values["particular"] = clean_text(values.get("particular")) or DEFAULT_EXPENSE_PARTICULAR
        values["category"] = clean_text(values.get("category"))
        values["subcategory"] = clean_text(values.get("subcategory"))
        result = ValidationResult(record=values)

        if not values.get("date"):
            result.add("date", ErrorCode.MISSING_REQUIRED_FIELD, "Date is required")
        if not values["category"]:
            result.add("category", ErrorCode.MISSING_REQUIRED_FIELD, "Category is required")
        self._check_total(result)

        if not result.ok:
            logger.warning(f"Expense rejected: {[issue.field for issue in result.issues]}")
        return result


__all__ = [
    "RecordValidator",
    "ValidationIssue",
    "ValidationResult",
    "DEFAULT_EXPENSE_PARTICULAR",
]
