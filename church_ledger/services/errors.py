"""Domain exceptions for the ledger core.

Validation problems are collected into RecordValidationError; infrastructure
failures are wrapped in PersistenceError so callers can tell the two apart.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable codes for field-level validation issues."""

    INVALID_AMOUNT = "invalid_amount"
    MISSING_REQUIRED_FIELD = "missing_required_field"
    DUPLICATE_CONTROL_NUMBER = "duplicate_control_number"
    INVALID_VALUE = "invalid_value"


class LedgerError(Exception):
    """Base exception for ledger errors."""

    pass


class InvalidAmountError(LedgerError):
    """Reconciled total is not positive, or an allocation input is negative."""

    pass


class RecordValidationError(LedgerError):
    """One or more field-level validation issues for a submission."""

    def __init__(self, issues: list):
        self.issues = list(issues)
        fields = ", ".join(issue.field for issue in self.issues)
        super().__init__(f"Validation failed for: {fields}")


class DuplicateControlNumberError(LedgerError):
    """Control number already belongs to another collection."""

    def __init__(self, control_number: str):
        self.control_number = control_number
        super().__init__(f"Control number '{control_number}' already exists")


class RecordNotFoundError(LedgerError):
    """Requested record does not exist."""

    def __init__(self, kind: str, record_id: int):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} {record_id} not found")


class PersistenceError(LedgerError):
    """Database operation error (connection, constraint violation, etc.)."""

    pass


class DuplicateFieldError(LedgerError):
    """Custom field name already exists for the table."""

    pass


class CredentialsError(LedgerError):
    """Google credentials file not found or invalid."""

    pass


class SheetsAPIError(LedgerError):
    """Google Sheets API error (authentication, network, etc.)."""

    pass
