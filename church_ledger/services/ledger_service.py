"""Ledger service for recording collections and expenses.

Every submission runs the same pipeline inside one transaction:
normalize -> reconcile total -> allocate (collections) -> validate -> persist.
Either the whole record (and its custom field values) is stored, or nothing is.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from church_ledger.models import Collection, Expense, FundSource, RecordTable, SubmissionChannel
from church_ledger.services.allocation_service import AllocationService
from church_ledger.services.budget_service import BudgetService
from church_ledger.services.custom_fields import CustomFieldService
from church_ledger.services.errors import (
    DuplicateControlNumberError,
    ErrorCode,
    InvalidAmountError,
    PersistenceError,
    RecordNotFoundError,
)
from church_ledger.services.parsers import (
    clean_text,
    normalize_amount,
    parse_date,
    round_currency,
)
from church_ledger.services.periods import Period
from church_ledger.services.reconciliation import (
    COLLECTION_AMOUNT_FIELDS,
    EXPENSE_AMOUNT_FIELDS,
    reconcile_total,
)
from church_ledger.services.repository import LedgerRepository
from church_ledger.services.validation import RecordValidator, ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)

ALLOCATION_FIELDS = ("shared_fund_share", "pastoral_team_share", "operational_fund_share")


class LedgerService:
    """Collections and expenses: intake pipeline, CRUD and summaries."""

    def __init__(self, db: Session, allocation: Optional[AllocationService] = None):
        """Initialize ledger service.

        Args:
            db: SQLAlchemy database session
            allocation: Fund allocation engine (default AllocationService())
        """
        self.db = db
        self.repository = LedgerRepository(db)
        self.validator = RecordValidator(self.repository)
        self.allocation = allocation or AllocationService()
        self.budgets = BudgetService(db)
        self.custom_fields = CustomFieldService(db)

    # ------------------------------------------------------------------
    # Pipeline helpers

    def _common_values(
        self, data: Mapping[str, Any], amount_fields: tuple[str, ...]
    ) -> tuple[dict[str, Any], list[ValidationIssue]]:
        """Normalize date, amounts and total; return values plus early issues."""
        issues: list[ValidationIssue] = []
        values: dict[str, Any] = {}

        try:
            values["date"] = parse_date(data.get("date"))
        except ValueError as e:
            values["date"] = None
            issues.append(ValidationIssue("date", ErrorCode.INVALID_VALUE, str(e)))

        for name in amount_fields:
            values[name] = round_currency(normalize_amount(data.get(name)))

        try:
            values["total_amount"] = reconcile_total(
                data.get("total_amount"), (values[name] for name in amount_fields)
            )
        except InvalidAmountError:
            values["total_amount"] = None
        return values, issues

    @staticmethod
    def _merge(result: ValidationResult, early: list[ValidationIssue]) -> ValidationResult:
        seen = {issue.field for issue in early}
        result.issues = early + [issue for issue in result.issues if issue.field not in seen]
        return result

    def _collection_values(
        self, data: Mapping[str, Any], record_id: Optional[int] = None
    ) -> ValidationResult:
        values, early = self._common_values(data, COLLECTION_AMOUNT_FIELDS)
        values["particular"] = data.get("particular")
        values["control_number"] = data.get("control_number")
        values["payment_method"] = clean_text(data.get("payment_method")) or "Cash"

        year = values["date"].year if values["date"] else date.today().year
        allocation = self.allocation.allocate(
            values["general_tithes_offering"], self.budgets.current_split(year)
        )
        values.update(allocation.as_record_fields())

        return self._merge(self.validator.validate_collection(values, record_id=record_id), early)

    def _expense_values(self, data: Mapping[str, Any]) -> ValidationResult:
        values, early = self._common_values(data, EXPENSE_AMOUNT_FIELDS)
        values["particular"] = data.get("particular")
        values["category"] = data.get("category")
        values["subcategory"] = data.get("subcategory")
        values["forms_number"] = clean_text(data.get("forms_number"))
        values["cheque_number"] = clean_text(data.get("cheque_number"))
        values["budget_amount"] = round_currency(normalize_amount(data.get("budget_amount")))
        values["percentage_allocation"] = round_currency(
            normalize_amount(data.get("percentage_allocation"))
        )

        fund_source = data.get("fund_source") or FundSource.OPERATIONAL
        try:
            values["fund_source"] = FundSource(fund_source)
        except ValueError:
            values["fund_source"] = FundSource.OPERATIONAL
            early.append(
                ValidationIssue("fund_source", ErrorCode.INVALID_VALUE, f"Unknown fund source: {fund_source}")
            )

        return self._merge(self.validator.validate_expense(values), early)

    def _commit(self, control_number: Optional[str] = None) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if control_number:
                logger.warning(f"Control number conflict on commit: {control_number}")
                raise DuplicateControlNumberError(control_number) from e
            logger.error(f"Integrity error saving record: {e}")
            raise PersistenceError("Failed to save record") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error saving record: {e}")
            raise PersistenceError("Failed to save record") from e

    def _persist(
        self,
        record: Any,
        table: RecordTable,
        custom_values: Optional[Mapping[str, Any]],
        control_number: Optional[str] = None,
    ) -> None:
        try:
            self.repository.insert(record)
            if custom_values:
                self.custom_fields.stage_values(table, record.id, custom_values)
        except IntegrityError as e:
            self.db.rollback()
            if control_number:
                raise DuplicateControlNumberError(control_number) from e
            raise PersistenceError("Failed to save record") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error saving {table.value} record: {e}")
            raise PersistenceError("Failed to save record") from e
        self._commit(control_number)
        self.db.refresh(record)

    def _apply(self, record: Any, values: dict[str, Any], control_number: Optional[str] = None) -> None:
        try:
            self.repository.update(record, values)
        except IntegrityError as e:
            self.db.rollback()
            if control_number:
                raise DuplicateControlNumberError(control_number) from e
            raise PersistenceError("Failed to update record") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error updating record: {e}")
            raise PersistenceError("Failed to update record") from e
        self._commit(control_number)
        self.db.refresh(record)

    # ------------------------------------------------------------------
    # Collections

    def record_collection(
        self,
        data: Mapping[str, Any],
        created_by: str = "system",
        submitted_via: SubmissionChannel = SubmissionChannel.WEB,
        custom_values: Optional[Mapping[str, Any]] = None,
    ) -> Collection:
        """Validate, allocate and store a collection.

        Args:
            data: Mapped submission values (see intake.COLLECTION_FIELDS)
            created_by: Identity of the submitter
            submitted_via: Submission channel
            custom_values: Custom field values saved with the record

        Returns:
            Persisted Collection

        Raises:
            RecordValidationError: With every issue found
            DuplicateControlNumberError: If a concurrent insert took the control number
            PersistenceError: If the database write fails
        """
        result = self._collection_values(data)
        result.issues.extend(self.custom_fields.missing_required(RecordTable.COLLECTIONS, custom_values))
        values = result.raise_for_issues()

        collection = Collection(**values, created_by=created_by, submitted_via=submitted_via)
        self._persist(collection, RecordTable.COLLECTIONS, custom_values, values["control_number"])
        logger.info(
            f"Recorded collection ID={collection.id} total={collection.total_amount} "
            f"via {submitted_via.value} by {created_by}"
        )
        return collection

    def get_collection(self, collection_id: int) -> Collection:
        collection = self.repository.get(Collection, collection_id)
        if collection is None:
            raise RecordNotFoundError("collection", collection_id)
        return collection

    def list_collections(self, period: Optional[Period] = None, **filters: Any) -> list[Collection]:
        return self.repository.list_records(Collection, period=period, **filters)

    def update_collection(self, collection_id: int, data: Mapping[str, Any]) -> Collection:
        """Replace a collection's values; allocations are recomputed."""
        collection = self.get_collection(collection_id)
        values = self._collection_values(data, record_id=collection_id).raise_for_issues()
        self._apply(collection, values, values["control_number"])
        logger.info(f"Updated collection ID={collection_id}")
        return collection

    def delete_collection(self, collection_id: int) -> None:
        if not self.repository.delete(Collection, collection_id):
            raise RecordNotFoundError("collection", collection_id)
        self.custom_fields.delete_values(RecordTable.COLLECTIONS, collection_id)
        self._commit()
        logger.info(f"Deleted collection ID={collection_id}")

    # ------------------------------------------------------------------
    # Expenses

    def record_expense(
        self,
        data: Mapping[str, Any],
        created_by: str = "system",
        submitted_via: SubmissionChannel = SubmissionChannel.WEB,
        custom_values: Optional[Mapping[str, Any]] = None,
    ) -> Expense:
        """Validate and store an expense.

        Raises:
            RecordValidationError: With every issue found
            PersistenceError: If the database write fails
        """
        result = self._expense_values(data)
        result.issues.extend(self.custom_fields.missing_required(RecordTable.EXPENSES, custom_values))
        values = result.raise_for_issues()

        expense = Expense(**values, created_by=created_by, submitted_via=submitted_via)
        self._persist(expense, RecordTable.EXPENSES, custom_values)
        logger.info(
            f"Recorded expense ID={expense.id} category={expense.category} "
            f"total={expense.total_amount} via {submitted_via.value} by {created_by}"
        )
        return expense

    def get_expense(self, expense_id: int) -> Expense:
        expense = self.repository.get(Expense, expense_id)
        if expense is None:
            raise RecordNotFoundError("expense", expense_id)
        return expense

    def list_expenses(self, period: Optional[Period] = None, **filters: Any) -> list[Expense]:
        return self.repository.list_records(Expense, period=period, **filters)

    def update_expense(self, expense_id: int, data: Mapping[str, Any]) -> Expense:
        expense = self.get_expense(expense_id)
        values = self._expense_values(data).raise_for_issues()
        self._apply(expense, values)
        logger.info(f"Updated expense ID={expense_id}")
        return expense

    def delete_expense(self, expense_id: int) -> None:
        if not self.repository.delete(Expense, expense_id):
            raise RecordNotFoundError("expense", expense_id)
        self.custom_fields.delete_values(RecordTable.EXPENSES, expense_id)
        self._commit()
        logger.info(f"Deleted expense ID={expense_id}")

    # ------------------------------------------------------------------
    # Summaries

    def fund_allocation_summary(self, period: Optional[Period] = None) -> dict[str, Any]:
        """Totals of general tithes and the three allocated shares."""
        start, end = (period.start, period.end) if period else (None, None)
        totals = self.repository.sum_columns(
            Collection, ("general_tithes_offering", *ALLOCATION_FIELDS), start, end
        )
        return {
            "total_tithes": totals["general_tithes_offering"],
            "total_shared_fund": totals["shared_fund_share"],
            "total_pastoral_team": totals["pastoral_team_share"],
            "total_operational": totals["operational_fund_share"],
        }

    def collection_summary(self, period: Optional[Period] = None) -> dict[str, Any]:
        """Per-field sums over collections plus the record count."""
        start, end = (period.start, period.end) if period else (None, None)
        totals = self.repository.sum_columns(
            Collection,
            ("total_amount", *COLLECTION_AMOUNT_FIELDS, *ALLOCATION_FIELDS),
            start,
            end,
        )
        totals["total_records"] = totals.pop("count")
        return totals

    def financial_summary(self, start_date: date, end_date: date) -> dict[str, Any]:
        """Collections vs expenses over a date range."""
        collections = self.repository.sum_columns(
            Collection, ("total_amount", "general_tithes_offering", "bank_interest"), start_date, end_date
        )
        expenses = self.repository.sum_columns(
            Expense, ("total_amount", "shared_fund_expense", "pastoral_worker_support"), start_date, end_date
        )
        return {
            "period": {"start_date": start_date, "end_date": end_date},
            "collections": {
                "count": collections["count"],
                "total": collections["total_amount"],
                "tithes": collections["general_tithes_offering"],
                "interest": collections["bank_interest"],
            },
            "expenses": {
                "count": expenses["count"],
                "total": expenses["total_amount"],
                "shared_fund": expenses["shared_fund_expense"],
                "pastoral": expenses["pastoral_worker_support"],
            },
            "net_balance": round_currency(collections["total_amount"] - expenses["total_amount"]),
        }

    def recent_submissions(self, hours: int = 24, limit: int = 50) -> list[dict[str, Any]]:
        """Records of both kinds created in the last `hours`, newest first."""
        cutoff = datetime.now(timezone.utc) - timedelta(hours=hours)
        submissions = []
        for kind, model in (("collection", Collection), ("expense", Expense)):
            rows = (
                self.db.query(model)
                .filter(model.created_at > cutoff)
                .order_by(model.created_at.desc())
                .limit(limit)
                .all()
            )
            submissions.extend(
                {
                    "type": kind,
                    "id": row.id,
                    "date": row.date,
                    "particular": row.particular,
                    "total_amount": row.total_amount,
                    "created_by": row.created_by,
                    "created_at": row.created_at,
                    "submitted_via": row.submitted_via.value,
                }
                for row in rows
            )
        submissions.sort(key=lambda item: item["created_at"], reverse=True)
        return submissions[:limit]


__all__ = ["LedgerService", "ALLOCATION_FIELDS"]
