"""Google Sheets export of collections and expenses.

Row building is pure; the API client only clears a sheet and writes values,
so every export fully replaces the previous contents of its sheet.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from sqlalchemy.orm import Session

from church_ledger.config import settings
from church_ledger.models import Collection, Expense
from church_ledger.services.errors import CredentialsError, SheetsAPIError
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.reconciliation import (
    COLLECTION_AMOUNT_FIELDS,
    COLLECTION_KIND,
    EXPENSE_AMOUNT_FIELDS,
    EXPENSE_KIND,
)

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

SHEET_NAMES = {
    COLLECTION_KIND: "Collections",
    EXPENSE_KIND: "Expenses",
}
SUMMARY_SHEET = "Summary"


def _label(field_name: str) -> str:
    return field_name.replace("_", " ").title()


COLLECTION_HEADERS = [
    "Date",
    "Description",
    "Control Number",
    "Payment Method",
    *(_label(name) for name in COLLECTION_AMOUNT_FIELDS),
    "Total Amount",
    "Shared Fund Share",
    "Pastoral Team Share",
    "Operational Fund Share",
    "Created By",
    "Last Updated",
]

EXPENSE_HEADERS = [
    "Date",
    "Description",
    "Category",
    "Subcategory",
    "Forms Number",
    "Cheque Number",
    *(_label(name) for name in EXPENSE_AMOUNT_FIELDS),
    "Total Amount",
    "Created By",
    "Last Updated",
]


def format_amount(value: Any) -> str:
    return f"{Decimal(str(value or 0)):.2f}"


def format_date(value: Optional[date]) -> str:
    """MM/DD/YYYY, the format the church's sheets already use."""
    if value is None:
        return ""
    return value.strftime("%m/%d/%Y")


def _format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""


def collection_rows(records: Iterable[Any]) -> List[List[str]]:
    """Header plus one row per collection."""
    rows = [list(COLLECTION_HEADERS)]
    for item in records:
        rows.append(
            [
                format_date(item.date),
                item.particular or "",
                item.control_number or "",
                item.payment_method or "Cash",
                *(format_amount(getattr(item, name)) for name in COLLECTION_AMOUNT_FIELDS),
                format_amount(item.total_amount),
                format_amount(item.shared_fund_share),
                format_amount(item.pastoral_team_share),
                format_amount(item.operational_fund_share),
                item.created_by or "System",
                _format_timestamp(item.updated_at),
            ]
        )
    return rows


def expense_rows(records: Iterable[Any]) -> List[List[str]]:
    """Header plus one row per expense."""
    rows = [list(EXPENSE_HEADERS)]
    for item in records:
        rows.append(
            [
                format_date(item.date),
                item.particular or "",
                item.category or "",
                item.subcategory or "",
                item.forms_number or "",
                item.cheque_number or "",
                *(format_amount(getattr(item, name)) for name in EXPENSE_AMOUNT_FIELDS),
                format_amount(item.total_amount),
                item.created_by or "System",
                _format_timestamp(item.updated_at),
            ]
        )
    return rows


def summary_rows(summary: dict[str, Any]) -> List[List[Any]]:
    """Totals block built from LedgerService.financial_summary()."""
    return [
        ["Category", "Amount"],
        ["Total Collections", format_amount(summary["collections"]["total"])],
        ["Total Expenses", format_amount(summary["expenses"]["total"])],
        ["Net Balance", format_amount(summary["net_balance"])],
        [],
        ["Collections Records", summary["collections"]["count"]],
        ["Expense Records", summary["expenses"]["count"]],
    ]


class GoogleSheetsClient:
    """Client for Google Sheets API write operations."""

    def __init__(self, credentials_path: str):
        """
        Initialize Google Sheets API client.

        Args:
            credentials_path: Path to service account JSON credentials file

        Raises:
            CredentialsError: If credentials file not found or invalid
            SheetsAPIError: If the API service cannot be built
        """
        self.credentials_path = credentials_path

        try:
            self.credentials = service_account.Credentials.from_service_account_file(
                credentials_path, scopes=SCOPES
            )
            logger.info(f"Loaded credentials from {credentials_path}")
        except FileNotFoundError as e:
            raise CredentialsError(f"Credentials file not found: {credentials_path}") from e
        except ValueError as e:
            raise CredentialsError(f"Invalid credentials file format: {credentials_path}") from e

        try:
            self.service = build("sheets", "v4", credentials=self.credentials)
        except Exception as e:
            raise SheetsAPIError(f"Failed to initialize Google Sheets API: {e}") from e

    def write_sheet(self, spreadsheet_id: str, sheet_name: str, values: List[List[Any]]) -> int:
        """
        Replace the contents of a sheet.

        Clears columns A:Z, then writes values from A1 as raw (unparsed) input.

        Returns:
            Number of updated cells reported by the API

        Raises:
            SheetsAPIError: If an API call fails
        """
        values_api = self.service.spreadsheets().values()
        try:
            values_api.clear(spreadsheetId=spreadsheet_id, range=f"{sheet_name}!A1:Z").execute()
            result = values_api.update(
                spreadsheetId=spreadsheet_id,
                range=f"{sheet_name}!A1",
                valueInputOption="RAW",
                body={"values": values},
            ).execute()
        except HttpError as e:
            if e.resp.status == 404:
                raise SheetsAPIError(f"Sheet not found: {spreadsheet_id} / '{sheet_name}'") from e
            elif e.resp.status == 403:
                raise SheetsAPIError(
                    f"Access denied to sheet {spreadsheet_id}. Check service account permissions."
                ) from e
            raise SheetsAPIError(f"Google Sheets API error: {e}") from e

        updated = result.get("updatedCells", 0)
        logger.info(f"Wrote {len(values)} rows ({updated} cells) to {sheet_name}")
        return updated


class SheetExportService:
    """Exports ledger records to the configured spreadsheet."""

    def __init__(
        self,
        db: Session,
        client: Optional[GoogleSheetsClient] = None,
        spreadsheet_id: Optional[str] = None,
    ):
        """Initialize export service.

        Args:
            db: SQLAlchemy database session
            client: Sheets client (default built from settings.google_credentials_path)
            spreadsheet_id: Target spreadsheet (default settings.google_spreadsheet_id)
        """
        self.ledger = LedgerService(db)
        self.spreadsheet_id = spreadsheet_id or settings.google_spreadsheet_id
        if not self.spreadsheet_id:
            raise SheetsAPIError("GOOGLE_SPREADSHEET_ID is not configured")
        self.client = client or GoogleSheetsClient(settings.google_credentials_path)

    def rows_for(
        self, kind: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[List[str]]:
        if kind == COLLECTION_KIND:
            records = self.ledger.repository.list_records(Collection, start_date=start_date, end_date=end_date)
            return collection_rows(records)
        if kind == EXPENSE_KIND:
            records = self.ledger.repository.list_records(Expense, start_date=start_date, end_date=end_date)
            return expense_rows(records)
        raise ValueError(f"Unknown record kind: {kind}")

    def export(
        self, kind: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> dict[str, Any]:
        """Export one record kind; returns sheet name and exported row count."""
        rows = self.rows_for(kind, start_date, end_date)
        sheet_name = SHEET_NAMES[kind]
        self.client.write_sheet(self.spreadsheet_id, sheet_name, rows)
        return {"sheet": sheet_name, "records": len(rows) - 1}

    def export_summary(self, start_date: date, end_date: date) -> dict[str, Any]:
        summary = self.ledger.financial_summary(start_date, end_date)
        self.client.write_sheet(self.spreadsheet_id, SUMMARY_SHEET, summary_rows(summary))
        return {"sheet": SUMMARY_SHEET, "net_balance": summary["net_balance"]}


__all__ = [
    "GoogleSheetsClient",
    "SheetExportService",
    "collection_rows",
    "expense_rows",
    "summary_rows",
    "COLLECTION_HEADERS",
    "EXPENSE_HEADERS",
]
