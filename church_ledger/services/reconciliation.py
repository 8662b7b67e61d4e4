"""Total reconciliation for collections and expenses.

A record can be entered two ways: with a manual total, or as an itemized
breakdown. A positive explicit total always wins and is not cross-checked
against the breakdown; otherwise the total is the sum of the breakdown.
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping

from church_ledger.services.errors import InvalidAmountError
from church_ledger.services.parsers import ZERO, normalize_amount, round_currency

COLLECTION_KIND = "collection"
EXPENSE_KIND = "expense"

COLLECTION_AMOUNT_FIELDS = (
    "general_tithes_offering",
    "bank_interest",
    "sisterhood_san_juan",
    "sisterhood_labuin",
    "brotherhood",
    "youth",
    "couples",
    "sunday_school",
    "special_purpose_pledge",
)

EXPENSE_AMOUNT_FIELDS = (
    "shared_fund_expense",
    "pastoral_worker_support",
    "cap_assistance",
    "honorarium",
    "conference_seminar",
    "fellowship_events",
    "anniversary_christmas",
    "supplies",
    "utilities",
    "vehicle_maintenance",
    "lto_registration",
    "transportation_gas",
    "building_maintenance",
    "abccop_national",
    "cbcc_share",
    "kabalikat_share",
    "abccop_community",
)

AMOUNT_FIELDS = {
    COLLECTION_KIND: COLLECTION_AMOUNT_FIELDS,
    EXPENSE_KIND: EXPENSE_AMOUNT_FIELDS,
}


def reconcile_total(explicit_total: Any, sub_amounts: Iterable[Any]) -> Decimal:
    """Decide the authoritative total of a record.

    Args:
        explicit_total: Manually entered total (may be None, 0, or a string)
        sub_amounts: Category amounts of the record

    Returns:
        Total rounded to cents

    Raises:
        InvalidAmountError: If neither the total nor the breakdown is positive
    """
    total = normalize_amount(explicit_total)
    if total <= ZERO:
        total = sum((normalize_amount(amount) for amount in sub_amounts), ZERO)

    if total <= ZERO:
        raise InvalidAmountError("Total amount must be greater than 0")
    return round_currency(total)


def reconcile_record_total(kind: str, data: Mapping[str, Any]) -> Decimal:
    """Reconcile using the fixed sub-amount field list of a record kind."""
    try:
        fields = AMOUNT_FIELDS[kind]
    except KeyError as e:
        raise ValueError(f"Unknown record kind: {kind}") from e
    return reconcile_total(data.get("total_amount"), (data.get(name) for name in fields))


__all__ = [
    "COLLECTION_KIND",
    "EXPENSE_KIND",
    "COLLECTION_AMOUNT_FIELDS",
    "EXPENSE_AMOUNT_FIELDS",
    "AMOUNT_FIELDS",
    "reconcile_total",
    "reconcile_record_total",
]
