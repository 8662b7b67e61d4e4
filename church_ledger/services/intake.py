"""Submission intake: map flat payloads onto record fields.

Relayed Google Form submissions use question labels as keys ("General Tithes &
Offering", "Email Address") while the web UI posts column names. Both go
through the same declared mapping tables; unknown keys are reported, never
assigned.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from church_ledger.models import Collection, Expense, SubmissionChannel
from church_ledger.services.errors import InvalidAmountError
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.parsers import clean_text, normalize_amount, parse_date
from church_ledger.services.reconciliation import (
    COLLECTION_AMOUNT_FIELDS,
    COLLECTION_KIND,
    EXPENSE_AMOUNT_FIELDS,
    EXPENSE_KIND,
    reconcile_total,
)

logger = logging.getLogger(__name__)

AMOUNT = "amount"
TEXT = "text"
DATE = "date"

DUPLICATE_WINDOW = timedelta(minutes=2)
FORM_EXPENSE_CATEGORY = "Google Form Submission"


@dataclass(frozen=True)
class FieldMapping:
    """Source keys (first non-empty wins) for one target field."""

    target: str
    source_keys: tuple[str, ...]
    kind: str = AMOUNT


SUBMITTER_KEYS = ("submitter_email", "Email Address", "email")

COLLECTION_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping("date", ("date", "Date"), DATE),
    FieldMapping("particular", ("particular", "description", "Description"), TEXT),
    FieldMapping("control_number", ("control_number", "Control Number"), TEXT),
    FieldMapping("payment_method", ("payment_method", "Payment Method"), TEXT),
    FieldMapping("total_amount", ("total_amount", "Total Amount")),
    FieldMapping(
        "general_tithes_offering",
        ("general_tithes_offering", "General Tithes & Offering", "General Tithes and Offering"),
    ),
    FieldMapping("bank_interest", ("bank_interest", "Bank Interest")),
    FieldMapping("sisterhood_san_juan", ("sisterhood_san_juan", "Sisterhood San Juan")),
    FieldMapping("sisterhood_labuin", ("sisterhood_labuin", "Sisterhood Labuin")),
    FieldMapping("brotherhood", ("brotherhood", "Brotherhood")),
    FieldMapping("youth", ("youth", "young_people", "Young People", "Youth")),
    FieldMapping("couples", ("couples", "Couples")),
    FieldMapping("sunday_school", ("sunday_school", "Sunday School")),
    FieldMapping(
        "special_purpose_pledge", ("special_purpose_pledge", "Special Purpose Pledge")
    ),
)

EXPENSE_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping("date", ("date", "Date"), DATE),
    FieldMapping("particular", ("particular", "description", "Description"), TEXT),
    FieldMapping("forms_number", ("forms_number", "Forms Number"), TEXT),
    FieldMapping("cheque_number", ("cheque_number", "Cheque Number"), TEXT),
    FieldMapping("category", ("category", "Category"), TEXT),
    FieldMapping("subcategory", ("subcategory", "Subcategory"), TEXT),
    FieldMapping("fund_source", ("fund_source", "Fund Source"), TEXT),
    FieldMapping("total_amount", ("total_amount", "Total Amount")),
    FieldMapping("budget_amount", ("budget_amount",)),
    FieldMapping("percentage_allocation", ("percentage_allocation",)),
    FieldMapping(
        "shared_fund_expense",
        ("shared_fund_expense", "pbcm_share_expense", "pbcm_share_pdot", "PBCM Share/PDOT", "Shared Fund"),
    ),
    FieldMapping(
        "pastoral_worker_support",
        ("pastoral_worker_support", "pastoral_workers_support", "pastoral_team", "Pastoral Team"),
    ),
    FieldMapping("cap_assistance", ("cap_assistance", "gap_churches_assistance_program")),
    FieldMapping("honorarium", ("honorarium", "Honorarium")),
    FieldMapping("conference_seminar", ("conference_seminar", "conference_seminar_retreat_assembly")),
    FieldMapping("fellowship_events", ("fellowship_events", "Fellowship Events")),
    FieldMapping("anniversary_christmas", ("anniversary_christmas", "anniversary_christmas_events")),
    FieldMapping("supplies", ("supplies", "Supplies")),
    FieldMapping("utilities", ("utilities", "Utilities")),
    FieldMapping("vehicle_maintenance", ("vehicle_maintenance", "Vehicle Maintenance")),
    FieldMapping("lto_registration", ("lto_registration", "ltg_registration")),
    FieldMapping("transportation_gas", ("transportation_gas", "Transportation & Gas")),
    FieldMapping("building_maintenance", ("building_maintenance", "Building Maintenance")),
    FieldMapping("abccop_national", ("abccop_national", "ABCCOP National")),
    FieldMapping("cbcc_share", ("cbcc_share", "CBCC Share")),
    FieldMapping("kabalikat_share", ("kabalikat_share", "associate_share", "Kabalikat Share")),
    FieldMapping("abccop_community", ("abccop_community", "abccop_community_day")),
)

# "N. Operational Fund" dropdown answers -> expense column
OPERATIONAL_FUND_LABELS = {
    "CAP-Churches Assistance Program": "cap_assistance",
    "Honorarium": "honorarium",
    "Conference/Seminar/Retreat/Assembly": "conference_seminar",
    "Fellowship Events": "fellowship_events",
    "Anniversary/Christmas Events": "anniversary_christmas",
    "Supplies": "supplies",
    "Utilities": "utilities",
    "Vehicle Maintenance": "vehicle_maintenance",
    "LTO Registration": "lto_registration",
    "Transportation & Gas": "transportation_gas",
    "Building Maintenance": "building_maintenance",
    "ABCCOP National": "abccop_national",
    "CBCC Share": "cbcc_share",
    "Kabalikat Share": "kabalikat_share",
    "ABCCOP Community Day": "abccop_community",
}
OPERATIONAL_FUND_SLOTS = 3

FIELD_TABLES = {
    COLLECTION_KIND: COLLECTION_FIELDS,
    EXPENSE_KIND: EXPENSE_FIELDS,
}


@dataclass
class MappedSubmission:
    """Payload mapped onto record fields."""

    values: dict[str, Any]
    submitter: Optional[str] = None
    unmapped_keys: list[str] = field(default_factory=list)


def _first_present(payload: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def _convert(kind: str, value: Any) -> Any:
    if kind == AMOUNT:
        return None if value is None else normalize_amount(value)
    if kind == DATE:
        # Invalid dates are passed through so validation reports them
        try:
            return parse_date(value)
        except ValueError:
            return value
    return clean_text(value)


def _operational_fund_slot_keys(slot: int) -> tuple[tuple[str, ...], tuple[str, ...]]:
    label_keys = (f"{slot}. Operational Fund", f"operational_fund_{slot}")
    amount_keys = (f"{slot}. Amount", f"{slot}_Amount", f"operational_fund_{slot}_amount")
    return label_keys, amount_keys


def _apply_operational_fund_slots(payload: Mapping[str, Any], mapped: MappedSubmission) -> set[str]:
    """Add 'N. Operational Fund' + 'N. Amount' answers onto their columns."""
    used: set[str] = set()
    for slot in range(1, OPERATIONAL_FUND_SLOTS + 1):
        label_keys, amount_keys = _operational_fund_slot_keys(slot)
        used.update(label_keys)
        used.update(amount_keys)
        label = clean_text(_first_present(payload, label_keys))
        amount = normalize_amount(_first_present(payload, amount_keys))
        if not label or amount <= 0:
            continue
        target = OPERATIONAL_FUND_LABELS.get(label)
        if target is None:
            logger.warning(f"Unknown operational fund option {label!r} in slot {slot}")
            mapped.unmapped_keys.append(label_keys[0])
            continue
        current = mapped.values.get(target) or Decimal("0")
        mapped.values[target] = current + amount
    return used


def map_payload(record_kind: str, payload: Mapping[str, Any]) -> MappedSubmission:
    """Map a flat submission payload using the declared field table.

    Args:
        record_kind: "collection" or "expense"
        payload: Raw key/value submission

    Returns:
        MappedSubmission with converted values, the submitter email (if any),
        and keys that matched no mapping
    """
    try:
        table = FIELD_TABLES[record_kind]
    except KeyError as e:
        raise ValueError(f"Unknown record kind: {record_kind}") from e

    mapped = MappedSubmission(values={}, submitter=clean_text(_first_present(payload, SUBMITTER_KEYS)))
    known: set[str] = set(SUBMITTER_KEYS)
    for mapping in table:
        known.update(mapping.source_keys)
        value = _first_present(payload, mapping.source_keys)
        if value is not None:
            mapped.values[mapping.target] = _convert(mapping.kind, value)

    if record_kind == EXPENSE_KIND:
        known.update(_apply_operational_fund_slots(payload, mapped))

    mapped.unmapped_keys.extend(sorted(key for key in payload if key not in known))
    if mapped.unmapped_keys:
        logger.debug(f"Ignoring unmapped {record_kind} keys: {mapped.unmapped_keys}")
    return mapped


def generate_control_number(now: datetime) -> str:
    """Control number for relayed collection forms: FORM-YYYYMMDD-HHMM."""
    return now.strftime("FORM-%Y%m%d-%H%M")


@dataclass
class RelayResult:
    """Outcome of a relayed form submission."""

    record: Any
    duplicate: bool = False


class FormRelayService:
    """Accepts relayed Google Form submissions and records them."""

    def __init__(self, db: Session, ledger: Optional[LedgerService] = None):
        """Initialize form relay service.

        Args:
            db: SQLAlchemy database session
            ledger: Ledger service used for recording (default LedgerService(db))
        """
        self.db = db
        self.ledger = ledger or LedgerService(db)

    def _unique_control_number(self, now: datetime) -> str:
        base = generate_control_number(now)
        candidate = base
        suffix = 1
        while self.ledger.repository.find_by_control_number(candidate) is not None:
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate

    def _recent_duplicate(self, model, submitter: str, values: Mapping[str, Any], particular: str):
        """Same submitter, date and total (or description) within the duplicate window."""
        record_date = values.get("date")
        if record_date is None:
            return None
        try:
            total = reconcile_total(values.get("total_amount"), self._sub_amounts(model, values))
        except InvalidAmountError:
            return None

        cutoff = datetime.now(timezone.utc) - DUPLICATE_WINDOW
        candidates = (
            self.db.query(model)
            .filter(model.created_by == submitter, model.date == record_date, model.created_at > cutoff)
            .order_by(model.created_at.desc())
            .all()
        )
        for candidate in candidates:
            if abs(Decimal(str(candidate.total_amount)) - total) < Decimal("0.01"):
                return candidate
            if candidate.particular == particular:
                return candidate
        return None

    @staticmethod
    def _sub_amounts(model, values: Mapping[str, Any]):
        fields = COLLECTION_AMOUNT_FIELDS if model is Collection else EXPENSE_AMOUNT_FIELDS
        return [values.get(name) for name in fields]

    def submit_collection(self, payload: Mapping[str, Any], now: Optional[datetime] = None) -> RelayResult:
        """Record a relayed collection form.

        Raises:
            RecordValidationError: If the submission is invalid
        """
        mapped = map_payload(COLLECTION_KIND, payload)
        submitter = mapped.submitter or "google_form"
        values = mapped.values
        values.setdefault("particular", f"Form submission by {submitter}")
        if not values.get("control_number"):
            values["control_number"] = self._unique_control_number(now or datetime.now())

        collection = self.ledger.record_collection(
            values, created_by=submitter, submitted_via=SubmissionChannel.GOOGLE_FORM
        )
        return RelayResult(record=collection)

    def submit_expense(self, payload: Mapping[str, Any]) -> RelayResult:
        """Record a relayed expense form, returning the earlier record on a double submit."""
        mapped = map_payload(EXPENSE_KIND, payload)
        submitter = mapped.submitter or "google_form"
        values = mapped.values
        values.setdefault("category", FORM_EXPENSE_CATEGORY)
        if not values.get("particular"):
            values["particular"] = self._describe_expense(submitter, values)

        duplicate = self._recent_duplicate(Expense, submitter, values, values["particular"])
        if duplicate is not None:
            logger.info(f"Duplicate expense form from {submitter}; returning ID={duplicate.id}")
            return RelayResult(record=duplicate, duplicate=True)

        expense = self.ledger.record_expense(
            values, created_by=submitter, submitted_via=SubmissionChannel.GOOGLE_FORM
        )
        return RelayResult(record=expense)

    @staticmethod
    def _describe_expense(submitter: str, values: Mapping[str, Any]) -> str:
        parts = [f"Form submission by {submitter}"]
        for name in EXPENSE_AMOUNT_FIELDS:
            amount = values.get(name)
            if amount:
                label = name.replace("_", " ").title()
                parts.append(f"{label}: ₱{amount}")
        return ", ".join(parts)


__all__ = [
    "FieldMapping",
    "MappedSubmission",
    "COLLECTION_FIELDS",
    "EXPENSE_FIELDS",
    "OPERATIONAL_FUND_LABELS",
    "map_payload",
    "generate_control_number",
    "FormRelayService",
    "RelayResult",
]
