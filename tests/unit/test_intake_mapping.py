"""Unit tests for submission field mapping."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from church_ledger.services.intake import generate_control_number, map_payload


class TestMapCollectionPayload:
    """Test mapping of collection payloads."""

    def test_google_form_labels(self):
        """Test mapping of Google Form question labels to columns."""
        mapped = map_payload(
            "collection",
            {
                "Email Address": "treasurer@church.ph",
                "Date": "01/08/2023",
                "General Tithes & Offering": "9,755",
                "Young People": "200",
                "Timestamp": "1/8/2023 10:31:00",
            },
        )

        assert mapped.submitter == "treasurer@church.ph"
        assert mapped.values == {
            "date": date(2023, 1, 8),
            "general_tithes_offering": Decimal("9755"),
            "youth": Decimal("200"),
        }
        assert mapped.unmapped_keys == ["Timestamp"]

    def test_snake_case_keys(self):
        """Test that web form keys map directly."""
        mapped = map_payload(
            "collection",
            {"date": "2023-01-08", "particular": "Sunday", "sunday_school": 150, "email": "a@b.ph"},
        )

        assert mapped.values["particular"] == "Sunday"
        assert mapped.values["sunday_school"] == Decimal("150")
        assert mapped.submitter == "a@b.ph"
        assert mapped.unmapped_keys == []

    def test_first_non_empty_key_wins(self):
        """A blank alias does not hide a filled one."""
        mapped = map_payload("collection", {"youth": "", "young_people": "75"})
        assert mapped.values["youth"] == Decimal("75")

    def test_invalid_date_passed_through_for_validation(self):
        """An unparseable date is kept so validation can report it."""
        mapped = map_payload("collection", {"Date": "yesterday"})
        assert mapped.values["date"] == "yesterday"

    def test_unknown_kind(self):
        """Test that an unknown record kind is rejected."""
        with pytest.raises(ValueError, match="Unknown record kind"):
            map_payload("pledge", {})


class TestMapExpensePayload:
    """Test mapping of expense payloads."""

    def test_legacy_keys(self):
        """Test that older expense keys still map to their columns."""
        mapped = map_payload(
            "expense",
            {
                "pbcm_share_expense": "1000",
                "pastoral_workers_support": "2000",
                "ltg_registration": "300",
                "associate_share": "50",
            },
        )

        assert mapped.values == {
            "shared_fund_expense": Decimal("1000"),
            "pastoral_worker_support": Decimal("2000"),
            "lto_registration": Decimal("300"),
            "kabalikat_share": Decimal("50"),
        }

    def test_operational_fund_slots(self):
        """Test that slot amounts are added onto the chosen columns."""
        mapped = map_payload(
            "expense",
            {
                "1. Operational Fund": "Honorarium",
                "1. Amount": "3,000",
                "2. Operational Fund": "Supplies",
                "2. Amount": "500",
                "3. Operational Fund": "Honorarium",
                "3. Amount": "250",
            },
        )

        assert mapped.values["honorarium"] == Decimal("3250")
        assert mapped.values["supplies"] == Decimal("500")
        assert mapped.unmapped_keys == []

    def test_unknown_operational_fund_option(self):
        """An unknown dropdown option is reported as unmapped."""
        mapped = map_payload("expense", {"1. Operational Fund": "Snacks", "1. Amount": "80"})

        assert "1. Operational Fund" in mapped.unmapped_keys
        assert mapped.values == {}

    def test_slot_without_amount_ignored(self):
        """A slot without an amount writes nothing."""
        mapped = map_payload("expense", {"1. Operational Fund": "Utilities", "1. Amount": ""})
        assert "utilities" not in mapped.values


class TestGenerateControlNumber:
    """Test generated control numbers."""

    def test_format(self):
        """Test the FORM-YYYYMMDD-HHMM control number format."""
        assert generate_control_number(datetime(2023, 1, 8, 9, 5)) == "FORM-20230108-0905"
