"""Integration tests for relayed Google Form submissions."""

from datetime import datetime
from decimal import Decimal

import pytest

from church_ledger.models import Expense, SubmissionChannel
from church_ledger.services.errors import RecordValidationError
from church_ledger.services.intake import FormRelayService

COLLECTION_FORM = {
    "Email Address": "usher@church.ph",
    "Date": "01/08/2023",
    "General Tithes & Offering": "9,755",
    "Young People": "200",
}

EXPENSE_FORM = {
    "Email Address": "treasurer@church.ph",
    "Date": "01/31/2023",
    "1. Operational Fund": "Honorarium",
    "1. Amount": "3000",
}


@pytest.fixture
def relay(db_session):
    return FormRelayService(db_session)


class TestCollectionForm:
    """Test relayed collection forms."""

    def test_records_with_generated_control_number(self, relay):
        """Test a relayed collection with a generated control number."""
        result = relay.submit_collection(COLLECTION_FORM, now=datetime(2023, 1, 8, 10, 30))
        collection = result.record

        assert collection.control_number == "FORM-20230108-1030"
        assert collection.particular == "Form submission by usher@church.ph"
        assert collection.created_by == "usher@church.ph"
        assert collection.submitted_via == SubmissionChannel.GOOGLE_FORM
        assert collection.total_amount == Decimal("9955.00")
        assert collection.shared_fund_share == Decimal("975.50")

    def test_taken_control_number_gets_suffix(self, relay):
        """A generated number already in use gets a numeric suffix."""
        now = datetime(2023, 1, 8, 10, 30)
        relay.submit_collection(COLLECTION_FORM, now=now)
        second = relay.submit_collection(COLLECTION_FORM, now=now)
        third = relay.submit_collection(COLLECTION_FORM, now=now)

        assert second.record.control_number == "FORM-20230108-1030-2"
        assert third.record.control_number == "FORM-20230108-1030-3"

    def test_given_control_number_kept(self, relay):
        """Test that a submitted control number is used as given."""
        result = relay.submit_collection({**COLLECTION_FORM, "Control Number": "CN-77"})
        assert result.record.control_number == "CN-77"

    def test_empty_form_rejected(self, relay):
        """Test that a form without amounts is rejected."""
        with pytest.raises(RecordValidationError):
            relay.submit_collection({"Email Address": "usher@church.ph", "Date": "01/08/2023"})


class TestExpenseForm:
    """Test relayed expense forms."""

    def test_records_expense(self, relay):
        """Test a relayed expense with the default category."""
        result = relay.submit_expense(EXPENSE_FORM)
        expense = result.record

        assert result.duplicate is False
        assert expense.honorarium == Decimal("3000.00")
        assert expense.total_amount == Decimal("3000.00")
        assert expense.category == "Google Form Submission"
        assert expense.particular.startswith("Form submission by treasurer@church.ph")
        assert "Honorarium: ₱3000" in expense.particular

    def test_double_submit_returns_first_record(self, relay, db_session):
        """Test that a double submit returns the earlier expense."""
        first = relay.submit_expense(EXPENSE_FORM)
        second = relay.submit_expense(EXPENSE_FORM)

        assert second.duplicate is True
        assert second.record.id == first.record.id
        assert db_session.query(Expense).count() == 1

    def test_different_submitter_not_duplicate(self, relay, db_session):
        """Test that matching submissions from two people are both kept."""
        relay.submit_expense(EXPENSE_FORM)
        relay.submit_expense({**EXPENSE_FORM, "Email Address": "pastor@church.ph"})

        assert db_session.query(Expense).count() == 2
