"""Unit tests for the budget-vs-actual comparison."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from church_ledger.services.budget_service import compare_budget
from church_ledger.services.periods import Period


def line(category, subcategory, budget, percentage=None):
    return SimpleNamespace(
        category=category, subcategory=subcategory, budget_amount=budget, percentage=percentage
    )


def spent(on, category, subcategory, total):
    return SimpleNamespace(date=on, category=category, subcategory=subcategory, total_amount=total)


PLAN = [
    line("Operational Fund", "Utilities", Decimal("24000"), Decimal("5")),
    line("Operational Fund", "Honorarium", Decimal("36000")),
    line("Shared Fund", None, Decimal("48000")),
]


class TestCompareBudget:
    """Test the pure budget comparison."""

    def test_sorted_by_category_then_subcategory(self):
        """Test ordering of lines and zero spending when there are no expenses."""
        lines = compare_budget(PLAN, [], Period(2023))

        assert [(x.category, x.subcategory) for x in lines] == [
            ("Operational Fund", "Honorarium"),
            ("Operational Fund", "Utilities"),
            ("Shared Fund", None),
        ]
        assert all(x.actual_amount == Decimal("0.00") for x in lines)
        assert all(x.variance == x.budget_amount for x in lines)

    def test_actuals_and_variance(self):
        """Test summing expenses per plan line and the resulting variance."""
        expenses = [
            spent(date(2023, 1, 31), "Operational Fund", "Honorarium", Decimal("3000")),
            spent(date(2023, 2, 28), "Operational Fund", "Honorarium", Decimal("3000")),
            spent(date(2023, 1, 15), "Shared Fund", None, Decimal("4000")),
        ]
        by_key = {(x.category, x.subcategory): x for x in compare_budget(PLAN, expenses, Period(2023))}

        honorarium = by_key[("Operational Fund", "Honorarium")]
        assert honorarium.actual_amount == Decimal("6000.00")
        assert honorarium.variance == Decimal("30000.00")
        assert by_key[("Shared Fund", None)].variance == Decimal("44000.00")
        assert by_key[("Operational Fund", "Utilities")].percentage == Decimal("5")

    def test_month_filter(self):
        """Only expenses dated inside the month are counted."""
        expenses = [
            spent(date(2023, 1, 31), "Operational Fund", "Honorarium", Decimal("3000")),
            spent(date(2023, 2, 1), "Operational Fund", "Honorarium", Decimal("2500")),
            spent(date(2022, 1, 20), "Operational Fund", "Honorarium", Decimal("999")),
        ]
        lines = compare_budget(PLAN, expenses, Period(2023, 1))
        honorarium = next(x for x in lines if x.subcategory == "Honorarium")

        assert honorarium.actual_amount == Decimal("3000.00")

    def test_unplanned_category_reported(self):
        """Spending outside the plan appears as a zero-budget line at the end."""
        expenses = [spent(date(2023, 3, 1), "Building Fund", "Roof", Decimal("1200.50"))]
        lines = compare_budget(PLAN, expenses, Period(2023))

        extra = lines[-1]
        assert (extra.category, extra.subcategory) == ("Building Fund", "Roof")
        assert extra.in_plan is False
        assert extra.budget_amount == Decimal("0.00")
        assert extra.variance == Decimal("-1200.50")

    def test_null_subcategory_only_matches_null(self):
        """A plan line without subcategory only matches expenses without one."""
        expenses = [spent(date(2023, 3, 1), "Shared Fund", "PDOT", Decimal("100"))]
        lines = compare_budget(PLAN, expenses, Period(2023))

        shared = next(x for x in lines if x.category == "Shared Fund" and x.subcategory is None)
        assert shared.actual_amount == Decimal("0.00")
        assert lines[-1].subcategory == "PDOT"

    def test_to_dict(self):
        """Test serialization of a comparison line."""
        data = compare_budget(PLAN[:1], [], Period(2023))[0].to_dict()
        assert data["budget_amount"] == Decimal("24000.00")
        assert data["in_plan"] is True
