"""Allocation service for splitting general tithes into the three fund buckets.

Buckets:
- SHARED FUND: share sent to the wider fellowship
- PASTORAL TEAM: pastoral support
- OPERATIONAL: retained for church operations

Each share is rounded half-up to cents independently. The three shares are
not forced to add back to the tithes amount; a one-cent residual is expected
for some inputs and is left visible.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, NamedTuple

from church_ledger.services.errors import InvalidAmountError
from church_ledger.services.parsers import normalize_amount, round_currency

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class FundSplit:
    """Percentages applied to general tithes & offering."""

    shared: Decimal = Decimal("10")
    pastoral: Decimal = Decimal("10")
    operational: Decimal = Decimal("80")

    @property
    def total(self) -> Decimal:
        return self.shared + self.pastoral + self.operational

    @classmethod
    def from_plan(cls, plan) -> "FundSplit":
        """Build the split configured on a BudgetPlan."""
        return cls(
            shared=Decimal(str(plan.shared_fund_percentage)),
            pastoral=Decimal(str(plan.pastoral_team_percentage)),
            operational=Decimal(str(plan.operational_percentage)),
        )

    @classmethod
    def from_settings(cls, settings) -> "FundSplit":
        """Build the fallback split from application settings."""
        return cls(
            shared=Decimal(str(settings.default_shared_percentage)),
            pastoral=Decimal(str(settings.default_pastoral_percentage)),
            operational=Decimal(str(settings.default_operational_percentage)),
        )


DEFAULT_SPLIT = FundSplit()


class FundAllocation(NamedTuple):
    """Allocated shares of one tithes amount."""

    shared_share: Decimal
    pastoral_share: Decimal
    operational_share: Decimal

    def as_record_fields(self) -> dict[str, Decimal]:
        """Map shares onto Collection column names."""
        return {
            "shared_fund_share": self.shared_share,
            "pastoral_team_share": self.pastoral_share,
            "operational_fund_share": self.operational_share,
        }


class AllocationService:
    """Fund allocation engine for collections."""

    def share(self, amount: Decimal, percent: Decimal) -> Decimal:
        """Compute one share: amount * percent / 100, rounded half-up to cents."""
        return round_currency(Decimal(amount) * Decimal(percent) / HUNDRED)

    def allocate(self, general_tithes: Any, split: FundSplit = DEFAULT_SPLIT) -> FundAllocation:
        """Split a general tithes amount by percentage.

        Args:
            general_tithes: General tithes & offering amount
            split: Percentages to apply (callers pass the year's budget plan split)

        Returns:
            FundAllocation with the three independently rounded shares

        Raises:
            InvalidAmountError: If general_tithes is not a finite, non-negative number
        """
        try:
            tithes = Decimal(str(general_tithes))
        except InvalidOperation as e:
            raise InvalidAmountError(f"General tithes is not a number: {general_tithes!r}") from e
        if not tithes.is_finite():
            raise InvalidAmountError(f"General tithes is not a number: {general_tithes!r}")
        if tithes < 0:
            raise InvalidAmountError(f"General tithes cannot be negative: {tithes}")

        if split.total != HUNDRED:
            logger.warning(
                f"Fund split {split.shared}/{split.pastoral}/{split.operational} "
                f"sums to {split.total}, not 100; allocating each share independently"
            )

        return FundAllocation(
            shared_share=self.share(tithes, split.shared),
            pastoral_share=self.share(tithes, split.pastoral),
            operational_share=self.share(tithes, split.operational),
        )

    def allocate_collection(
        self,
        values: Mapping[str, Any],
        split: FundSplit = DEFAULT_SPLIT,
    ) -> FundAllocation:
        """Allocate a collection's general tithes; other sub-amounts are earmarked."""
        return self.allocate(normalize_amount(values.get("general_tithes_offering")), split)


__all__ = ["AllocationService", "FundSplit", "FundAllocation", "DEFAULT_SPLIT"]
