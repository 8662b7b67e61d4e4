"""Expense ORM model for outgoing disbursements."""

import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from church_ledger.models import Base, BaseModel
from church_ledger.models.collection import SubmissionChannel


class FundSource(str, Enum):
    """Fund bucket an expense is paid from."""

    OPERATIONAL = "operational"
    PASTORAL_TEAM = "pastoral_team"
    SHARED_FUND = "shared_fund"


class Expense(Base, BaseModel):
    """Model representing one disbursement with its expense-category breakdown."""

    __tablename__ = "expenses"

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    particular: Mapped[str] = mapped_column(String(255), nullable=False)
    forms_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cheque_number: Mapped[str | None] = mapped_column(String(64), nullable=True)

    category: Mapped[str] = mapped_column(String(100), nullable=False)
    subcategory: Mapped[str | None] = mapped_column(String(100), nullable=True)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    budget_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    percentage_allocation: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))
    fund_source: Mapped[FundSource] = mapped_column(
        SQLEnum(FundSource),
        nullable=False,
        default=FundSource.OPERATIONAL,
    )

    # Expense category sub-amounts
    shared_fund_expense: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    pastoral_worker_support: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    cap_assistance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    honorarium: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    conference_seminar: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    fellowship_events: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    anniversary_christmas: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    supplies: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    utilities: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    vehicle_maintenance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    lto_registration: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    transportation_gas: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    building_maintenance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    abccop_national: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    cbcc_share: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    kabalikat_share: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    abccop_community: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    created_by: Mapped[str] = mapped_column(String(255), nullable=False, default="system")
    submitted_via: Mapped[SubmissionChannel] = mapped_column(
        SQLEnum(SubmissionChannel),
        nullable=False,
        default=SubmissionChannel.WEB,
    )

    __table_args__ = (
        Index("idx_expense_category", "category", "subcategory"),
        Index("idx_expense_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Expense(id={self.id}, date={self.date}, category={self.category}, "
            f"total={self.total_amount})>"
        )


__all__ = ["Expense", "FundSource"]
