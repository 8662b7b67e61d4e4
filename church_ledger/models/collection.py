"""Collection ORM model for income records (tithes, offerings, group funds)."""

import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from church_ledger.models import Base, BaseModel


class SubmissionChannel(str, Enum):
    """Where a financial record was submitted from."""

    WEB = "web"
    GOOGLE_FORM = "google_form"


class Collection(Base, BaseModel):
    """Model representing one income entry with its category breakdown.

    Only general tithes & offering feed the fund allocation; the remaining
    sub-amounts are pass-through accounts earmarked for their groups.
    """

    __tablename__ = "collections"

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    particular: Mapped[str] = mapped_column(String(255), nullable=False)
    control_number: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        comment="Unique reference tag; NULL when not assigned",
    )
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False, default="Cash")

    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Category sub-amounts
    general_tithes_offering: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    bank_interest: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    sisterhood_san_juan: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    sisterhood_labuin: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    brotherhood: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    youth: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    couples: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    sunday_school: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    special_purpose_pledge: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    # Derived from general_tithes_offering and the year's split
    shared_fund_share: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    pastoral_team_share: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    operational_fund_share: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    created_by: Mapped[str] = mapped_column(String(255), nullable=False, default="system")
    submitted_via: Mapped[SubmissionChannel] = mapped_column(
        SQLEnum(SubmissionChannel),
        nullable=False,
        default=SubmissionChannel.WEB,
    )

    __table_args__ = (Index("idx_collection_created_at", "created_at"),)

    def __repr__(self) -> str:
        return (
            f"<Collection(id={self.id}, date={self.date}, total={self.total_amount}, "
            f"control_number={self.control_number})>"
        )


__all__ = ["Collection", "SubmissionChannel"]
