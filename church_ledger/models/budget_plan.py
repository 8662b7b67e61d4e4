"""Budget plan ORM models: one plan per year owning its category lines."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from church_ledger.models import Base, BaseModel


class BudgetPlan(Base, BaseModel):
    """Yearly target offering and the top-level allocation percentages.

    The three percentages are the split used for collections dated in this year.
    """

    __tablename__ = "budget_plans"

    year: Mapped[int] = mapped_column(nullable=False, unique=True, index=True)
    target_offering: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    shared_fund_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("10.00")
    )
    pastoral_team_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("10.00")
    )
    operational_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("80.00")
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    categories: Mapped[list["BudgetCategory"]] = relationship(
        "BudgetCategory",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="BudgetCategory.category",
    )

    def __repr__(self) -> str:
        return f"<BudgetPlan(id={self.id}, year={self.year}, target={self.target_offering})>"


class BudgetCategory(Base, BaseModel):
    """Budget line for a category/subcategory.

    A NULL percentage marks a fixed-amount line; budget_amount is authoritative either way.
    """

    __tablename__ = "budget_categories"

    budget_plan_id: Mapped[int] = mapped_column(
        ForeignKey("budget_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    subcategory: Mapped[str | None] = mapped_column(String(100), nullable=True)
    percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    budget_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)

    plan: Mapped[BudgetPlan] = relationship("BudgetPlan", back_populates="categories")

    def __repr__(self) -> str:
        return (
            f"<BudgetCategory(id={self.id}, category={self.category}, "
            f"subcategory={self.subcategory}, budget={self.budget_amount})>"
        )


__all__ = ["BudgetPlan", "BudgetCategory"]
