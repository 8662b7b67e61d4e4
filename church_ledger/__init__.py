"""Church financial record-keeping: collections, expenses, fund allocation and budgets."""

__version__ = "0.1.0"
