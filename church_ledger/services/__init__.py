"""Ledger services: intake pipeline, budgets, custom fields and exports."""
