"""Pydantic request/response schemas for the ledger API."""
