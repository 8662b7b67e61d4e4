"""HTTP API for the church ledger."""
