"""HTTP host for the expense ledger core."""
