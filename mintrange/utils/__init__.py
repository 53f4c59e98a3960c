"""mintrange.utils — small helpers that sit outside the ledger core."""
