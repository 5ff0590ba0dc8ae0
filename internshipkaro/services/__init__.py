"""Business logic: credential store, refresh-token ledger, auth flows."""
