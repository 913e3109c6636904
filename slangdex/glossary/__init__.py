"""Term lifecycle engine: vote ledger, trending, lifecycle, ranking."""
