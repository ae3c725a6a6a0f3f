"""Flight offer aggregation with provider fallback and booking deep links."""
