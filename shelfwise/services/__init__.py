"""Stock ledger services. Services raise ``services.errors`` exceptions and never build responses."""
