"""Cache and pagination adapters."""
