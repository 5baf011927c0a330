"""Value objects shared across domain apps."""
