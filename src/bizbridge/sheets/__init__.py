"""CSV-backed reference implementation of the legacy sheet store."""
