"""Weekly summary aggregation."""
