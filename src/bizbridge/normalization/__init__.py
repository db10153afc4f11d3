"""Record shape normalization."""
