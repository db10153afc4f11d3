"""Calendar event classification."""
