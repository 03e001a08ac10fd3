"""Per-tick motion classifiers."""
