"""Read-side SQL composition helpers."""
