"""Error response and request helpers."""
