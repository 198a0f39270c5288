"""In-memory collection state for callers that hold entity lists between requests."""
