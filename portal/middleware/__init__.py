"""Request hooks: logging, timing, security headers, rate limits, session auth."""
