"""Portal-wide exceptions."""
