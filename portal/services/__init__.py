"""Business logic. Services raise portal.core.exceptions; blueprints map them to HTTP."""
