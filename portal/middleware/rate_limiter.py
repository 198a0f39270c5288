"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in portal/__init__.py with no default limits;
this module applies granular limits per route category.

Usage:
    from portal.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

# Blueprint name → limit string (per remote IP)
BLUEPRINT_LIMITS = {
    # Code exchange hits the hosted auth provider
    "auth": "20/minute",
    # Uploads stream a file to object storage
    "expense_pdf": "30/minute",
    # Flat-file stores rewrite a whole file per mutation
    "specification": "60/minute",
    "update_log": "60/minute",
    "technical_sheet": "60/minute",
    "servers": "60/minute",
    "validation": "60/minute",
    # Entity CRUD
    "contacts": "200/minute",
    "projects": "200/minute",
    "campaigns": "200/minute",
    "products": "200/minute",
    "documents": "200/minute",
    "events": "200/minute",
    "accounting": "200/minute",
}


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints (see BLUEPRINT_LIMITS).

    Health routes are exempt. Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    for bp_name, limit in BLUEPRINT_LIMITS.items():
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(limit)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured: auth: 20/min, uploads: 30/min, "
        "flat-file writes: 60/min, entity CRUD: 200/min"
    )
