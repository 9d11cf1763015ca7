"""
Rate limiting configuration for the GameShelf API.

Uses Flask-Limiter to keep clients from hammering the artwork endpoints,
which in turn protects the public catalogs behind them from throttling us.

Rate Limit Tiers:
- Heavy: /api/artwork/batch, /api/artwork/health (many upstream calls)
- Medium: /api/artwork (one resolution, up to ~30 upstream calls)
- Light: /api/artwork/providers (no upstream calls)
"""

import os
from flask import jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize limiter (will be attached to app in create_app)
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "300 per hour"],
    storage_uri=os.environ.get("RATELIMIT_STORAGE_URI", "memory://"),
    strategy="fixed-window",
    headers_enabled=True,  # Add X-RateLimit-* headers to responses
)


# ==============================================================================
# RATE LIMIT TIERS
# ==============================================================================

# Heavy operations - batch resolution and provider health probes
HEAVY_LIMIT = "10 per minute"

# Medium operations - single title resolution (regenerate button)
MEDIUM_LIMIT = "60 per minute"

# Light operations - static listings
LIGHT_LIMIT = "120 per minute"


# ==============================================================================
# RATE LIMIT DECORATORS
# ==============================================================================

def limit_heavy(f):
    """Apply heavy rate limit to batch operations."""
    return limiter.limit(HEAVY_LIMIT)(f)


def limit_medium(f):
    """Apply medium rate limit to single resolutions."""
    return limiter.limit(MEDIUM_LIMIT)(f)


def limit_light(f):
    """Apply light rate limit to cheap operations."""
    return limiter.limit(LIGHT_LIMIT)(f)


# ==============================================================================
# ERROR HANDLER
# ==============================================================================

def rate_limit_exceeded_handler(e):
    """JSON body for 429 responses; the API has no HTML pages."""
    retry_after = e.retry_after if hasattr(e, 'retry_after') else 60
    response = jsonify({
        "error": "Rate limit exceeded",
        "message": str(e.description),
        "retry_after": retry_after
    })
    response.status_code = 429
    response.headers['Retry-After'] = str(retry_after)
    return response


# ==============================================================================
# INITIALIZATION
# ==============================================================================

def init_rate_limiting(app):
    """
    Initialize rate limiting for a Flask app.

    Call this in create_app() after app configuration.
    """
    limiter.init_app(app)

    # Register custom error handler
    app.errorhandler(429)(rate_limit_exceeded_handler)

    # Optionally disable rate limiting (tests, local development)
    if app.config.get('DISABLE_RATE_LIMITING'):
        limiter.enabled = False

    return limiter
