# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import os
import time
import uuid
from typing import Any, Dict, Optional
from flask import Flask, jsonify, request, g


def create_app(config: Optional[Dict[str, Any]] = None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # =============================================================================
    # CONFIGURATION
    # =============================================================================
    from .artwork import ArtworkSettings

    app.config.from_mapping(
        JSON_SORT_KEYS=False,
        ARTWORK_SETTINGS=ArtworkSettings.from_env(),
        DISABLE_RATE_LIMITING=os.environ.get('DISABLE_RATE_LIMITING', 'false').lower() in ('true', '1', 'yes'),
        HOST=os.environ.get('FLASK_HOST', '127.0.0.1'),
        PORT=int(os.environ.get('FLASK_PORT', '5000')),
        DEBUG=os.environ.get('FLASK_DEBUG', 'false').lower() in ('true', '1', 'yes'),
    )
    if config:
        app.config.update(config)

    # Flask >= 2.3 reads this from the JSON provider, not app.config
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    # =============================================================================
    # LOGGING and RATE LIMITING
    # =============================================================================
    from .log import configure_logging, log, debug_log_event
    from .rate_limit import init_rate_limiting

    configure_logging()
    init_rate_limiting(app)

    @app.before_request
    def assign_request_id():
        g.request_id = uuid.uuid4().hex[:12]
        g.request_start = time.time()

    @app.after_request
    def debug_request_log(response):
        duration_ms = None
        start_time = getattr(g, 'request_start', None)
        if start_time:
            duration_ms = int((time.time() - start_time) * 1000)
        debug_log_event({
            'event': 'request',
            'request_id': getattr(g, 'request_id', None),
            'method': request.method,
            'path': request.path,
            'query': request.query_string.decode('utf-8', errors='ignore'),
            'status': response.status_code,
            'duration_ms': duration_ms,
            'remote_addr': request.remote_addr,
        })
        return response

    @app.teardown_request
    def debug_exception_log(error=None):
        if not error:
            return
        debug_log_event({
            'event': 'exception',
            'request_id': getattr(g, 'request_id', None),
            'path': request.path if request else None,
            'error_type': error.__class__.__name__,
            'error': str(error)
        })

    # =============================================================================
    # BLUEPRINTS & ROUTES
    # =============================================================================
    from .routes.artwork_api import artwork_bp

    app.register_blueprint(artwork_bp)

    @app.route('/')
    def index():
        return jsonify({'service': 'gameshelf-artwork', 'status': 'ok'})

    settings = app.config['ARTWORK_SETTINGS']
    log(
        f"GameShelf artwork service ready "
        f"(provider timeout {settings.provider_timeout}s, "
        f"probe timeout {settings.probe_timeout}s, "
        f"reroll pool {settings.random_pool_size})"
    )

    return app

# App instance should be created by the caller (run.py or WSGI entrypoint)
