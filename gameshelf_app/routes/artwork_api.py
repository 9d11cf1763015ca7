"""
================================================================================
GameShelf - Artwork API Routes
================================================================================
Flask blueprint exposing the artwork resolution pipeline to the game list UI.

ENDPOINTS:
  GET  /api/artwork             - Resolve one title to an image URL
  POST /api/artwork/batch       - Resolve many titles at once
  GET  /api/artwork/providers   - List catalogs in priority order
  GET  /api/artwork/health      - Probe every catalog

The UI only ever has to handle "url" or null; catalog failures never turn
into error responses. 400 is reserved for malformed requests.
================================================================================
"""

from flask import Blueprint, current_app, jsonify, request
import asyncio
import logging

from ..artwork import ArtworkResolver, ArtworkSettings
from ..artwork.providers import PROVIDER_CLASSES
from ..log import debug_log_event
from ..rate_limit import limit_heavy, limit_light, limit_medium
from .validators import (
    MAX_BATCH_ITEMS, parse_bool, parse_platform, validate_title
)

logger = logging.getLogger(__name__)

# Create blueprint
artwork_bp = Blueprint('artwork_api', __name__)

# Simultaneous resolutions per batch request
BATCH_CONCURRENCY = 4


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def run_async(coro):
    """
    Run async coroutine in sync Flask context.

    Each call gets its own event loop; the resolver and its HTTP clients
    are created and closed inside that loop.
    """
    return asyncio.run(coro)


def _settings() -> ArtworkSettings:
    return current_app.config.get('ARTWORK_SETTINGS') or ArtworkSettings.from_env()


# =============================================================================
# ARTWORK ROUTES
# =============================================================================

@artwork_bp.route('/api/artwork', methods=['GET'])
@limit_medium
def resolve_artwork_route():
    """
    Resolve a single title.

    Query params:
        title: Game title (required)
        platform: Platform hint, e.g. "PS5", "Switch 1/2" (optional)
        randomize: "1" to re-roll among the top matches (optional)

    Returns:
        {"title": "...", "url": "https://..." | null}
    """
    title = request.args.get('title')
    error = validate_title(title)
    if error:
        return jsonify({'error': error}), 400

    platform, error = parse_platform(request.args.get('platform'))
    if error:
        return jsonify({'error': error}), 400

    randomize = parse_bool(request.args.get('randomize'))

    async def _resolve():
        async with ArtworkResolver(settings=_settings()) as resolver:
            return await resolver.resolve_artwork(title, platform, randomize)

    url = run_async(_resolve())

    debug_log_event({
        'event': 'artwork_resolved',
        'title': title,
        'platform': platform.value if platform else None,
        'randomize': randomize,
        'found': url is not None,
    })
    return jsonify({'title': title, 'url': url})


@artwork_bp.route('/api/artwork/batch', methods=['POST'])
@limit_heavy
def resolve_artwork_batch():
    """
    Resolve several titles concurrently.

    Request:
        {"items": [{"id": "g1", "title": "...", "platform": "PS5", "randomize": false}]}

    Returns:
        {"results": [{"id": "g1", "url": "https://..." | null}]}

    Blank titles resolve to null rather than failing the whole batch.
    """
    payload = request.get_json(silent=True) or {}
    items = payload.get('items')
    if not isinstance(items, list):
        return jsonify({'error': "Field 'items' must be a list"}), 400
    if len(items) > MAX_BATCH_ITEMS:
        return jsonify({'error': f"At most {MAX_BATCH_ITEMS} items per batch"}), 400

    jobs = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            return jsonify({'error': f"Item {index} must be an object"}), 400
        platform, error = parse_platform(item.get('platform'))
        if error:
            return jsonify({'error': f"Item {index}: {error}"}), 400
        title = item.get('title')
        if not isinstance(title, str) or validate_title(title):
            title = None
        jobs.append((item.get('id', index), title, platform, parse_bool(item.get('randomize'))))

    async def _resolve_all():
        semaphore = asyncio.Semaphore(BATCH_CONCURRENCY)
        async with ArtworkResolver(settings=_settings()) as resolver:
            async def _one(job):
                item_id, title, platform, randomize = job
                async with semaphore:
                    url = await resolver.resolve_artwork(title, platform, randomize)
                return {'id': item_id, 'url': url}

            return await asyncio.gather(*(_one(job) for job in jobs))

    results = run_async(_resolve_all()) if jobs else []
    found = sum(1 for result in results if result['url'])
    logger.info(f"Batch artwork: {found}/{len(results)} resolved")

    return jsonify({'results': list(results)})


@artwork_bp.route('/api/artwork/providers', methods=['GET'])
@limit_light
def get_providers():
    """
    List artwork catalogs in merge priority order.

    Returns:
        {"providers": [{"id": "box_art_archive", "name": "...", "priority": 1}, ...]}
    """
    providers = [
        {'id': cls.id.value, 'name': cls.name, 'priority': priority}
        for priority, cls in enumerate(PROVIDER_CLASSES, start=1)
    ]
    return jsonify({'providers': providers})


@artwork_bp.route('/api/artwork/health', methods=['GET'])
@limit_heavy
def health_check():
    """
    Probe every catalog with a well-known title.

    Returns:
        {"providers": {"box_art_archive": true, ...}, "healthy_count": 4, "total": 4}
    """
    async def _check():
        async with ArtworkResolver(settings=_settings()) as resolver:
            return await resolver.health_check()

    status = run_async(_check())
    return jsonify({
        'providers': status,
        'healthy_count': sum(1 for ok in status.values() if ok),
        'total': len(status),
    })
