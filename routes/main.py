"""
routes/main.py — Service index and health check.

Provides:
- GET / — Service name and endpoint list
- GET /health — Storage backend health (503 when unavailable)
"""

from flask import Blueprint, current_app, jsonify

from storage import get_storage_info

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Service index (JSON API)."""
    endpoints = sorted(
        str(rule) for rule in current_app.url_map.iter_rules()
        if rule.endpoint != 'static'
    )
    return jsonify({
        'service': 'climate-garden-planner',
        'environment': current_app.config.get('ENVIRONMENT'),
        'endpoints': endpoints,
    })


@main_bp.route('/health')
def health():
    """Check storage health (JSON API)."""
    info = get_storage_info()
    status = 200 if info['available'] else 503
    return jsonify({
        'success': info['available'],
        'message': info['message'],
        'storage': info,
    }), status
