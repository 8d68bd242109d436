"""
routes/garden.py — Garden persistence API.

Provides:
- POST /garden/ — Create a garden under a generated id
- GET /garden/<garden_id> — Load a saved garden
- POST /garden/<garden_id> — Save (upsert) a garden
- DELETE /garden/<garden_id> — Delete a garden (idempotent)

The id is checked before the method: a malformed or empty id is a 400 for
every method, and a well-formed id with an unsupported method is a 405.
Storage failures propagate to the app's JSON 500 handler.

Records live in the configured store under garden:<id>.
"""

from flask import Blueprint, current_app, jsonify, request

from models import GardenRecord
from storage import StorageError, garden_key, get_store
from utils.garden_id import create_shareable_url, generate_garden_id
from utils.responses import method_not_allowed
from utils.validators import validate_garden_id, validate_garden_payload

garden_bp = Blueprint('garden', __name__, url_prefix='/garden')

# Routed methods; only those with a handler below are allowed
ROUTED_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE']


def _save(garden_id, payload):
    record = GardenRecord.from_stored(garden_id, payload)
    record.touch_modified()
    get_store().set(garden_key(garden_id), record.to_dict())
    return record


def create_garden():
    """Create a garden with a fresh id (JSON API)."""
    payload = request.get_json(silent=True)
    error = validate_garden_payload(payload)
    if error:
        return jsonify({'error': error}), 400

    garden_id = generate_garden_id()
    record = _save(garden_id, payload)

    current_app.logger.info("Created garden %s", garden_id)
    return jsonify({
        'success': True,
        'gardenId': garden_id,
        'lastModified': record.last_modified,
        'shareUrl': create_shareable_url(garden_id, request.host_url),
    }), 201


def load_garden(garden_id):
    """Load a garden. lastAccessed is refreshed in the response only."""
    data = get_store().get(garden_key(garden_id))
    if data is None:
        return jsonify({'error': 'Garden not found'}), 404

    record = GardenRecord.from_stored(garden_id, data if isinstance(data, dict) else {})
    record.touch_accessed()
    return jsonify(record.to_dict())


def save_garden(garden_id):
    """Save a garden: the body is stored as-is plus lastModified and gardenId."""
    payload = request.get_json(silent=True)
    error = validate_garden_payload(payload)
    if error:
        return jsonify({'error': error}), 400

    record = _save(garden_id, payload)
    return jsonify({
        'success': True,
        'gardenId': garden_id,
        'lastModified': record.last_modified,
    })


def delete_garden(garden_id):
    """Delete a garden. Succeeds even when absent or when the store fails."""
    try:
        get_store().delete(garden_key(garden_id))
    except StorageError as e:
        current_app.logger.warning("Delete of garden %s failed: %s", garden_id, e)

    return jsonify({'success': True, 'deleted': garden_id})


GARDEN_HANDLERS = {
    'GET': load_garden,
    'POST': save_garden,
    'DELETE': delete_garden,
}


@garden_bp.route('/', methods=ROUTED_METHODS)
def garden_collection():
    """POST creates a garden; any other method names an empty garden id."""
    if request.method == 'POST':
        return create_garden()
    return jsonify({'error': validate_garden_id('')}), 400


@garden_bp.route('/<garden_id>', methods=ROUTED_METHODS)
def garden_resource(garden_id):
    """Dispatch on method once the garden id has been validated."""
    error = validate_garden_id(garden_id)
    if error:
        return jsonify({'error': error}), 400

    handler = GARDEN_HANDLERS.get(request.method)
    if handler is None:
        return method_not_allowed(GARDEN_HANDLERS)
    return handler(garden_id)
