"""
utils/garden_id.py — Garden identifier generation and validation.

Two checks exist:
- is_valid_garden_id: strict UUID format (8-4-4-4-12 hex), used for ids we mint
- is_acceptable_garden_id: the looser shape the persistence API accepts
  (a string of at least MIN_GARDEN_ID_LENGTH characters)
"""

import re
import uuid

MIN_GARDEN_ID_LENGTH = 10

UUID_RE = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE,
)


def generate_garden_id():
    """Generate a unique garden ID (random UUID4)."""
    return str(uuid.uuid4())


def is_valid_garden_id(garden_id):
    """True if `garden_id` is a UUID string."""
    if not garden_id or not isinstance(garden_id, str):
        return False
    return bool(UUID_RE.match(garden_id))


def is_acceptable_garden_id(garden_id):
    """True if `garden_id` has the shape the API stores under: a string of length >= 10."""
    return isinstance(garden_id, str) and len(garden_id) >= MIN_GARDEN_ID_LENGTH


def create_shareable_url(garden_id, base_url=''):
    """Shareable URL for a garden, e.g. https://example.org/garden/<id>."""
    return f"{base_url.rstrip('/')}/garden/{garden_id}"
