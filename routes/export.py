"""
routes/export.py — Excel export routes.

Provides:
- GET /export/calendar/<garden_id>?startMonth= — Download the garden calendar as Excel
"""

from flask import Blueprint, jsonify, request, send_file

from garden_calendar import generate_garden_calendar
from routes.planner import load_planner_inputs
from storage import garden_key, get_item
from utils.export import generate_calendar_excel
from utils.validators import parse_month, validate_garden_id

export_bp = Blueprint('export', __name__, url_prefix='/export')


@export_bp.route('/calendar/<garden_id>')
def export_calendar(garden_id):
    """Export a garden's twelve-month calendar as Excel."""
    error = validate_garden_id(garden_id)
    if error:
        return jsonify({'error': error}), 400

    try:
        start_month = parse_month(request.args.get('startMonth'))
    except ValueError:
        return jsonify({'error': 'Invalid month'}), 400

    if get_item(garden_key(garden_id)) is None:
        return jsonify({'error': 'Garden not found'}), 404

    location, registry, portfolio = load_planner_inputs(garden_id)
    calendar = generate_garden_calendar(location, portfolio, registry, start_month)
    buffer, filename = generate_calendar_excel(garden_id, calendar)

    return send_file(
        buffer,
        as_attachment=True,
        download_name=filename,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
