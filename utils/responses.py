"""
utils/responses.py — JSON error responses shared by the app and blueprints.
"""

from flask import current_app, jsonify


def method_not_allowed(valid_methods=None):
    """405 JSON response with an Allow header listing `valid_methods`."""
    response = jsonify({'error': 'Method not allowed'})
    response.status_code = 405
    if valid_methods:
        response.headers['Allow'] = ', '.join(sorted(valid_methods))
    return response


def server_error(error):
    """
    500 JSON response for an unhandled error.

    The error is logged with its traceback; its text is only included in
    the body when ENVIRONMENT is 'development'.
    """
    current_app.logger.exception("Unhandled error: %s", error)
    body = {'error': 'Internal server error'}
    if current_app.config.get('ENVIRONMENT') == 'development':
        body['message'] = str(error)
    return jsonify(body), 500
