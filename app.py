"""
app.py — Flask entry point for the climate garden planner API.

Initializes the Flask app from environment configuration, prepares the
storage backend on startup, registers all route blueprints and installs
JSON error handlers.

Environment:
- NODE_ENV: 'development' exposes error messages in 500 responses
- GARDEN_STORAGE_BACKEND: 'kv' (SQLite, default) or 'blob' (JSON files)
- GARDEN_KV_PATH / GARDEN_BLOB_DIR: storage locations
- OPENWEATHERMAP_API_KEY: enables the openweathermap provider
- WEATHER_TIMEOUT: upstream request timeout in seconds (default 10)

Run: python app.py → localhost:5000
"""

import logging
import os

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from storage import StorageError, get_blob_dir, get_kv_path, init_storage
from routes.main import main_bp
from routes.garden import garden_bp
from routes.weather import weather_bp
from routes.planner import planner_bp
from routes.export import export_bp
from utils.responses import method_not_allowed, server_error


def _env_float(name, default):
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


def load_config():
    """Configuration values read from the environment."""
    return {
        'ENVIRONMENT': os.environ.get('NODE_ENV', 'production'),
        'STORAGE_BACKEND': os.environ.get('GARDEN_STORAGE_BACKEND', 'kv'),
        'KV_DATABASE': get_kv_path(),
        'BLOB_DIR': get_blob_dir(),
        'OPENWEATHERMAP_API_KEY': os.environ.get('OPENWEATHERMAP_API_KEY'),
        'WEATHER_TIMEOUT': _env_float('WEATHER_TIMEOUT', 10),
        'LOG_LEVEL': os.environ.get('LOG_LEVEL', 'INFO'),
    }


def register_error_handlers(app):
    """JSON bodies for routing and server errors."""

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return method_not_allowed(e.valid_methods)

    @app.errorhandler(Exception)
    def internal_error(e):
        if isinstance(e, HTTPException) and e.code < 500:
            return e
        return server_error(e)


def create_app(test_config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.json.sort_keys = False

    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Prepare storage (SQLite table or blob directory)
    with app.app_context():
        try:
            init_storage()
        except StorageError as e:
            app.logger.warning("Could not initialize %s storage: %s",
                               app.config['STORAGE_BACKEND'], e)

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(garden_bp)
    app.register_blueprint(weather_bp)
    app.register_blueprint(planner_bp)
    app.register_blueprint(export_bp)

    register_error_handlers(app)

    return app


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app = create_app()
    # Debug mode: enabled by default for development (auto-reload on file changes)
    # Set FLASK_DEBUG=0 to disable
    debug = os.environ.get('FLASK_DEBUG', '1') != '0'
    app.run(host='localhost', port=5000, debug=debug)
