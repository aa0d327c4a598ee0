"""
Recipe Catalog Application

Flask application factory. Wires configuration, logging, the database
schema, Flask-Migrate and the Store that every service call goes through,
plus JSON error responses for whatever controller layer is mounted on top.
"""

import logging
import os

from flask import Flask, current_app, jsonify
from flask_migrate import Migrate

from config import engine_options_for, get_config
from models import db
from services import RecipeError, Store

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

migrate = Migrate()


def configure_logging(app):
    """Install one stream handler on the root logger (once per process)."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)


def register_error_handlers(app):
    """Answer RecipeError subclasses with {"error", "errors"} JSON and their status."""

    @app.errorhandler(RecipeError)
    def handle_recipe_error(error):
        if error.status_code >= 500:
            logger.error("Request failed: %s", error.message)
        body = {'error': error.message}
        if error.errors:
            body['errors'] = error.errors
        return jsonify(body), error.status_code


def init_db(app):
    """Create any missing tables and the upload folders."""
    os.makedirs(app.config['IMAGE_UPLOAD_FOLDER'], exist_ok=True)
    with app.app_context():
        db.create_all()


def create_app(config_name=None, **overrides):
    """
    Build the application.

    Args:
        config_name: 'development', 'production' or 'testing' (defaults to FLASK_ENV)
        overrides: Config keys applied after the config class, e.g. a test database URI
    """
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    app.config.update(overrides)
    if 'SQLALCHEMY_DATABASE_URI' in overrides and 'SQLALCHEMY_ENGINE_OPTIONS' not in overrides:
        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options_for(overrides['SQLALCHEMY_DATABASE_URI'])

    configure_logging(app)
    db.init_app(app)
    migrate.init_app(app, db)
    register_error_handlers(app)

    init_db(app)
    app.extensions['store'] = Store.from_app(app)
    logger.info("Recipe catalog started (%s)", app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0])
    return app


def get_store(app=None):
    """The Store attached to app (or the current app)."""
    return (app or current_app).extensions['store']


if __name__ == '__main__':
    application = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    application.run(debug=True, host='0.0.0.0', port=5000, use_reloader=False)
