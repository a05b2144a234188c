import logging

from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_sqlalchemy import SQLAlchemy

from .config import Config

# Initialize extensions outside the create_app function
db = SQLAlchemy()
jwt = JWTManager()


def _configure_logging(app):
    """JSON-ish log lines to stdout."""
    level = app.config.get('LOG_LEVEL', 'INFO')
    app.logger.setLevel(level)
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers in reloaders
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='{"ts":"%(asctime)s","level":"%(levelname)s","msg":"%(message)s","name":"%(name)s"}',
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)


def create_app(config_class=Config):
    # 1. Application Setup
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    # 2. Extensions
    db.init_app(app)
    jwt.init_app(app)
    CORS(app, origins=app.config['CORS_ALLOWED_ORIGINS'], supports_credentials=True)

    # 3. Error handlers and blueprints
    from .errors import register_error_handlers
    register_error_handlers(app)
    from .auth import register_jwt_callbacks
    register_jwt_callbacks(jwt)
    from .routes import register_blueprints
    register_blueprints(app)

    # 4. Import Models so SQLAlchemy knows every table
    from . import models

    # 5. Database Table Creation (Inside application context)
    with app.app_context():
        db.create_all()

    app.logger.info("rental manager started with %s", config_class.__name__)
    return app
