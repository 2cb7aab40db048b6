from __future__ import annotations

from collections.abc import Mapping

from flask import Flask

from .config import Config
from .errors import register_error_handlers
from .extensions import cors, db
from .routes import register_routes
from .tokens import TokenService


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    if config_object is None:
        config_object = Config.from_env()
    if isinstance(config_object, Mapping):
        app.config.from_object(Config())
        app.config.from_mapping(config_object)
    else:
        app.config.from_object(config_object)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)

    # Allow the public site and the admin dashboard to talk to the API
    cors.init_app(
        app,
        origins=list(app.config["CORS_ORIGINS"]),
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        max_age=86400,
    )

    app.extensions["token_service"] = TokenService(
        app.config["SECRET_KEY"],
        app.config["TOKEN_LIFETIME_SECONDS"],
    )

    register_error_handlers(app)
    register_routes(app)

    return app
