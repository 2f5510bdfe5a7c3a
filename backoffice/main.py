from flask import Flask
from marshmallow import ValidationError
from .config import CONFIGS, DevelopmentConfig
from .extensions import db, migrate, jwt, ma, cors
import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(app):
    level = app.config.get("LOG_LEVEL", "INFO")
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("backoffice").setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name=None, config_overrides=None):
    app = Flask(__name__, instance_relative_config=False)
    env = config_name or os.getenv("FLASK_ENV", "development")
    app.config.from_object(CONFIGS.get(env, DevelopmentConfig))
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app)

    # initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",")]
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", "Idempotency-Key"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    # models must be mapped before the first query
    from backoffice.models import (  # noqa: F401
        account_balance,
        wallet_transaction,
        did_vendor,
        did_rate_chart,
        did_order,
        did_detail,
        billing_address,
        destination,
        rate,
        destination_rate,
    )

    # register blueprints
    from backoffice.routes.tfn_routes import bp as tfn_bp
    from backoffice.routes.wallet_routes import bp as wallet_bp
    from backoffice.routes.vendor_routes import bp as vendor_bp
    from backoffice.routes.did_rate_routes import bp as did_rate_bp
    from backoffice.routes.did_routes import bp as did_bp
    from backoffice.routes.billing_address_routes import bp as billing_address_bp
    from backoffice.routes.rating_routes import bp as rating_bp

    app.register_blueprint(tfn_bp)
    app.register_blueprint(wallet_bp)
    app.register_blueprint(vendor_bp)
    app.register_blueprint(did_rate_bp)
    app.register_blueprint(did_bp)
    app.register_blueprint(billing_address_bp)
    app.register_blueprint(rating_bp)

    register_error_handlers(app)

    return app


def register_error_handlers(app):
    # error handlers to match the uniform response envelope
    from backoffice.utils.response_formatter import error_response
    from backoffice.utils.exceptions import ServiceError

    @app.errorhandler(ServiceError)
    def service_error(e):
        if e.status >= 500:
            app.logger.error("%s: %s %s", e.code, e.message, e.details)
        else:
            app.logger.info("%s: %s", e.code, e.message)
        return error_response(e.code, e.message, e.details, status=e.status)

    @app.errorhandler(ValidationError)
    def validation_error(e):
        return error_response("VALIDATION_ERROR", "validation error", e.messages, status=403)

    @app.errorhandler(400)
    def bad_request(e):
        return error_response("BAD_REQUEST", str(e), status=400)

    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", str(e), status=405)

    @app.errorhandler(500)
    def server_error(e):
        return error_response("SERVER_ERROR", "Internal server error", status=500)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response("UNAUTHORIZED", reason, status=401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response("UNAUTHORIZED", reason, status=401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response("UNAUTHORIZED", "Token has expired", status=401)
