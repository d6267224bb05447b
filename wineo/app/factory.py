from __future__ import annotations

import logging
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from wineo.app.config import Config
from wineo.app.extensions import db, migrate, cors
from wineo.app.common.errors import ApiError, error_payload
from wineo.app.common.request_context import attach_request_id, current_request_id, init_request_id
from wineo.app.api.register import register_api_blueprints
from wineo.app.cli import cli_bp
from wineo.modules.catalog.tree import CategoryGraphError


def create_app(config_object: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})

    @app.before_request
    def _before_request():
        init_request_id()

    app.after_request(attach_request_id)

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    register_api_blueprints(app)

    # CLI (flask seed)
    app.register_blueprint(cli_bp)

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict(current_request_id())), err.status_code

    @app.errorhandler(CategoryGraphError)
    def handle_category_graph_error(err: CategoryGraphError):
        app.logger.error("Malformed category graph: %s", err)
        payload = error_payload(
            "malformed_category_graph",
            "Category data is inconsistent",
            {"category_id": err.category_id},
            current_request_id(),
        )
        return jsonify(payload), 500

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        # Normalize Werkzeug errors into our JSON shape
        payload = error_payload("http_error", err.description, {"name": err.name}, current_request_id())
        return jsonify(payload), err.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        return jsonify(error_payload("internal_error", "Internal server error", None, current_request_id())), 500

    return app
