"""Application factory for FinCompare backend services."""

from __future__ import annotations

from datetime import datetime
from typing import Callable
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from fincompare.backend.config.year_config import ConfigurationError
from fincompare.backend.settings import Settings, load_settings

from .http import problem_response
from .routes import register_routes
from .routes.config import get_configuration_metadata
from .routes.listings import EXTENSION_KEY
from .services.listings import build_listings_context
from .services.remote_store import RemoteStore


def create_app(
    *,
    settings: Settings | None = None,
    remote_store: RemoteStore | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Flask:
    """Create and configure the Flask application instance.

    The listing cache and fetchers are created here and live as long as the
    application; ``remote_store`` and ``clock`` replace the configured
    collaborators.
    """

    app = Flask(__name__)
    resolved = settings or load_settings()

    if not resolved.allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(resolved.allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    app.extensions[EXTENSION_KEY] = build_listings_context(
        resolved, remote=remote_store, clock=clock
    )

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(error: ConfigurationError):
        app.logger.error("Configuration error: %s", error)
        return problem_response(
            "configuration_error", status=500, message=str(error)
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface domain validation errors to clients."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app
