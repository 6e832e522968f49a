# -*- coding: utf-8 -*-
"""Main application file for the board service."""

import time
from datetime import datetime, timezone

from flask import Flask, Response, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from src.config import Config, load_config
from src.db.session import Database
from src.db.uuid_array import UUIDArrayError
from src.routes.helpers import error_response
from src.routes.lists import lists_bp

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)


REQUEST_COUNT = Counter(
    "board_service_requests_total",
    "Total number of HTTP requests processed.",
    labelnames=("method", "endpoint", "status"),
)
REQUEST_LATENCY = Histogram(
    "board_service_request_duration_seconds",
    "Request latency in seconds.",
    labelnames=("method", "endpoint"),
)


def create_app(
    config: Config | None = None, database: Database | None = None
) -> Flask:
    """Create and configure the Flask application.

    The caller owns ``database`` when it is passed in. Otherwise one is
    built from ``config`` and must be released with ``Database.dispose``
    via ``app.extensions["database"]``.
    """
    config = config or load_config()
    app = Flask(__name__)
    app.config["APP_CONFIG"] = config
    app.logger.setLevel(config.log_level)

    CORS(app, origins=config.cors_origins)
    app.extensions["database"] = database or Database(config)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        """Handle HTTP exceptions by returning JSON."""
        message = err.description or err.name
        return error_response(err.code or 500, message)

    @app.errorhandler(UUIDArrayError)
    def handle_corrupt_array(err: UUIDArrayError):
        """Stored array values that cannot be decoded fail the request."""
        app.logger.error("corrupt stored array: %s", err)
        return error_response(
            500, "stored value is corrupt", {"reason": str(err)}
        )

    @app.errorhandler(Exception)
    def handle_exception(err: Exception):
        """Handle unexpected exceptions by returning JSON."""
        app.logger.exception("unhandled error")
        return error_response(500, str(err))

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify(
            {
                "status": "ok",
                "service": "board-service",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    @app.route("/metrics")
    def metrics() -> Response:
        """Expose Prometheus metrics."""
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def start_timer() -> None:
        g._request_start_time = time.perf_counter()

    @app.after_request
    def log_and_record(response: Response) -> Response:
        endpoint = request.endpoint or "unknown"
        method = request.method
        status = str(response.status_code)
        start = getattr(g, "_request_start_time", None)
        REQUEST_COUNT.labels(
            method=method,
            endpoint=endpoint,
            status=status,
        ).inc()
        if start is not None:
            duration = time.perf_counter() - start
            REQUEST_LATENCY.labels(
                method=method,
                endpoint=endpoint,
            ).observe(duration)
            app.logger.info(
                "request.completed",
                extra={
                    "endpoint": endpoint,
                    "method": method,
                    "status": status,
                    "duration_ms": duration * 1000,
                },
            )
        return response

    app.register_blueprint(lists_bp)

    return app


if __name__ == "__main__":
    app_config = load_config()
    db = Database(app_config)
    application = create_app(app_config, db)
    try:
        application.run(debug=True, port=app_config.app_port)
    finally:
        db.dispose()
