"""HTTP surface of the planning relay."""

import logging
from typing import Optional

from flask import Flask, jsonify, request

from .config import Settings, load_settings
from .dispatcher import NotificationDispatcher
from .exceptions import TransportError, ValidationError
from .schemas import summarize_payload
from .transports.base import BaseTransport
from .transports.smtp import SMTPTransport

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[BaseTransport] = None,
) -> Flask:
    """Factory function to create and configure the Flask app.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        transport: Mail transport (an SMTP transport built from settings if omitted)
    """
    settings = settings or load_settings()
    transport = transport or SMTPTransport.from_settings(settings)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.server.max_content_length

    app.settings = settings
    app.transport = transport
    app.dispatcher = NotificationDispatcher(transport)

    logger.info(f"Environment: {settings.environment}")
    logger.info(
        f"SMTP configuration: {settings.smtp.public_dict()} "
        f"(validate_certs={settings.validate_certs})"
    )

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.server.cors_origin
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    @app.errorhandler(413)
    def payload_too_large(error):
        limit = settings.server.max_content_length
        return jsonify({"error": f"Request body exceeds {limit} bytes"}), 413

    @app.route("/", methods=["GET"])
    def index():
        """Liveness probe."""
        return jsonify({
            "status": "Server is running",
            "environment": settings.environment,
            "smtp": settings.smtp.public_dict(),
        }), 200

    @app.route("/env", methods=["GET"])
    def env():
        """Which transport settings are present, never the password itself."""
        return jsonify({
            "environment": settings.environment,
            "port": settings.server.port,
            "smtp": {
                **settings.smtp.public_dict(),
                "passwordSet": bool(settings.smtp.password),
                "rejectUnauthorized": settings.validate_certs,
            },
        }), 200

    @app.route("/test-email", methods=["GET"])
    async def test_email():
        """Send a diagnostic message to the sender's own address."""
        logger.info("Testing email configuration")
        config = settings.smtp.public_dict()
        try:
            receipt = await app.dispatcher.send_test_email()
        except TransportError as e:
            logger.error(f"Test email failed: {e.message}")
            return jsonify({
                "success": False,
                "error": e.to_dict(),
                "config": config,
            }), 500

        return jsonify({
            "success": True,
            "message": "Email de test envoyé avec succès",
            "messageId": receipt.message_id,
            "config": config,
        }), 200

    @app.route("/send-planning", methods=["POST"])
    async def send_planning():
        """Email the posted planning to every employee with an address."""
        payload = request.get_json(silent=True)
        if isinstance(payload, dict):
            logger.info(f"Received planning request: {summarize_payload(payload)}")

        try:
            outcomes = await app.dispatcher.dispatch_payload(payload)
        except ValidationError as e:
            logger.error(f"Rejected planning request: {e.message}")
            return jsonify({"error": e.message}), 500

        return jsonify([outcome.to_dict() for outcome in outcomes]), 200

    return app
