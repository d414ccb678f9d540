"""
FLASK APP FACTORY - LOCAL PROFILE API

Builds the Flask app serving the profile API (mfa_backend.routes) on top of
a ProfileManager. Started by `mfa-cli serve`; meant for local front ends,
so it listens on 127.0.0.1 unless told otherwise.
"""

import logging

from flask import Flask, jsonify
from flask_cors import CORS

from mfa_backend.routes import MANAGER_KEY, profiles_bp

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000


def create_app(manager) -> Flask:
    """
    Create the Flask app.

    Arguments:
        manager: mfa_database.ProfileManager shared by every request
    """
    app = Flask(__name__)
    app.config[MANAGER_KEY] = manager

    # Local browser front ends run on another port
    CORS(app)

    app.register_blueprint(profiles_bp)

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "mfa-cli",
            "endpoints": [
                "GET /api/profiles",
                "POST /api/profiles",
                "DELETE /api/profiles/<name>",
                "GET /api/profiles/<name>/code",
            ],
        })

    return app


def run(manager, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve the API until interrupted. Single-threaded: one manager, no locking."""
    app = create_app(manager)
    logger.info("Serving profile API on http://%s:%d", host, port)
    app.run(host=host, port=port, threaded=False)
