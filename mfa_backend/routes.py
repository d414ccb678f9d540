"""
PROFILE API ROUTES - FLASK BLUEPRINT

JSON endpoints over the same operations as the CLI. Secrets go in (on
register) but never come back out.

EXAMPLES:
curl http://localhost:5000/api/profiles
curl -X POST http://localhost:5000/api/profiles -H "Content-Type: application/json" \
     -d '{"name": "github", "secret": "JBSWY3DPEHPK3PXP"}'
curl http://localhost:5000/api/profiles/github/code
curl -X DELETE http://localhost:5000/api/profiles/github
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from mfa_core import otp_core
from mfa_core.errors import (
    ClockError,
    DecodeError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MANAGER_KEY = "PROFILE_MANAGER"

profiles_bp = Blueprint("profiles", __name__, url_prefix="/api")


def _manager():
    return current_app.config[MANAGER_KEY]


@profiles_bp.route("/profiles", methods=["GET"])
def list_profiles():
    """
    LIST PROFILE NAMES

      curl http://localhost:5000/api/profiles
    """
    return jsonify({"profiles": _manager().list()})


@profiles_bp.route("/profiles", methods=["POST"])
def add_profile():
    """
    REGISTER A PROFILE

    Body: {"name": "...", "secret": "..."}
    """
    data = request.get_json(silent=True) or {}
    name = data.get("name")
    secret = data.get("secret")
    if not isinstance(name, str) or not isinstance(secret, str):
        return jsonify({"error": "Fields 'name' and 'secret' are required"}), 400

    try:
        profile = _manager().register(name, secret)
    except ValidationError as e:
        return jsonify({"error": str(e), "kind": e.kind.value}), 400
    except PersistenceError as e:
        logger.error("Failed to save profile %s: %s", name, e)
        return jsonify({"error": str(e)}), 500

    return jsonify({"name": profile.name}), 201


@profiles_bp.route("/profiles/<name>", methods=["DELETE"])
def remove_profile(name):
    try:
        _manager().remove(name)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PersistenceError as e:
        logger.error("Failed to save after removing %s: %s", name, e)
        return jsonify({"error": str(e)}), 500
    return jsonify({"removed": name})


@profiles_bp.route("/profiles/<name>/code", methods=["GET"])
def profile_code(name):
    """
    CURRENT TOTP CODE

      curl http://localhost:5000/api/profiles/github/code

    Returns the code and how many seconds it stays valid.
    """
    try:
        now = otp_core.current_timestamp()
        code = _manager().get_code_at(name, now)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except DecodeError as e:
        return jsonify({"error": str(e)}), 422
    except ClockError as e:
        return jsonify({"error": str(e)}), 500

    return jsonify({
        "name": name,
        "code": code,
        "remaining": otp_core.seconds_remaining(now),
    })
