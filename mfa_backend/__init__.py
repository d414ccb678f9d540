"""
Local HTTP API for mfa-cli profiles, built with Flask.
"""

from mfa_backend.app import create_app

__all__ = ["create_app"]
