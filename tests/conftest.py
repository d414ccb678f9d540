"""Shared pytest fixtures for mfa-cli tests."""

import base64

import pytest

from mfa_database.location import StoreLocation
from mfa_database.profile_manager import ProfileManager

# RFC 4226 / RFC 6238 test key
RFC_SECRET = b"12345678901234567890"
RFC_SECRET_B32 = base64.b32encode(RFC_SECRET).decode("ascii")


@pytest.fixture
def rfc_secret() -> bytes:
    return RFC_SECRET


@pytest.fixture
def rfc_secret_b32() -> str:
    return RFC_SECRET_B32


@pytest.fixture
def location(tmp_path) -> StoreLocation:
    """Store location inside a not-yet-existing directory."""
    return StoreLocation(tmp_path / "config" / "mfa-cli")


@pytest.fixture
def manager(location) -> ProfileManager:
    return ProfileManager(location)
