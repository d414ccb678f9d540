"""
Profile storage for mfa-cli: the profile data model, where the profile file
lives, and the manager that loads / saves it.
"""

from mfa_database.location import StoreLocation, resolve_store_location
from mfa_database.profile_manager import ProfileManager
from mfa_database.profile_store import Profile, ProfileStore

__all__ = [
    "Profile",
    "ProfileManager",
    "ProfileStore",
    "StoreLocation",
    "resolve_store_location",
]
