"""
profile_manager.py — Profile store + profile file + TOTP, glued together.

Used by the CLI (mfa_core.otp_cli) and the HTTP API (mfa_backend). One
ProfileManager is created per process:

    location = resolve_store_location()
    manager = ProfileManager(location)
    manager.register("github", "JBSWY3DPEHPK3PXP")
    manager.get_code("github")   # -> '123456'

Every mutating call (register / remove) rewrites the whole profile file;
reads never touch the disk.
"""

import logging
import os
from typing import List, Optional, Tuple

from mfa_core import otp_core
from mfa_core.errors import NotFoundError, PersistenceError
from mfa_database.location import StoreLocation
from mfa_database.profile_store import Profile, ProfileStore

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


class ProfileManager:
    def __init__(self, location: StoreLocation) -> None:
        self._location = location
        self._store = ProfileStore()
        self._setup()

    @property
    def location(self) -> StoreLocation:
        return self._location

    @property
    def profiles(self) -> Tuple[Profile, ...]:
        return self._store.get_profiles()

    # --- setup / persistence -----------------------------------------------
    def _setup(self) -> None:
        """
        Create the config directory if needed and restore the store.

        A missing or empty profile file means "no profiles yet"; the file is
        not created until the first write. Any other read or parse failure
        propagates so a corrupt file is never silently replaced.
        """
        self._location.ensure_directory()
        if not self._location.exists():
            logger.debug("No profile file at %s yet", self._location.path)
            return
        self.restore()

    def restore(self) -> None:
        """
        Load the profile file into memory.

        Raises:
            PersistenceError: file can't be read
            ParseError: file content is malformed
        """
        path = self._location.path
        try:
            content = path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Can not read config file {path}: {e}") from e
        if not content.strip():
            logger.debug("Profile file %s is empty", path)
            self._store = ProfileStore()
            return
        self._store.deserialize(content)
        logger.debug("Restored %d profile(s) from %s", len(self._store), path)

    def dump(self) -> None:
        """
        Write the whole store to the profile file (truncate + write).

        Raises:
            PersistenceError: if the file can't be written
        """
        path = self._location.path
        data = self._store.serialize()
        try:
            path.write_bytes(data)
        except OSError as e:
            raise PersistenceError(f"Can not write config file {path}: {e}") from e
        try:
            os.chmod(path, FILE_MODE)
        except OSError:
            # Not fatal on filesystems without POSIX permissions
            logger.warning("Unable to chmod %s to %o", path, FILE_MODE)
        logger.debug("Saved %d profile(s) to %s", len(self._store), path)

    def _commit(self, snapshot: Tuple[Profile, ...]) -> None:
        try:
            self.dump()
        except Exception:
            self._store = ProfileStore(snapshot)
            raise

    # --- operations --------------------------------------------------------
    def register(self, name: str, secret: str) -> Profile:
        """
        Validate, add and save a new profile.

        Raises:
            ValidationError: invalid name / secret or duplicate name
            PersistenceError: the profile file could not be written
        """
        snapshot = self._store.get_profiles()
        profile = self._store.new_profile(name, secret)
        self._commit(snapshot)
        logger.info("Registered profile %s", name)
        return profile

    def list(self) -> List[str]:
        """Profile names in registration order."""
        return self._store.names()

    def remove(self, name: str) -> Profile:
        """
        Delete and save.

        Raises:
            NotFoundError: no profile called `name`
            PersistenceError: the profile file could not be written
        """
        snapshot = self._store.get_profiles()
        profile = self._store.remove_profile(name)
        self._commit(snapshot)
        logger.info("Removed profile %s", name)
        return profile

    def get_profile(self, name: str) -> Optional[Profile]:
        return self._store.get_profile(name)

    def _secret_for(self, name: str) -> bytes:
        profile = self._store.get_profile(name)
        if profile is None:
            raise NotFoundError(f"Can't find that profile: {name}")
        return profile.decoded_secret()

    def get_code(self, name: str) -> str:
        """
        Current TOTP code for profile `name`.

        Raises:
            NotFoundError: no profile called `name`
            DecodeError: stored secret is not valid Base32
            ClockError: system clock is before the epoch
        """
        return otp_core.totp(self._secret_for(name))

    def get_code_at(self, name: str, timestamp: int, digits: int = otp_core.DEFAULT_DIGITS) -> str:
        """TOTP code for profile `name` at an explicit unix timestamp."""
        return otp_core.totp_at(self._secret_for(name), timestamp, digits)
