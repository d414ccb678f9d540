"""
location.py — Decide where the profile file lives.

Priority (first match wins):
1. $MFA_CLI_CONFIG_DIR           created if missing, used as-is
2. $XDG_CONFIG_HOME/mfa-cli      only if $XDG_CONFIG_HOME exists
3. $HOME/.mfa-cli                only if $HOME exists
4. <cwd>/.mfa-cli

The result is a plain StoreLocation value handed to ProfileManager, so tests
can pass a fake environment instead of touching os.environ.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from mfa_core.errors import PersistenceError

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
OVERRIDE_ENV = "MFA_CLI_CONFIG_DIR"
XDG_CONFIG_HOME_ENV = "XDG_CONFIG_HOME"
HOME_ENV = "HOME"

SAVE_DIR_NAME = "mfa-cli"
HIDDEN_SAVE_DIR_NAME = ".mfa-cli"
CONFIG_FILE_NAME = "profile"


@dataclass(frozen=True)
class StoreLocation:
    """Directory + file name of the profile file."""

    directory: Path
    file_name: str = CONFIG_FILE_NAME

    @property
    def path(self) -> Path:
        return self.directory / self.file_name

    def exists(self) -> bool:
        return self.path.exists()

    def ensure_directory(self) -> None:
        """Create the directory (and parents) if it does not exist yet."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Can not create config directory {self.directory}: {e}") from e


def _existing_dir(environ: Mapping[str, str], key: str) -> Optional[Path]:
    value = environ.get(key)
    if value and Path(value).exists():
        return Path(value)
    return None


def resolve_store_location(
    environ: Optional[Mapping[str, str]] = None,
    cwd: Optional[Union[str, Path]] = None,
    override: Optional[Union[str, Path]] = None,
) -> StoreLocation:
    """
    Resolve the profile file location from environment state.

    Arguments:
        environ: environment mapping (default: os.environ)
        cwd: working directory used as last resort (default: os.getcwd())
        override: explicit directory, takes precedence over $MFA_CLI_CONFIG_DIR

    Raises:
        PersistenceError: if an override directory can't be created
    """
    if environ is None:
        environ = os.environ

    explicit = override or environ.get(OVERRIDE_ENV)
    if explicit:
        location = StoreLocation(Path(explicit))
        location.ensure_directory()
        logger.debug("Using override config directory %s", location.directory)
        return location

    xdg = _existing_dir(environ, XDG_CONFIG_HOME_ENV)
    if xdg is not None:
        return StoreLocation(xdg / SAVE_DIR_NAME)

    home = _existing_dir(environ, HOME_ENV)
    if home is not None:
        return StoreLocation(home / HIDDEN_SAVE_DIR_NAME)

    base = Path(cwd) if cwd is not None else Path.cwd()
    logger.debug("Neither %s nor %s usable, falling back to %s", XDG_CONFIG_HOME_ENV, HOME_ENV, base)
    return StoreLocation(base / HIDDEN_SAVE_DIR_NAME)
