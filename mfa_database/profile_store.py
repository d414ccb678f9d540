"""
profile_store.py — In-memory collection of named secrets ("profiles") and
its TOML serialization.

Data file layout (one table per profile, insertion order = display order):

    [[profiles]]
    name = "github"
    secret = "JBSWY3DPEHPK3PXP"

Secrets are stored verbatim as the user typed them (Base32 text). Decoding
to raw bytes happens only when a code is generated, so a profile with a
malformed secret can be registered and fails later at `show` time.
"""

import base64
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found]

from mfa_core.errors import (
    DecodeError,
    NotFoundError,
    ParseError,
    PersistenceError,
    ValidationError,
    ValidationKind,
)

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 20
# alphabet, number and symbol (@-_)
VALID_NAME_PATTERN = re.compile(r"[A-Za-z0-9_@-]+\Z")

PROFILES_KEY = "profiles"


@dataclass(frozen=True)
class Profile:
    """A named Base32 secret."""

    name: str
    secret: str

    def decoded_secret(self) -> bytes:
        """
        Base32-decode the stored secret (RFC 4648 alphabet, padding required).

        Raises:
            DecodeError: if the secret has characters outside the alphabet
                or wrong padding
        """
        try:
            return base64.b32decode(self.secret, casefold=True)
        except ValueError as e:  # binascii.Error or non-ASCII input
            raise DecodeError(f"Can't decode the secret of profile '{self.name}': {e}") from e

    def validate(self) -> None:
        """
        Check the field formats.

        Name: 3~20 characters, alphabet / number / symbol (@-_).
        Secret: must not be blank.

        Raises:
            ValidationError: first rule that fails
        """
        # byte length, so a multi-byte character is never "too short"
        length = len(self.name.encode("utf-8", "surrogatepass"))
        if length < NAME_MIN_LENGTH:
            raise ValidationError(
                ValidationKind.TOO_SHORT,
                f"Name requires at least {NAME_MIN_LENGTH} characters.",
            )
        if length > NAME_MAX_LENGTH:
            raise ValidationError(
                ValidationKind.TOO_LONG,
                f"Name requires {NAME_MAX_LENGTH} characters or less.",
            )
        if not VALID_NAME_PATTERN.match(self.name):
            raise ValidationError(
                ValidationKind.ILLEGAL_CHARACTER,
                "Name can contain only alphabet, number and symbol (@-_) .",
            )
        if not self.secret:
            raise ValidationError(ValidationKind.REQUIRED, "Secret must be present.")


class ProfileStore:
    """
    Ordered set of profiles keyed by name.

    A dict keeps insertion order, so lookups and removals are direct while
    `get_profiles()` still lists profiles in the order they were added.
    """

    def __init__(self, profiles=()):
        # no validation: profiles restored from disk are taken as written
        self._profiles: Dict[str, Profile] = {p.name: p for p in profiles}

    def __len__(self) -> int:
        return len(self._profiles)

    def __iter__(self) -> Iterator[Profile]:
        return iter(self._profiles.values())

    def __contains__(self, name) -> bool:
        return name in self._profiles

    def __eq__(self, other):
        if not isinstance(other, ProfileStore):
            return NotImplemented
        return self.get_profiles() == other.get_profiles()

    def __repr__(self) -> str:
        return f"ProfileStore({list(self._profiles)!r})"

    # --- mutation ----------------------------------------------------------
    def new_profile(self, name: str, secret: str) -> Profile:
        """
        Validate and append a new profile.

        Raises:
            ValidationError: duplicate name or invalid field; the store is
                left unchanged
        """
        profile = Profile(name, secret)
        self._push(profile)
        logger.debug("Added profile %s", name)
        return profile

    def _push(self, profile: Profile) -> None:
        if profile.name in self._profiles:
            raise ValidationError(ValidationKind.DUPLICATION, "This name already exists.")
        profile.validate()
        self._profiles[profile.name] = profile

    def remove_profile(self, name: str) -> Profile:
        """
        Remove the profile called `name` and return it.

        Raises:
            NotFoundError: no such profile; the store is left unchanged
        """
        try:
            profile = self._profiles.pop(name)
        except KeyError:
            raise NotFoundError(f"Can't find this profile: {name}") from None
        logger.debug("Removed profile %s", name)
        return profile

    # --- lookup ------------------------------------------------------------
    def get_profile(self, name: str) -> Optional[Profile]:
        return self._profiles.get(name)

    def get_secret_by_name(self, name: str) -> Optional[bytes]:
        """
        Decoded secret of profile `name`, or None if the profile does not
        exist or its secret can't be decoded.

        Use get_profile() + Profile.decoded_secret() to tell the two apart.
        """
        profile = self.get_profile(name)
        if profile is None:
            return None
        try:
            return profile.decoded_secret()
        except DecodeError:
            return None

    def get_profiles(self) -> Tuple[Profile, ...]:
        return tuple(self._profiles.values())

    def names(self):
        return list(self._profiles)

    # --- serialization -----------------------------------------------------
    def serialize(self) -> bytes:
        """Render the store as TOML (an array of `profiles` tables)."""
        blocks = []
        for profile in self._profiles.values():
            blocks.append(
                f"[[{PROFILES_KEY}]]\n"
                f"name = {_toml_string(profile.name)}\n"
                f"secret = {_toml_string(profile.secret)}\n"
            )
        try:
            return "\n".join(blocks).encode("utf-8")
        except UnicodeEncodeError as e:
            raise PersistenceError(f"Profile data can not be encoded as UTF-8: {e}") from e

    def deserialize(self, content: bytes) -> None:
        """
        Replace the whole store with the profiles parsed from `content`.

        Either every profile is loaded or nothing changes.

        Raises:
            ParseError: content is not UTF-8 TOML of the expected shape
        """
        self._profiles = _parse_profiles(content)


def _toml_string(text: str) -> str:
    """Quote `text` as a TOML basic string."""
    out = []
    for ch in text:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\r":
            out.append("\\r")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _parse_profiles(content: bytes) -> Dict[str, Profile]:
    try:
        document = tomllib.loads(content.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ParseError(f"Profile file is not valid UTF-8: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ParseError(f"Profile file is not valid TOML: {e}") from e

    records = document.get(PROFILES_KEY, [])
    if not isinstance(records, list):
        raise ParseError(f"'{PROFILES_KEY}' must be an array of tables.")

    profiles: Dict[str, Profile] = {}
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ParseError(f"Profile #{index + 1} is not a table.")
        name = record.get("name")
        secret = record.get("secret")
        if not isinstance(name, str) or not isinstance(secret, str):
            raise ParseError(f"Profile #{index + 1} requires string fields 'name' and 'secret'.")
        if name in profiles:
            raise ParseError(f"Profile name '{name}' appears more than once.")
        profiles[name] = Profile(name, secret)
    return profiles
