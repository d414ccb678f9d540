"""
errors.py — Exception types shared by the OTP core, the profile store and
the front ends (CLI / HTTP API).

Every error carries the process exit code the CLI reports for it, so the
command layer can translate failures without a lookup table.
"""

from enum import Enum


class MfaError(Exception):
    """Base class for every failure raised by mfa-cli."""

    exit_code = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationKind(str, Enum):
    ILLEGAL_CHARACTER = "illegal_character"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    DUPLICATION = "duplication"
    REQUIRED = "required"
    OUT_OF_RANGE = "out_of_range"


class ValidationError(MfaError, ValueError):
    """
    Input rejected before any state change.

    `kind` tells which rule failed (illegal character, too short / too long,
    duplicate name, missing value, numeric argument out of range).
    """

    exit_code = 3

    def __init__(self, kind: ValidationKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    def __eq__(self, other):
        if not isinstance(other, ValidationError):
            return NotImplemented
        return self.kind == other.kind and self.message == other.message

    def __hash__(self):
        return hash((self.kind, self.message))

    def __repr__(self) -> str:
        return f"ValidationError({self.kind.name}, {self.message!r})"


class NotFoundError(MfaError, LookupError):
    """A profile name that is not registered."""

    exit_code = 1


class DecodeError(MfaError, ValueError):
    """Stored secret is not valid Base32 (raised only when the bytes are needed)."""

    exit_code = 5


class PersistenceError(MfaError):
    """Reading, writing or creating the profile file failed."""

    exit_code = 4


class ParseError(PersistenceError):
    """The profile file exists but its content is malformed."""


class ClockError(MfaError):
    """System clock reports a time before the Unix epoch."""

    exit_code = 6
