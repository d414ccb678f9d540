"""
otp_core.py — Core library for HOTP (RFC 4226) / TOTP (RFC 6238).

Goals:
- Pure functions only: no file I/O, no argparse, no printing.
- Used directly by the profile manager, the CLI and the HTTP API.
- Bit-exact with the published RFC test vectors.

Pipeline:
    secret bytes -> HMAC-SHA1 -> dynamic truncation -> decimal code
    (TOTP: unix time -> counter = floor(t / 30) -> HOTP)

Security note:
- The secret bytes are never logged. Callers pass raw bytes; Base32 decoding
  lives with the stored profile (see mfa_database.profile_store).
"""

import hashlib
import hmac
import logging
import struct
import time
from typing import Callable

from mfa_core.errors import ClockError, ValidationError, ValidationKind

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
TIME_STEP = 30              # TOTP step (seconds)
MIN_DIGITS = 1
MAX_DIGITS = 31
COUNTER_BYTES = 8           # RFC 4226: 8-byte big-endian moving factor
DIGEST_SIZE = 20            # SHA-1 output


# --- HMAC ------------------------------------------------------------------
def hmac_sha1(key: bytes, message: bytes) -> bytes:
    """
    Compute HMAC-SHA1(key, message) and return the 20-byte digest.

    Any key length is accepted: keys longer than the SHA-1 block size are
    hashed first, shorter keys are zero-padded (standard HMAC construction).
    """
    return hmac.new(key, message, hashlib.sha1).digest()


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Convert an integer counter to the 8-byte big-endian string RFC 4226 uses.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        ValidationError: if the counter is negative or does not fit in 64 bits
    """
    if i < 0 or i >= 1 << 64:
        raise ValidationError(
            ValidationKind.OUT_OF_RANGE,
            "Counter must be an unsigned 64-bit integer.",
        )
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Apply RFC 4226 dynamic truncation.

    - offset = low nibble of the last byte (0..15)
    - read 4 bytes starting at offset, clear the MSB of the first one
    - return the resulting 31-bit unsigned integer

    Arguments:
        hmac_digest: HMAC-SHA1 digest (20 bytes)
    Raises:
        ValueError: if the digest is not 20 bytes long
    """
    if len(hmac_digest) != DIGEST_SIZE:
        raise ValueError(f"HMAC-SHA1 digest must be {DIGEST_SIZE} bytes, got {len(hmac_digest)}")
    # offset in range 0..15, so offset + 3 <= 18 always stays inside the digest
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def _check_digits(digits: int) -> None:
    if not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise ValidationError(
            ValidationKind.OUT_OF_RANGE,
            f"Digits must be between {MIN_DIGITS} and {MAX_DIGITS}.",
        )


def format_code(value: int, digits: int = DEFAULT_DIGITS) -> str:
    """Reduce a truncated value modulo 10^digits and zero-pad it to `digits` characters."""
    _check_digits(digits)
    return str(value % (10 ** digits)).zfill(digits)


def hotp(secret: bytes, counter: bytes, digits: int = DEFAULT_DIGITS) -> str:
    """
    Generate an HOTP code (RFC 4226).

    Steps:
    1. HS = HMAC-SHA1(secret, counter)   # 20-byte string
    2. Snum = DT(HS)                     # 31-bit integer
    3. D = Snum mod 10^digits, zero-padded

    Arguments:
        secret: raw key bytes (already Base32-decoded)
        counter: 8-byte big-endian moving factor (see int_to_bytes)
        digits: code length, 1..31

    Returns:
        str: decimal code of exactly `digits` characters

    Raises:
        ValidationError: if digits is out of range or counter is not 8 bytes
    """
    _check_digits(digits)
    if len(counter) != COUNTER_BYTES:
        raise ValidationError(
            ValidationKind.OUT_OF_RANGE,
            f"Counter must be {COUNTER_BYTES} bytes, got {len(counter)}.",
        )
    digest = hmac_sha1(secret, counter)
    return format_code(dynamic_truncate(digest), digits)


def hotp_at(secret: bytes, counter: int, digits: int = DEFAULT_DIGITS) -> str:
    """HOTP for an integer counter."""
    return hotp(secret, int_to_bytes(counter), digits)


# --- TOTP ------------------------------------------------------------------
def current_timestamp(clock: Callable[[], float] = time.time) -> int:
    """
    Seconds elapsed since the Unix epoch.

    Raises:
        ClockError: if the clock reports a time before the epoch
    """
    now = clock()
    if now < 0:
        raise ClockError("System time is before the UNIX epoch.")
    return int(now)


def totp_at(secret: bytes, timestamp: int, digits: int = DEFAULT_DIGITS) -> str:
    """
    TOTP (RFC 6238) for an explicit unix timestamp: HOTP(counter = floor(t / 30)).

    Arguments:
        secret: raw key bytes
        timestamp: epoch seconds
        digits: code length (the RFC 6238 vectors use 8)

    Raises:
        ClockError: if timestamp is negative
        ValidationError: if digits is out of range
    """
    if timestamp < 0:
        raise ClockError("Timestamp is before the UNIX epoch.")
    counter = int(timestamp) // TIME_STEP
    return hotp(secret, int_to_bytes(counter), digits)


def totp(secret: bytes, clock: Callable[[], float] = time.time) -> str:
    """Current 6-digit TOTP code for `secret`."""
    return totp_at(secret, current_timestamp(clock), DEFAULT_DIGITS)


def seconds_remaining(timestamp: int) -> int:
    """Seconds left before the code for `timestamp` rolls over (1..TIME_STEP)."""
    return TIME_STEP - (int(timestamp) % TIME_STEP)
