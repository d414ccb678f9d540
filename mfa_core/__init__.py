"""
mfa_core package
================

One-time password generation (HOTP / TOTP, RFC 4226 & RFC 6238) and the
`mfa-cli` command line front end.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(timestamp / 30), 6 digits
- Dynamic truncation: take 4 bytes at offset (last byte & 0x0F),
  clear the top bit, read as a 31-bit integer.

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from mfa_core import totp_at
>>> totp_at(b"12345678901234567890", 59, digits=8)
'94287082'
"""

from mfa_core.otp_core import (
    DEFAULT_DIGITS,
    TIME_STEP,
    dynamic_truncate,
    format_code,
    hmac_sha1,
    hotp,
    hotp_at,
    int_to_bytes,
    totp,
    totp_at,
)

__all__ = [
    "DEFAULT_DIGITS",
    "TIME_STEP",
    "dynamic_truncate",
    "format_code",
    "hmac_sha1",
    "hotp",
    "hotp_at",
    "int_to_bytes",
    "totp",
    "totp_at",
]
