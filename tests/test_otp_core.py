"""
Tests for the HOTP / TOTP pipeline.

Covers:
- HMAC-SHA1 primitive
- dynamic truncation and decimal formatting
- RFC 4226 (HOTP) and RFC 6238 (TOTP, SHA-1) test vectors
- digits range validation and clock failures
"""

import pyotp
import pytest

from mfa_core import otp_core
from mfa_core.errors import ClockError, ValidationError, ValidationKind


# ---------------------------------------------------------------------------
# HMAC-SHA1
# ---------------------------------------------------------------------------


def test_hmac_sha1_known_digest():
    digest = otp_core.hmac_sha1(b"SGVsbG8gV29ybGQ=", b"1234")
    assert digest.hex() == "780b7ebfa252b52192f25e4e48929f08a8772c72"


def test_hmac_sha1_accepts_long_keys():
    digest = otp_core.hmac_sha1(b"k" * 200, b"message")
    assert len(digest) == 20


# ---------------------------------------------------------------------------
# Dynamic truncation / formatting
# ---------------------------------------------------------------------------


def test_truncate_reads_from_offset_and_clears_top_bit():
    digest = bytes([0x00] * 10 + [0xFF, 0xBB, 0xBB, 0xBB] + [0x00] * 5 + [0x0A])
    assert otp_core.dynamic_truncate(digest) == 0x7FBBBBBB


@pytest.mark.parametrize("offset", range(16))
def test_truncate_every_offset(offset):
    digest = bytearray(20)
    digest[offset:offset + 4] = b"\xf1\x02\x03\x04"
    digest[19] = (digest[19] & 0xF0) | offset
    assert otp_core.dynamic_truncate(bytes(digest)) >> 8 == 0x710203


@pytest.mark.parametrize(
    "digest_hex, expected",
    [
        ("cc93cf18508d94934c64b65d8ba7667fb7cde4b0", 0x4C93CF18),
        ("75a48a19d4cbe100644e8ac1397eea747a2d33ab", 0x41397EEA),
    ],
)
def test_truncate_rfc4226_digests(digest_hex, expected):
    assert otp_core.dynamic_truncate(bytes.fromhex(digest_hex)) == expected


def test_truncate_rejects_wrong_digest_size():
    with pytest.raises(ValueError):
        otp_core.dynamic_truncate(b"\x00" * 19)


@pytest.mark.parametrize("value, expected", [(0x82FEF30, "359152"), (0x66EF7655, "969429"), (7, "000007")])
def test_format_code(value, expected):
    assert otp_core.format_code(value, 6) == expected


# ---------------------------------------------------------------------------
# HOTP
# ---------------------------------------------------------------------------

RFC4226_CODES = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]


@pytest.mark.parametrize("counter, expected", list(enumerate(RFC4226_CODES)))
def test_hotp_rfc4226_vectors(rfc_secret, counter, expected):
    assert otp_core.hotp(rfc_secret, otp_core.int_to_bytes(counter), 6) == expected


def test_hotp_with_raw_counter_bytes(rfc_secret):
    assert otp_core.hotp(rfc_secret, bytes([0, 0, 0, 0, 0, 0, 0, 4]), 6) == "338314"
    assert otp_core.hotp(rfc_secret, bytes([0, 0, 0, 0, 0, 0, 0, 5]), 6) == "254676"


@pytest.mark.parametrize("digits", [1, 2, 6, 8, 10, 17, 31])
def test_hotp_length_matches_digits(rfc_secret, digits):
    code = otp_core.hotp_at(rfc_secret, 12345, digits)
    assert len(code) == digits
    assert code.isdigit()


@pytest.mark.parametrize("digits", [0, 32, -1])
def test_hotp_rejects_digits_out_of_range(rfc_secret, digits):
    with pytest.raises(ValidationError) as exc:
        otp_core.hotp_at(rfc_secret, 0, digits)
    assert exc.value.kind == ValidationKind.OUT_OF_RANGE


def test_hotp_rejects_short_counter(rfc_secret):
    with pytest.raises(ValidationError):
        otp_core.hotp(rfc_secret, b"\x00\x04", 6)


def test_int_to_bytes_bounds():
    assert otp_core.int_to_bytes(1) == b"\x00" * 7 + b"\x01"
    assert otp_core.int_to_bytes((1 << 64) - 1) == b"\xff" * 8
    with pytest.raises(ValidationError):
        otp_core.int_to_bytes(-1)
    with pytest.raises(ValidationError):
        otp_core.int_to_bytes(1 << 64)


def test_hotp_matches_pyotp(rfc_secret, rfc_secret_b32):
    reference = pyotp.HOTP(rfc_secret_b32)
    for counter in (0, 1, 99, 123456789):
        assert otp_core.hotp_at(rfc_secret, counter) == reference.at(counter)


# ---------------------------------------------------------------------------
# TOTP
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "timestamp, expected",
    [
        (59, "94287082"),
        (1111111109, "07081804"),
        (1111111111, "14050471"),
        (1234567890, "89005924"),
        (2000000000, "69279037"),
        (20000000000, "65353130"),
    ],
)
def test_totp_rfc6238_vectors(rfc_secret, timestamp, expected):
    assert otp_core.totp_at(rfc_secret, timestamp, digits=8) == expected


def test_totp_matches_pyotp(rfc_secret, rfc_secret_b32):
    reference = pyotp.TOTP(rfc_secret_b32)
    for timestamp in (31, 1111111111, 1700000000):
        assert otp_core.totp_at(rfc_secret, timestamp) == reference.at(timestamp)


def test_totp_uses_clock(rfc_secret):
    assert otp_core.totp(rfc_secret, clock=lambda: 59.9) == "287082"


def test_totp_same_window_same_code(rfc_secret):
    assert otp_core.totp_at(rfc_secret, 30) == otp_core.totp_at(rfc_secret, 59)
    assert otp_core.totp_at(rfc_secret, 59) != otp_core.totp_at(rfc_secret, 60)


def test_clock_before_epoch_is_reported(rfc_secret):
    with pytest.raises(ClockError):
        otp_core.current_timestamp(clock=lambda: -1.0)
    with pytest.raises(ClockError):
        otp_core.totp(rfc_secret, clock=lambda: -30.0)
    with pytest.raises(ClockError):
        otp_core.totp_at(rfc_secret, -1)


@pytest.mark.parametrize("timestamp, remaining", [(0, 30), (29, 1), (30, 30), (59, 1), (45, 15)])
def test_seconds_remaining(timestamp, remaining):
    assert otp_core.seconds_remaining(timestamp) == remaining
