"""
Unit tests for the shared/ utility modules.

Covers:
- shared.datetime_utils  (parse_duration, utcnow, ensure_utc)
- shared.generators      (generate_otp_code, generate_secure_token,
                          generate_temp_token)
- shared.crypto          (hash_password, verify_password, hash_code)
- shared.logging         (redact_sensitive_fields, log_with_context)
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from shared.crypto import hash_code, hash_password, verify_password
from shared.datetime_utils import ensure_utc, parse_duration, utcnow
from shared.generators import (
    generate_otp_code,
    generate_secure_token,
    generate_temp_token,
)
from shared.logging import log_with_context, redact_sensitive_fields


# ── datetime_utils ────────────────────────────────────────────────────────────


class TestParseDuration:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("15m", 900),
            ("7d", 604800),
            ("2h", 7200),
            ("45s", 45),
            ("3600", 3600),
            (" 10M ", 600),
            (120, 120),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "m", "1.5h", "10 years", "1w", -1])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestDatetimeHelpers:
    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo is not None
        assert utcnow().utcoffset() == timedelta(0)

    def test_ensure_utc_none(self):
        assert ensure_utc(None) is None

    def test_ensure_utc_naive_assumed_utc(self):
        naive = datetime(2025, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_offset(self):
        plus_two = timezone(timedelta(hours=2))
        value = ensure_utc(datetime(2025, 1, 1, 14, 0, tzinfo=plus_two))
        assert value.hour == 12
        assert value.tzinfo == timezone.utc


# ── generators ────────────────────────────────────────────────────────────────


class TestGenerateOtpCode:
    def test_six_digits(self):
        for _ in range(200):
            code = generate_otp_code()
            assert len(code) == 6
            assert code.isdigit()

    def test_custom_length(self):
        assert len(generate_otp_code(8)) == 8

    def test_leading_zero_possible(self, mocker):
        mocker.patch("shared.generators.secrets.choice", return_value="0")
        assert generate_otp_code() == "000000"

    def test_not_constant(self):
        assert len({generate_otp_code() for _ in range(50)}) > 1


class TestTokens:
    def test_secure_token_unique(self):
        assert generate_secure_token() != generate_secure_token()

    def test_temp_token_prefix(self):
        token = generate_temp_token()
        assert token.startswith("temp_")
        assert len(token) > len("temp_") + 20


# ── crypto ────────────────────────────────────────────────────────────────────


class TestPasswordHashing:
    def test_round_trip(self):
        h = hash_password("s3cret!")
        assert h != "s3cret!"
        assert h.startswith("$argon2")
        assert verify_password("s3cret!", h) is True

    def test_wrong_password(self):
        assert verify_password("wrong", hash_password("right")) is False

    def test_garbage_hash(self):
        assert verify_password("anything", "not-a-hash") is False

    def test_salted(self):
        assert hash_password("same") != hash_password("same")


def test_hash_code_is_sha256_hex():
    assert hash_code("012345") == hashlib.sha256(b"012345").hexdigest()
    assert hash_code("012345") != hash_code("012346")


# ── logging ───────────────────────────────────────────────────────────────────


class TestRedaction:
    @pytest.mark.parametrize(
        "key",
        ["password", "code", "otp", "refresh_token", "access_token", "new_password", "jwt_secret"],
    )
    def test_sensitive_keys_redacted(self, key):
        out = redact_sensitive_fields(None, "info", {"event": "x", key: "value"})
        assert out[key] == "***REDACTED***"

    def test_plain_keys_kept(self):
        out = redact_sensitive_fields(
            None, "info", {"event": "login_failed", "user_id": "u1", "reason": "invalid_password"}
        )
        assert out == {"event": "login_failed", "user_id": "u1", "reason": "invalid_password"}

    def test_event_name_never_redacted(self):
        out = redact_sensitive_fields(None, "info", {"event": "access_token_rejected"})
        assert out["event"] == "access_token_rejected"


def test_log_with_context_binds():
    logger = MagicMock()
    log_with_context(logger, user_id="u1")
    logger.bind.assert_called_once_with(user_id="u1")
