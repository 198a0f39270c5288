"""Tests for portal.services.token_utils."""

import jwt as pyjwt

from portal.services.token_utils import (
    REFRESH_BUFFER_SECONDS,
    decode_token,
    is_token_expired,
    needs_refresh,
    token_subject,
)

KEY = "pledge-portal-test-signing-key-0123456789"
NOW = 1_800_000_000


def _token(**claims):
    return pyjwt.encode(claims, KEY, algorithm="HS256")


class TestDecode:
    def test_reads_claims_without_key(self):
        assert decode_token(_token(sub="u1", exp=NOW))["sub"] == "u1"

    def test_garbage_is_none(self):
        assert decode_token("not-a-jwt") is None
        assert decode_token(None) is None
        assert decode_token("") is None


class TestExpiry:
    def test_future_exp_is_live(self):
        assert is_token_expired(_token(exp=NOW + 60), now=NOW) is False

    def test_past_exp_is_expired(self):
        assert is_token_expired(_token(exp=NOW - 1), now=NOW) is True

    def test_undecodable_or_missing_exp_is_expired(self):
        assert is_token_expired("garbage", now=NOW) is True
        assert is_token_expired(_token(sub="u1"), now=NOW) is True

    def test_refresh_window(self):
        assert needs_refresh(_token(exp=NOW + REFRESH_BUFFER_SECONDS - 1), now=NOW) is True
        assert needs_refresh(_token(exp=NOW + REFRESH_BUFFER_SECONDS + 60), now=NOW) is False


class TestSubject:
    def test_subject(self):
        assert token_subject(_token(sub="abc")) == "abc"
        assert token_subject(_token(exp=NOW)) is None
