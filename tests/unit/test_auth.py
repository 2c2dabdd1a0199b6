"""Tests for the API key gate and constant-time comparison."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from src.models import FailureReason
from src.proxy.auth import (
    INVALID_KEY_MESSAGE,
    MISSING_KEY_MESSAGE,
    extract_api_key,
    secure_compare,
    validate_api_key,
)

KEY = "s3cret-key"


class TestSecureCompare:
    @pytest.mark.parametrize(
        ("a", "b"),
        [("abc", "abc"), ("abc", "abd"), ("xbc", "abc"), ("", ""), ("ключ", "ключ")],
    )
    def test_equal_length_matches_literal_equality(self, a: str, b: str) -> None:
        assert secure_compare(a, b) is (a == b)

    def test_different_length_is_false(self) -> None:
        assert secure_compare("abc", "abcd") is False
        assert secure_compare("abcd", "abc") is False

    def test_different_length_skips_digest_comparison(self) -> None:
        with patch("src.proxy.auth.hmac.compare_digest") as mock_cmp:
            assert secure_compare("short", "much-longer") is False
            mock_cmp.assert_not_called()

    def test_equal_length_uses_compare_digest(self) -> None:
        with patch("src.proxy.auth.hmac.compare_digest", return_value=True) as mock_cmp:
            secure_compare("aaaa", "bbbb")
            mock_cmp.assert_called_once_with(b"aaaa", b"bbbb")


class TestExtractApiKey:
    def test_x_api_key_preferred(self) -> None:
        headers = {"X-API-Key": "primary", "Authorization": "Bearer secondary"}
        assert extract_api_key(headers) == "primary"

    def test_bearer_prefix_stripped(self) -> None:
        assert extract_api_key({"authorization": "Bearer abc"}) == "abc"

    def test_authorization_without_prefix_used_whole(self) -> None:
        assert extract_api_key({"authorization": "abc"}) == "abc"

    def test_no_headers(self) -> None:
        assert extract_api_key({}) == ""


class TestValidateApiKey:
    def test_no_configured_key_always_succeeds(self) -> None:
        assert validate_api_key({}, None).success is True
        assert validate_api_key({"X-API-Key": "anything"}, "").success is True

    def test_missing_key(self) -> None:
        result = validate_api_key({}, KEY)
        assert result.success is False
        assert result.reason == FailureReason.MISSING_KEY
        assert result.error == MISSING_KEY_MESSAGE

    @pytest.mark.parametrize(
        "headers",
        [{"X-API-Key": "wrong"}, {"Authorization": "Bearer wrong"}, {"X-API-Key": KEY + "x"}],
    )
    def test_wrong_key(self, headers: dict[str, str]) -> None:
        result = validate_api_key(headers, KEY)
        assert result.success is False
        assert result.reason == FailureReason.INVALID_KEY
        assert result.error == INVALID_KEY_MESSAGE

    @pytest.mark.parametrize(
        "headers", [{"X-API-Key": KEY}, {"Authorization": f"Bearer {KEY}"}],
    )
    def test_matching_key_either_header(self, headers: dict[str, str]) -> None:
        result = validate_api_key(headers, KEY)
        assert result.success is True
        assert result.error is None

    def test_error_does_not_echo_key(self) -> None:
        result = validate_api_key({"X-API-Key": "guess"}, KEY)
        assert KEY not in (result.error or "")
        assert "guess" not in (result.error or "")
