"""Tests for the API registry."""

from __future__ import annotations

import pytest

from apimock.exceptions import UnsupportedApiError
from apimock.exit_codes import EXIT_INVALID_USAGE
from apimock.models import ApiName
from apimock.registry import API_SPECS, spec_url, supported_apis, validate_api

from conftest import SMS_URL


class TestRegistry:
    def test_every_api_has_a_source(self) -> None:
        assert set(API_SPECS) == set(ApiName)

    def test_supported_apis(self) -> None:
        assert supported_apis() == ["sms"]

    def test_sms_url(self) -> None:
        assert spec_url("sms") == SMS_URL
        assert spec_url(ApiName.SMS) == SMS_URL


class TestValidateApi:
    def test_accepts_string(self) -> None:
        assert validate_api("sms") is ApiName.SMS

    def test_accepts_enum(self) -> None:
        assert validate_api(ApiName.SMS) is ApiName.SMS

    @pytest.mark.parametrize("name", ["voice", "SMS", "", "sms "])
    def test_rejects_unknown(self, name: str) -> None:
        with pytest.raises(UnsupportedApiError) as exc_info:
            validate_api(name)
        assert exc_info.value.exit_code == EXIT_INVALID_USAGE
        assert "Choose from: sms" in str(exc_info.value)

    def test_spec_url_rejects_unknown(self) -> None:
        with pytest.raises(UnsupportedApiError, match="Unsupported API 'voice'"):
            spec_url("voice")
