"""Tests for signing certificate URL policy."""

import pytest

from voicegate.skill.api_models import ErrorCode
from voicegate.skill.cert import validate_cert_url
from voicegate.skill.exceptions import AuthenticationError


class TestAcceptedUrls:
    """URLs on the published host and path are accepted."""

    @pytest.mark.parametrize("url", [
        "https://s3.amazonaws.com/echo.api/echo-api-cert.pem",
        "HTTPS://s3.amazonaws.com/echo.api/echo-api-cert.pem",
        "https://S3.AMAZONAWS.COM/echo.api/echo-api-cert.pem",
        "https://s3.amazonaws.com:443/echo.api/echo-api-cert.pem",
        "https://s3.amazonaws.com/echo.api/../echo.api/echo-api-cert.pem",
    ])
    def test_valid(self, url, config):
        assert validate_cert_url(url, config) == url


class TestRejectedUrls:
    """Anything else is UNTRUSTED_SOURCE."""

    @pytest.mark.parametrize("url", [
        "http://s3.amazonaws.com/echo.api/echo-api-cert.pem",
        "https://notamazon.com/echo.api/echo-api-cert.pem",
        "https://s3.amazonaws.com.evil.example/echo.api/echo-api-cert.pem",
        "https://s3.amazonaws.com/EcHo.aPi/echo-api-cert.pem",
        "https://s3.amazonaws.com/invalid.path/echo-api-cert.pem",
        "https://s3.amazonaws.com:563/echo.api/echo-api-cert.pem",
        "https://s3.amazonaws.com/echo.api/../invalid.path/echo-api-cert.pem",
        "https://s3.amazonaws.com/echo.api/",
        "ftp://s3.amazonaws.com/echo.api/echo-api-cert.pem",
    ])
    def test_invalid(self, url, config):
        with pytest.raises(AuthenticationError) as exc:
            validate_cert_url(url, config)
        assert exc.value.code == ErrorCode.UNTRUSTED_SOURCE

    def test_missing(self, config):
        with pytest.raises(AuthenticationError) as exc:
            validate_cert_url("", config)
        assert exc.value.code == ErrorCode.UNTRUSTED_SOURCE

    def test_unparseable_port(self, config):
        with pytest.raises(AuthenticationError) as exc:
            validate_cert_url("https://s3.amazonaws.com:notaport/echo.api/cert.pem", config)
        assert exc.value.code == ErrorCode.UNTRUSTED_SOURCE
