"""Tests for key fetch transports."""

from unittest.mock import Mock, patch

import pytest
import requests

from warden.core.key_transport import KeyFetchTransport
from warden.exceptions import KeySourceUnavailableError
from warden.transports.http import HTTPKeyTransport, parse_max_age
from warden.transports.static import StaticKeyTransport

CERT_URL = "https://example.com/certs"


def _response(body=None, cache_control=None, status_error=None, json_error=None):
    response = Mock()
    response.headers = {"Cache-Control": cache_control} if cache_control else {}
    response.raise_for_status.side_effect = status_error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


# ==================== Cache-Control ====================


@pytest.mark.parametrize(
    "header,expected",
    [
        ("public, max-age=19302, must-revalidate, no-transform", 19302),
        ("max-age=0", 0),
        ("MAX-AGE = 60", 60),
        ("no-cache", None),
        ("s-maxage=100", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_max_age(header, expected):
    assert parse_max_age(header) == expected


# ==================== HTTPKeyTransport ====================


def test_http_transport_implements_interface():
    assert issubclass(HTTPKeyTransport, KeyFetchTransport)


def test_http_transport_fetch(certificate_pem):
    """Test a successful fetch returns keys and the max-age hint."""
    session = Mock()
    session.get.return_value = _response(
        {"key-1": certificate_pem}, cache_control="public, max-age=21600"
    )
    transport = HTTPKeyTransport(session=session, timeout=3.0)

    result = transport.fetch(CERT_URL)

    session.get.assert_called_once_with(CERT_URL, timeout=3.0)
    assert result.keys == {"key-1": certificate_pem}
    assert result.max_age == 21600


def test_http_transport_without_cache_control(certificate_pem):
    session = Mock()
    session.get.return_value = _response({"key-1": certificate_pem})

    assert HTTPKeyTransport(session=session).fetch(CERT_URL).max_age is None


def test_http_transport_uses_requests_by_default(certificate_pem):
    with patch("warden.transports.http.requests.get") as get:
        get.return_value = _response({"key-1": certificate_pem})
        result = HTTPKeyTransport().fetch(CERT_URL)

    get.assert_called_once_with(CERT_URL, timeout=10.0)
    assert "key-1" in result.keys


def test_http_transport_http_error():
    """Test HTTP errors surface as KeySourceUnavailableError."""
    session = Mock()
    session.get.return_value = _response(status_error=requests.HTTPError("503 Server Error"))

    with pytest.raises(KeySourceUnavailableError) as exc:
        HTTPKeyTransport(session=session).fetch(CERT_URL)
    assert "503" in str(exc.value)


def test_http_transport_timeout():
    session = Mock()
    session.get.side_effect = requests.Timeout("read timed out")

    with pytest.raises(KeySourceUnavailableError):
        HTTPKeyTransport(session=session).fetch(CERT_URL)


def test_http_transport_invalid_json():
    session = Mock()
    session.get.return_value = _response(json_error=ValueError("Expecting value"))

    with pytest.raises(KeySourceUnavailableError):
        HTTPKeyTransport(session=session).fetch(CERT_URL)


@pytest.mark.parametrize("body", [["key-1"], {"key-1": 42}, "certs"])
def test_http_transport_invalid_format(body):
    session = Mock()
    session.get.return_value = _response(body)

    with pytest.raises(KeySourceUnavailableError) as exc:
        HTTPKeyTransport(session=session).fetch(CERT_URL)
    assert "JSON object" in str(exc.value)


# ==================== StaticKeyTransport ====================


def test_static_transport_counts_fetches(certificate_pem):
    transport = StaticKeyTransport({"key-1": certificate_pem}, max_age=60)

    result = transport.fetch(CERT_URL)
    transport.fetch("https://elsewhere.example.com")

    assert result.keys == {"key-1": certificate_pem}
    assert result.max_age == 60
    assert transport.fetch_count == 2


def test_static_transport_returns_copies(certificate_pem):
    transport = StaticKeyTransport({"key-1": certificate_pem})
    transport.fetch(CERT_URL).keys.clear()
    assert transport.fetch(CERT_URL).keys == {"key-1": certificate_pem}


def test_static_transport_set_keys(certificate_pem, other_certificate_pem):
    transport = StaticKeyTransport({"key-1": certificate_pem})
    transport.set_keys({"key-2": other_certificate_pem}, max_age=10)

    result = transport.fetch(CERT_URL)
    assert list(result.keys) == ["key-2"]
    assert result.max_age == 10
