"""
Unit tests for custom exception handling in Rechantic.

These tests verify that the exception hierarchy works correctly and that
the handle_http_errors context manager properly translates httpx
exceptions into RechargeError subclasses.
"""

import json

import httpx
import pytest

from rechantic.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    RateLimitError,
    RechargeError,
    RequestError,
    UnprocessableEntityError,
    UnsupportedVersionError,
    handle_http_errors,
)

URL = "https://api.rechargeapps.com/subscriptions"


def status_error(status_code, body=None, headers=None, content=None):
    """Builds the httpx.HTTPStatusError raised by raise_for_status()."""
    request = httpx.Request("GET", URL)
    if content is None:
        content = json.dumps(body).encode("utf-8") if body is not None else b""
    response = httpx.Response(
        status_code, content=content, headers=headers or {}, request=request
    )
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Test the exception class hierarchy and instantiation."""

    def test_recharge_error_base_class(self):
        error = RechargeError("Test message")
        assert isinstance(error, Exception)
        assert error.message == "Test message"
        assert error.original_error is None

    def test_recharge_error_with_original_error(self):
        original = ValueError("Original error")
        error = RechargeError("Wrapped message", original_error=original)
        assert error.original_error is original

    def test_configuration_error(self):
        error = ConfigurationError("bad timeout", option="timeout")
        assert isinstance(error, RechargeError)
        assert error.option == "timeout"

    def test_unsupported_version_error(self):
        error = UnsupportedVersionError("Customers.delivery_schedule()", ["2021-11"], "2021-01")
        assert isinstance(error, RechargeError)
        assert error.required == ["2021-11"]
        assert error.current == "2021-01"
        assert "2021-11" in str(error)
        assert "Current version: 2021-01" in str(error)

    @pytest.mark.parametrize(
        "error_cls", [AuthenticationError, NotFoundError, UnprocessableEntityError, RateLimitError]
    )
    def test_api_error_subclasses(self, error_cls):
        assert issubclass(error_cls, ApiError)
        assert issubclass(error_cls, RechargeError)

    def test_api_error_defaults_body(self):
        error = ApiError("Server error", 500)
        assert error.status_code == 500
        assert error.response_body == {}

    def test_request_error_is_not_an_api_error(self):
        assert not issubclass(RequestError, ApiError)


@pytest.mark.unit
class TestHandleHttpErrors:
    """Test the handle_http_errors context manager."""

    def test_no_error_passes_through(self):
        with handle_http_errors(endpoint="/subscriptions"):
            result = "success"
        assert result == "success"

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_authentication_errors(self, status_code):
        with pytest.raises(AuthenticationError) as exc_info:
            with handle_http_errors(endpoint="/subscriptions"):
                raise status_error(status_code, {"errors": "Invalid token"})

        assert exc_info.value.status_code == status_code
        assert exc_info.value.message == "Invalid token"

    def test_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            with handle_http_errors():
                raise status_error(404, {"error": "Not Found"})

        assert exc_info.value.response_body == {"error": "Not Found"}
        assert isinstance(exc_info.value.original_error, httpx.HTTPStatusError)

    def test_unprocessable_entity_serialises_structured_errors(self):
        errors = {"email": ["is invalid"]}

        with pytest.raises(UnprocessableEntityError) as exc_info:
            with handle_http_errors():
                raise status_error(422, {"errors": errors})

        assert json.loads(exc_info.value.message) == errors

    def test_rate_limit_with_retry_after(self):
        with pytest.raises(RateLimitError) as exc_info:
            with handle_http_errors():
                raise status_error(429, {"error": "Too many"}, headers={"Retry-After": "2"})

        assert exc_info.value.retry_after == 2

    def test_rate_limit_with_unparsable_retry_after(self):
        with pytest.raises(RateLimitError) as exc_info:
            with handle_http_errors():
                raise status_error(429, {}, headers={"Retry-After": "soon"})

        assert exc_info.value.retry_after is None

    def test_other_status_is_generic_api_error(self):
        with pytest.raises(ApiError) as exc_info:
            with handle_http_errors():
                raise status_error(502, content=b"<html>Bad Gateway</html>")

        assert type(exc_info.value) is ApiError
        assert exc_info.value.status_code == 502
        assert exc_info.value.response_body == {}
        assert exc_info.value.message == "Bad Gateway"

    def test_transport_error_becomes_request_error(self):
        original = httpx.ConnectError("Connection refused", request=httpx.Request("GET", URL))

        with pytest.raises(RequestError) as exc_info:
            with handle_http_errors(endpoint="/subscriptions"):
                raise original

        assert "/subscriptions" in str(exc_info.value)
        assert exc_info.value.original_error is original

    def test_unrelated_exceptions_pass_through(self):
        with pytest.raises(KeyError):
            with handle_http_errors():
                raise KeyError("not an HTTP error")
