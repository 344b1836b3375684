import json
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import httpx


class RechargeError(Exception):
    """Base exception for all Rechantic errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(RechargeError):
    """Raised when client options are invalid (empty token, bad timeout, unknown version)."""

    def __init__(self, message: str, option: str | None = None) -> None:
        super().__init__(message)
        self.option = option


class UnsupportedVersionError(RechargeError):
    """Raised when an operation is not available in the requested API version."""

    def __init__(self, operation: str, required: list[str], current: str) -> None:
        super().__init__(
            f"{operation} is only available in API version(s): {', '.join(required)}. "
            f"Current version: {current}"
        )
        self.operation = operation
        self.required = required
        self.current = current


class WebhookSignatureError(RechargeError):
    """Raised when a webhook request carries no X-Recharge-Hmac-Sha256 signature."""


class RequestError(RechargeError):
    """
    Raised when the HTTP request fails at the transport level
    (connection refused, DNS failure, timeout, TLS error).
    """


class ApiError(RechargeError):
    """Raised when the API answers with an error status code."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code
        self.response_body = response_body or {}


class AuthenticationError(ApiError):
    """Raised on 401/403: missing, invalid or under-scoped access token."""


class NotFoundError(ApiError):
    """Raised on 404."""


class UnprocessableEntityError(ApiError):
    """Raised on 422: the request payload was rejected by the API."""


class RateLimitError(ApiError):
    """Raised on 429. ``retry_after`` carries the Retry-After header when present."""

    def __init__(
        self,
        message: str,
        status_code: int = 429,
        response_body: dict[str, Any] | None = None,
        retry_after: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, status_code, response_body, original_error)
        self.retry_after = retry_after


def _decode_error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_message(response: httpx.Response, body: dict[str, Any]) -> str:
    """Picks the API's 'error' or 'errors' value, falling back to the reason phrase."""
    for key in ("error", "errors"):
        if body.get(key) is not None:
            value = body[key]
            return value if isinstance(value, str) else json.dumps(value)
    return response.reason_phrase or f"HTTP {response.status_code}"


@contextmanager
def handle_http_errors(endpoint: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches httpx exceptions
    and raises the appropriate RechargeError subclass.

    Args:
        endpoint: Optional endpoint path for better error messages

    Usage:
        with handle_http_errors(endpoint="/subscriptions"):
            response = http.get(...)
            response.raise_for_status()
    """
    try:
        yield
    except httpx.HTTPStatusError as e:
        response = e.response
        status_code = response.status_code
        body = _decode_error_body(response)
        message = _error_message(response, body)

        if status_code in (401, 403):
            raise AuthenticationError(message, status_code, body, original_error=e) from e

        if status_code == 404:
            raise NotFoundError(message, status_code, body, original_error=e) from e

        if status_code == 422:
            raise UnprocessableEntityError(message, status_code, body, original_error=e) from e

        if status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                message,
                status_code,
                body,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                original_error=e,
            ) from e

        raise ApiError(message, status_code, body, original_error=e) from e
    except httpx.RequestError as e:
        raise RequestError(
            f"HTTP request to {endpoint or 'unknown'} failed: {e!s}", original_error=e
        ) from e
