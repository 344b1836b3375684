import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from ._logging import logger, redact_token
from .config import ApiVersion, ClientOptions
from .exceptions import handle_http_errors


def _int_header(headers: Mapping[str, str], name: str) -> int | None:
    value = _find_header(headers, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _find_header(headers: Mapping[str, str], name: str) -> str | None:
    # httpx.Headers is already case-insensitive, plain dicts are not
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


@dataclass(frozen=True)
class RateLimitInfo:
    """
    Rate limit metadata reported by the API on every response.

    Purely informational: the client never sleeps or retries on its own.
    """

    limit: int | None = None
    remaining: int | None = None
    reset: int | None = None
    retry_after: int | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitInfo":
        return cls(
            limit=_int_header(headers, "X-RateLimit-Limit"),
            remaining=_int_header(headers, "X-RateLimit-Remaining"),
            reset=_int_header(headers, "X-RateLimit-Reset"),
            retry_after=_int_header(headers, "Retry-After"),
        )

    def is_exhausted(self) -> bool:
        return self.remaining is not None and self.remaining <= 0

    def is_approaching_limit(self) -> bool:
        """True when less than 10% of the window is left."""
        if self.limit is None or self.remaining is None:
            return False
        return self.remaining <= int(self.limit * 0.1)

    def seconds_until_reset(self) -> int | None:
        if self.reset is None:
            return None
        return max(0, self.reset - int(time.time()))


@dataclass(frozen=True)
class Response:
    """
    A decoded API response: the JSON body plus the transport headers.
    Headers are kept because the 2021-01 dialect paginates through 'Link'.
    """

    body: dict[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int = 200

    def get_header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return _find_header(self.headers, name)

    @property
    def link(self) -> str | None:
        return self.get_header("Link")

    @property
    def rate_limit(self) -> RateLimitInfo:
        return RateLimitInfo.from_headers(self.headers)


class Connector:
    """
    Thin wrapper around httpx.Client that talks to the Recharge API.

    Every call takes the API version explicitly and sends it as the
    X-Recharge-Version header, so the connector itself holds no dialect state.
    Errors are translated into RechargeError subclasses by handle_http_errors.

    Architectural Note:
    -------------------
    The connector knows nothing about pagination. It returns the body and the
    headers, and the Paginator decides which of them carries the cursor.
    """

    def __init__(
        self,
        options: ClientOptions,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.options = options
        self._http = httpx.Client(
            base_url=options.base_url,
            timeout=options.timeout,
            transport=transport,
            headers={
                "X-Recharge-Access-Token": options.access_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        api_version: ApiVersion,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Response:
        """
        Sends one request and decodes the JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: Path relative to the base URL (e.g. "/subscriptions")
            api_version: Dialect to request, sent as X-Recharge-Version
            params: Query parameters
            json: Request body

        Returns:
            Response with the decoded body ({} for empty or non-object bodies)

        Raises:
            RequestError: On transport failures
            ApiError: (or a subclass) on 4xx/5xx responses
        """
        logger.debug(
            "Sending request",
            extra={
                "method": method,
                "endpoint": endpoint,
                "api_version": api_version.value,
                "params": sorted(params) if params else [],
                "token_hash": redact_token(self.options.access_token),
            },
        )

        with handle_http_errors(endpoint=endpoint):
            http_response = self._http.request(
                method,
                endpoint,
                params=dict(params) if params else None,
                json=dict(json) if json is not None else None,
                headers={"X-Recharge-Version": api_version.value},
            )
            http_response.raise_for_status()

        response = Response(
            body=self._decode(http_response),
            headers=http_response.headers,
            status_code=http_response.status_code,
        )

        rate_limit = response.rate_limit
        if rate_limit.is_approaching_limit():
            logger.warning(
                "Approaching API rate limit",
                extra={
                    "endpoint": endpoint,
                    "limit": rate_limit.limit,
                    "remaining": rate_limit.remaining,
                },
            )

        logger.debug(
            "Request complete",
            extra={"method": method, "endpoint": endpoint, "status_code": response.status_code},
        )
        return response

    def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        *,
        api_version: ApiVersion,
    ) -> Response:
        return self.request("GET", endpoint, api_version=api_version, params=params)

    def post(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        *,
        api_version: ApiVersion,
    ) -> Response:
        return self.request("POST", endpoint, api_version=api_version, json=data or {})

    def put(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        *,
        api_version: ApiVersion,
    ) -> Response:
        return self.request("PUT", endpoint, api_version=api_version, json=data or {})

    def delete(self, endpoint: str, *, api_version: ApiVersion) -> Response:
        return self.request("DELETE", endpoint, api_version=api_version)

    def close(self) -> None:
        self._http.close()

    @staticmethod
    def _decode(http_response: httpx.Response) -> dict[str, Any]:
        if not http_response.content:
            return {}
        try:
            body = http_response.json()
        except ValueError:
            logger.warning(
                "Response body is not valid JSON",
                extra={"status_code": http_response.status_code},
            )
            return {}
        return body if isinstance(body, dict) else {}
