import os
from dataclasses import dataclass, replace
from enum import Enum

from .exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.rechargeapps.com"
DEFAULT_TIMEOUT = 30


class CursorSource(str, Enum):
    """Where a dialect carries its pagination tokens."""

    LINK_HEADER = "link_header"
    BODY = "body"


class ApiVersion(str, Enum):
    """
    The two API dialects served concurrently by Recharge.

    2021-01 paginates through the ``Link`` response header and uses uppercase
    statuses; 2021-11 paginates through ``next_cursor``/``previous_cursor``
    body fields and uses lowercase statuses.
    """

    V2021_01 = "2021-01"
    V2021_11 = "2021-11"

    @classmethod
    def default(cls) -> "ApiVersion":
        return cls.V2021_11

    @classmethod
    def parse(cls, value: "ApiVersion | str") -> "ApiVersion":
        """
        Accepts an ApiVersion or its string value.

        Raises:
            ConfigurationError: If the value is not a supported version
        """
        if isinstance(value, ApiVersion):
            return value
        try:
            return cls(value)
        except ValueError:
            supported = ", ".join(v.value for v in cls)
            raise ConfigurationError(
                f"Unsupported API version: {value}. Supported versions: {supported}",
                option="api_version",
            ) from None

    @property
    def cursor_source(self) -> CursorSource:
        if self is ApiVersion.V2021_01:
            return CursorSource.LINK_HEADER
        return CursorSource.BODY

    @property
    def cursor_param(self) -> str:
        """Query parameter carrying the page token. Both dialects call it 'cursor'."""
        return "cursor"


@dataclass(frozen=True)
class ClientOptions:
    """
    Immutable client configuration.

    Attributes:
        access_token: Recharge API access token (sent as X-Recharge-Access-Token)
        api_version: Default dialect for requests made by the client
        base_url: API root
        timeout: Request timeout in seconds
    """

    access_token: str
    api_version: ApiVersion = ApiVersion.V2021_11
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.access_token:
            raise ConfigurationError("API access token cannot be empty", option="access_token")
        if self.timeout < 1:
            raise ConfigurationError("Timeout must be at least 1 second", option="timeout")
        # Normalise string versions passed by callers
        object.__setattr__(self, "api_version", ApiVersion.parse(self.api_version))

    def with_api_version(self, api_version: ApiVersion | str) -> "ClientOptions":
        """Returns a copy of these options using a different API version."""
        return replace(self, api_version=ApiVersion.parse(api_version))

    @classmethod
    def from_env(cls) -> "ClientOptions":
        """
        Builds options from RECHARGE_ACCESS_TOKEN, RECHARGE_API_VERSION,
        RECHARGE_BASE_URL and RECHARGE_TIMEOUT.
        """
        timeout = os.getenv("RECHARGE_TIMEOUT")
        try:
            parsed_timeout = float(timeout) if timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigurationError(
                f"RECHARGE_TIMEOUT must be a number, got {timeout!r}", option="timeout"
            ) from None

        return cls(
            access_token=os.getenv("RECHARGE_ACCESS_TOKEN", ""),
            api_version=ApiVersion.parse(
                os.getenv("RECHARGE_API_VERSION", ApiVersion.default().value)
            ),
            base_url=os.getenv("RECHARGE_BASE_URL", DEFAULT_BASE_URL),
            timeout=parsed_timeout,
        )
