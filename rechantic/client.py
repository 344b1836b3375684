from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any, TypeVar

import httpx

from ._logging import logger
from .config import ApiVersion, ClientOptions
from .exceptions import ConfigurationError
from .http import Connector
from .pagination import Paginator
from .resources import (
    Addresses,
    AsyncBatches,
    AsyncBatchTasks,
    Charges,
    Customers,
    Orders,
    PaymentMethods,
    Products,
    Subscriptions,
)
from .versioning import VersionContext

T = TypeVar("T")


class RechargeClient:
    """
    Entry point of the library.

    Holds the configuration, the HTTP connector and the *active* API version,
    which is used by every call that does not name a version explicitly.

    Usage:
        client = RechargeClient("sk_test_...", api_version="2021-01")

        for subscription in client.subscriptions.list({"status": "active"}):
            print(subscription.id)

        # Payment methods only exist in 2021-11; the resource switches for you.
        methods = client.payment_methods.list({"customer_id": 42}).all()
    """

    def __init__(
        self,
        access_token: str | None = None,
        api_version: ApiVersion | str | None = None,
        *,
        options: ClientOptions | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if options is not None and access_token is not None:
            raise ConfigurationError(
                "Pass either access_token or options, not both", option="access_token"
            )

        if options is None:
            options = ClientOptions(
                access_token=access_token or "",
                api_version=ApiVersion.parse(api_version or ApiVersion.default()),
            )
        elif api_version is not None:
            options = options.with_api_version(api_version)

        self._options = options
        self.connector = Connector(options, transport=transport)

        self.customers = Customers(self)
        self.subscriptions = Subscriptions(self)
        self.charges = Charges(self)
        self.payment_methods = PaymentMethods(self)
        self.addresses = Addresses(self)
        self.orders = Orders(self)
        self.products = Products(self)
        self.async_batches = AsyncBatches(self)
        self.async_batch_tasks = AsyncBatchTasks(self)

    @classmethod
    def from_env(cls, transport: httpx.BaseTransport | None = None) -> "RechargeClient":
        """Builds a client from RECHARGE_* environment variables (see ClientOptions.from_env)."""
        return cls(options=ClientOptions.from_env(), transport=transport)

    @property
    def options(self) -> ClientOptions:
        return self._options

    # --- API VERSION ---

    @property
    def api_version(self) -> ApiVersion:
        return self._options.api_version

    @api_version.setter
    def api_version(self, value: ApiVersion | str) -> None:
        self._options = self._options.with_api_version(value)

    def set_api_version(self, value: ApiVersion | str) -> "RechargeClient":
        """Fluent variant of the api_version setter."""
        self.api_version = value
        return self

    def use_version(self, version: ApiVersion | str) -> VersionContext:
        """
        Switches to ``version`` until the returned context is restored.

        Usage:
            with client.use_version(ApiVersion.V2021_11):
                client.get("/payment_methods")
        """
        return VersionContext(self, version)

    # --- RAW REQUESTS ---

    def _version(self, api_version: ApiVersion | str | None) -> ApiVersion:
        return ApiVersion.parse(api_version) if api_version is not None else self.api_version

    def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        *,
        api_version: ApiVersion | str | None = None,
    ) -> dict[str, Any]:
        return self.connector.get(endpoint, params, api_version=self._version(api_version)).body

    def post(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        *,
        api_version: ApiVersion | str | None = None,
    ) -> dict[str, Any]:
        return self.connector.post(endpoint, data, api_version=self._version(api_version)).body

    def put(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        *,
        api_version: ApiVersion | str | None = None,
    ) -> dict[str, Any]:
        return self.connector.put(endpoint, data, api_version=self._version(api_version)).body

    def delete(
        self, endpoint: str, *, api_version: ApiVersion | str | None = None
    ) -> dict[str, Any]:
        return self.connector.delete(endpoint, api_version=self._version(api_version)).body

    def paginate(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        mapper: Callable[[dict[str, Any]], T] | None = None,
        items_key: str = "items",
        api_version: ApiVersion | str | None = None,
    ) -> Paginator[T]:
        """Builds a lazy Paginator over any list endpoint."""
        return Paginator(
            self,
            endpoint,
            params=params,
            mapper=mapper,
            items_key=items_key,
            api_version=api_version,
        )

    # --- LIFECYCLE ---

    def close(self) -> None:
        logger.debug("Closing client")
        self.connector.close()

    def __enter__(self) -> "RechargeClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
