from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from ._logging import logger
from .config import ApiVersion
from .enums import (
    AsyncBatchSort,
    AsyncBatchType,
    ChargeSort,
    CustomerSort,
    OrderSort,
    PaymentMethodSort,
    ProductSort,
    SubscriptionSort,
    validate_sort,
)
from .exceptions import UnsupportedVersionError
from .models import (
    Address,
    AsyncBatch,
    AsyncBatchTask,
    Charge,
    Customer,
    Order,
    PaymentMethod,
    Product,
    RechargeModel,
    Subscription,
)
from .pagination import Paginator

if TYPE_CHECKING:
    from .client import RechargeClient

M = TypeVar("M", bound=RechargeModel)


class Resource(Generic[M]):
    """
    Base class for API resources.

    Subclasses only declare where the resource lives and which model it maps to;
    the CRUD plumbing is shared.
    """

    endpoint: ClassVar[str]
    items_key: ClassVar[str]
    item_key: ClassVar[str]
    model: type[M]
    sort_enum: ClassVar[type[Enum] | None] = None

    # operation name -> versions in which it exists
    version_requirements: ClassVar[dict[str, tuple[ApiVersion, ...]]] = {}

    def __init__(self, client: "RechargeClient") -> None:
        self._client = client

    def _path(self, *parts: Any) -> str:
        if not parts:
            return self.endpoint
        return "/".join([self.endpoint.rstrip("/"), *(str(part).strip("/") for part in parts)])

    def _query(
        self, params: Mapping[str, Any] | None, defaults: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Merges defaults with params, dropping None values and unwrapping enums."""
        query: dict[str, Any] = dict(defaults or {})
        for key, value in (params or {}).items():
            if value is None:
                continue
            query[key] = value

        if self.sort_enum is not None:
            query = validate_sort(query, self.sort_enum)

        return {
            key: value.value if isinstance(value, Enum) else value for key, value in query.items()
        }

    def _require_version(self, operation: str) -> None:
        """
        Raises:
            UnsupportedVersionError: If the client's active version cannot serve the operation
        """
        required = self.version_requirements.get(operation)
        if not required:
            return
        current = self._client.api_version
        if current not in required:
            raise UnsupportedVersionError(
                f"{type(self).__name__}.{operation}()",
                [version.value for version in required],
                current.value,
            )

    def _map_one(self, body: dict[str, Any]) -> M:
        return self.model.model_validate(body.get(self.item_key) or {})

    # --- CRUD ---

    def list(self, params: Mapping[str, Any] | None = None, **filters: Any) -> Paginator[M]:
        """
        Lists records lazily. Filters can be passed as a dict and/or keyword arguments.

        Raises:
            ValueError: If sort_by is not valid for this resource
        """
        query = self._query({**(params or {}), **filters})
        return self._client.paginate(
            self.endpoint, query, mapper=self.model.model_validate, items_key=self.items_key
        )

    def get(self, resource_id: int | str) -> M:
        return self._map_one(self._client.get(self._path(resource_id)))

    def create(self, data: Mapping[str, Any]) -> M:
        logger.info("Creating record", extra={"endpoint": self.endpoint})
        return self._map_one(self._client.post(self.endpoint, data))

    def update(self, resource_id: int | str, data: Mapping[str, Any]) -> M:
        logger.info("Updating record", extra={"endpoint": self.endpoint})
        return self._map_one(self._client.put(self._path(resource_id), data))

    def delete(self, resource_id: int | str) -> None:
        logger.info("Deleting record", extra={"endpoint": self.endpoint})
        self._client.delete(self._path(resource_id))


class Customers(Resource[Customer]):
    endpoint = "/customers"
    items_key = "customers"
    item_key = "customer"
    model = Customer
    sort_enum = CustomerSort
    version_requirements = {
        "delivery_schedule": (ApiVersion.V2021_11,),
        "credit_summary": (ApiVersion.V2021_11,),
    }

    def delivery_schedule(self, customer_id: int | str) -> list[dict[str, Any]]:
        """
        Upcoming deliveries of a customer. Only served by 2021-11.

        Raises:
            UnsupportedVersionError: If the client is on 2021-01
        """
        self._require_version("delivery_schedule")
        body = self._client.get(self._path(customer_id, "delivery_schedule"))
        deliveries = body.get("delivery_schedule")
        return deliveries if isinstance(deliveries, list) else []

    def credit_summary(self, customer_id: int | str) -> dict[str, Any]:
        """
        Credit balance of a customer. Only served by 2021-11.

        Raises:
            UnsupportedVersionError: If the client is on 2021-01
        """
        self._require_version("credit_summary")
        body = self._client.get(self._path(customer_id, "credit_summary"))
        summary = body.get("credit_summary")
        return summary if isinstance(summary, dict) else {}


class Subscriptions(Resource[Subscription]):
    endpoint = "/subscriptions"
    items_key = "subscriptions"
    item_key = "subscription"
    model = Subscription
    sort_enum = SubscriptionSort

    def cancel(
        self, subscription_id: int | str, reason: str | None = None, **data: Any
    ) -> Subscription:
        payload = {"cancellation_reason": reason, **data} if reason else data
        body = self._client.post(self._path(subscription_id, "cancel"), payload)
        return self._map_one(body)

    def activate(self, subscription_id: int | str) -> Subscription:
        return self._map_one(self._client.post(self._path(subscription_id, "activate")))


class Charges(Resource[Charge]):
    endpoint = "/charges"
    items_key = "charges"
    item_key = "charge"
    model = Charge
    sort_enum = ChargeSort

    def _line_payload(self, ids: list[int]) -> dict[str, Any]:
        # 2021-11 renamed subscriptions on a charge to "purchase items"
        if self._client.api_version is ApiVersion.V2021_01:
            return {"subscription_ids": ids}
        return {"purchase_item_ids": ids}

    def skip(self, charge_id: int | str, subscription_ids: list[int]) -> Charge:
        body = self._client.post(self._path(charge_id, "skip"), self._line_payload(subscription_ids))
        return self._map_one(body)

    def unskip(self, charge_id: int | str, subscription_ids: list[int]) -> Charge:
        body = self._client.post(
            self._path(charge_id, "unskip"), self._line_payload(subscription_ids)
        )
        return self._map_one(body)


class PaymentMethods(Resource[PaymentMethod]):
    """
    Payment methods only exist in API version 2021-11.

    Every operation switches the client to 2021-11 for its own duration and
    restores the caller's version afterwards, whether it succeeded or raised.
    """

    endpoint = "/payment_methods"
    items_key = "payment_methods"
    item_key = "payment_method"
    model = PaymentMethod
    sort_enum = PaymentMethodSort

    REQUIRED_VERSION = ApiVersion.V2021_11

    def list(
        self, params: Mapping[str, Any] | None = None, **filters: Any
    ) -> Paginator[PaymentMethod]:
        # The Paginator captures 2021-11 while the guard is active, so it can be
        # drained after the guard has restored the caller's version.
        with self._client.use_version(self.REQUIRED_VERSION):
            return super().list(params, **filters)

    def get(self, resource_id: int | str) -> PaymentMethod:
        with self._client.use_version(self.REQUIRED_VERSION):
            return super().get(resource_id)

    def create(self, data: Mapping[str, Any]) -> PaymentMethod:
        with self._client.use_version(self.REQUIRED_VERSION):
            return super().create(data)

    def update(self, resource_id: int | str, data: Mapping[str, Any]) -> PaymentMethod:
        with self._client.use_version(self.REQUIRED_VERSION):
            return super().update(resource_id, data)

    def delete(self, resource_id: int | str) -> None:
        with self._client.use_version(self.REQUIRED_VERSION):
            super().delete(resource_id)


class Addresses(Resource[Address]):
    endpoint = "/addresses"
    items_key = "addresses"
    item_key = "address"
    model = Address


class Products(Resource[Product]):
    endpoint = "/products"
    items_key = "products"
    item_key = "product"
    model = Product
    sort_enum = ProductSort


class Orders(Resource[Order]):
    """
    Orders are created by charges, not through the API.

    Sorting is only supported by 2021-01: a list() with ``sort_by`` is built
    under that version, whatever the client's active version is.
    """

    endpoint = "/orders"
    items_key = "orders"
    item_key = "order"
    model = Order
    sort_enum = OrderSort

    SORT_VERSION = ApiVersion.V2021_01

    def list(self, params: Mapping[str, Any] | None = None, **filters: Any) -> Paginator[Order]:
        merged = {**(params or {}), **filters}
        if merged.get("sort_by") is None:
            return super().list(merged)
        with self._client.use_version(self.SORT_VERSION):
            return super().list(merged)

    def clone(self, order_id: int | str, data: Mapping[str, Any] | None = None) -> Order:
        return self._map_one(self._client.post(self._path(order_id, "clone"), data))

    def delay(self, order_id: int | str, data: Mapping[str, Any]) -> Order:
        return self._map_one(self._client.post(self._path(order_id, "delay"), data))


class AsyncBatches(Resource[AsyncBatch]):
    """
    Bulk operations: create a batch, add tasks (see AsyncBatchTasks), then process it.

    Usage:
        batch = client.async_batches.create(AsyncBatchType.DISCOUNT_CREATE)
        client.async_batch_tasks.add(batch.id, [{"body": {...}}, ...])
        client.async_batches.process(batch.id)
    """

    endpoint = "/async_batches"
    items_key = "async_batches"
    item_key = "async_batch"
    model = AsyncBatch
    sort_enum = AsyncBatchSort

    def create(self, batch_type: AsyncBatchType | str) -> AsyncBatch:  # type: ignore[override]
        """
        Raises:
            ValueError: If batch_type is not a known batch type
            UnsupportedVersionError: If the batch type does not exist in the active version
        """
        batch_type = AsyncBatchType(batch_type)
        current = self._client.api_version
        if not batch_type.is_available_in(current):
            raise UnsupportedVersionError(
                f'Batch type "{batch_type.value}"',
                [version.value for version in ApiVersion if batch_type.is_available_in(version)],
                current.value,
            )
        return super().create({"batch_type": batch_type.value})

    def process(self, batch_id: int | str) -> AsyncBatch:
        logger.info("Processing async batch", extra={"batch_id": batch_id})
        return self._map_one(self._client.post(self._path(batch_id, "process")))


class AsyncBatchTasks:
    """
    Tasks of an async batch. They only exist under their batch
    (/async_batches/<id>/tasks) and cannot be fetched or changed one by one.
    """

    items_key = "async_batch_tasks"
    model = AsyncBatchTask

    MAX_TASKS_PER_REQUEST = 1000

    def __init__(self, client: "RechargeClient") -> None:
        self._client = client

    def _path(self, batch_id: int | str) -> str:
        return f"{AsyncBatches.endpoint}/{batch_id}/tasks"

    def list(
        self, batch_id: int | str, params: Mapping[str, Any] | None = None, **filters: Any
    ) -> Paginator[AsyncBatchTask]:
        """Lists the tasks of a batch. ``ids`` may be given as a list."""
        query = {
            key: value for key, value in {**(params or {}), **filters}.items() if value is not None
        }
        ids = query.get("ids")
        if isinstance(ids, (list, tuple, set)):
            query["ids"] = ",".join(str(task_id) for task_id in ids)
        return self._client.paginate(
            self._path(batch_id), query, mapper=self.model.model_validate, items_key=self.items_key
        )

    def add(self, batch_id: int | str, tasks: list[dict[str, Any]]) -> list[AsyncBatchTask]:
        """
        Adds up to 1000 tasks to a batch. Each task is ``{"body": {...}}``.

        Raises:
            ValueError: If no task, or more than 1000 tasks, are given
        """
        if not tasks:
            raise ValueError("At least one task must be provided")
        if len(tasks) > self.MAX_TASKS_PER_REQUEST:
            raise ValueError(
                f"Maximum {self.MAX_TASKS_PER_REQUEST} tasks per request, {len(tasks)} provided"
            )

        logger.info("Adding async batch tasks", extra={"batch_id": batch_id, "tasks": len(tasks)})
        body = self._client.post(self._path(batch_id), {"tasks": tasks})
        raw_tasks = body.get(self.items_key)
        if not isinstance(raw_tasks, list):
            return []
        return [self.model.model_validate(raw) for raw in raw_tasks if isinstance(raw, dict)]
