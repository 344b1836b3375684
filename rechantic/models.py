from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .enums import (
    AsyncBatchStatus,
    AsyncBatchType,
    ChargeStatus,
    OrderStatus,
    PaymentMethodStatus,
    PaymentType,
    SubscriptionStatus,
)

E = TypeVar("E", bound=Enum)


def _lenient_enum(enum_cls: type[E], value: Any) -> E | None:
    """Resolves a status in either casing; unknown values become None instead of failing."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


class RechargeModel(BaseModel):
    """
    Base class for API records.

    Both dialects map into the same model: fields renamed between 2021-01 and
    2021-11 are declared with AliasChoices, and statuses accept either casing.
    Unknown keys are kept (see ``model_extra``) so nothing sent by the API is lost.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Customer(RechargeModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    hash: str | None = None

    # 2021-01: "shopify_customer_id": "123"; 2021-11: {"ecommerce": "123"}
    external_customer_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("external_customer_id", "shopify_customer_id"),
    )
    subscriptions_active_count: int | None = None
    subscriptions_total_count: int | None = None
    tax_exempt: bool | None = None
    has_valid_payment_method: bool | None = None
    has_payment_method_in_dunning: bool | None = None
    first_charge_processed_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Subscription(RechargeModel):
    customer_id: int | None = None
    address_id: int | None = None
    status: SubscriptionStatus | None = None
    product_title: str | None = None
    variant_title: str | None = None
    quantity: int | None = None
    price: Decimal | None = None
    order_interval_unit: str | None = None
    order_interval_frequency: int | None = None
    charge_interval_frequency: int | None = None
    next_charge_scheduled_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("next_charge_scheduled_at", "scheduled_at"),
    )
    external_product_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("external_product_id", "shopify_product_id"),
    )
    external_variant_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("external_variant_id", "shopify_variant_id"),
    )
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> SubscriptionStatus | None:
        return _lenient_enum(SubscriptionStatus, value)

    @property
    def is_active(self) -> bool:
        return self.status is SubscriptionStatus.ACTIVE


class Charge(RechargeModel):
    customer_id: int | None = None
    address_id: int | None = None
    status: ChargeStatus | None = None
    subtotal_price: Decimal | None = None
    total_price: Decimal | None = None
    scheduled_at: datetime | None = None
    processed_at: datetime | None = None
    error: Any = None
    error_type: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> ChargeStatus | None:
        return _lenient_enum(ChargeStatus, value)


class PaymentMethod(RechargeModel):
    """Only exists in the 2021-11 dialect."""

    customer_id: int | None = None
    default: bool = False
    payment_type: PaymentType | None = None
    processor_name: str | None = None
    processor_customer_token: str | None = None
    processor_payment_method_token: str | None = None
    status: PaymentMethodStatus | None = None
    status_reason: str | None = None
    payment_details: dict[str, Any] | None = None
    billing_address: dict[str, Any] | None = None

    @field_validator("payment_type", mode="before")
    @classmethod
    def _payment_type(cls, value: Any) -> PaymentType | None:
        return _lenient_enum(PaymentType, value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> PaymentMethodStatus | None:
        return _lenient_enum(PaymentMethodStatus, value)


class Address(RechargeModel):
    customer_id: int | None = None
    payment_method_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    province: str | None = None
    zip: str | None = None
    country: str | None = None
    country_code: str | None = None
    phone: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Order(RechargeModel):
    customer_id: int | None = None
    address_id: int | None = None
    charge_id: int | None = None
    order_number: int | str | None = None
    status: OrderStatus | None = None
    financial_status: str | None = None
    total_price: Decimal | None = None
    error: Any = None
    note: str | None = None
    tags: str | None = None
    # 2021-01: "shopify_order_id": "123"; 2021-11: {"ecommerce": "123"}
    external_order_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("external_order_id", "shopify_order_id"),
    )
    scheduled_at: datetime | None = None
    processed_at: datetime | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> OrderStatus | None:
        return _lenient_enum(OrderStatus, value)


class Product(RechargeModel):
    title: str | None = None
    handle: str | None = None
    external_product_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("external_product_id", "shopify_product_id"),
    )


class AsyncBatch(RechargeModel):
    batch_type: AsyncBatchType | None = None
    status: AsyncBatchStatus | None = None
    version: str | None = None
    total_task_count: int | None = None
    success_task_count: int | None = None
    fail_task_count: int | None = None
    submitted_at: datetime | None = None
    closed_at: datetime | None = None

    @field_validator("batch_type", mode="before")
    @classmethod
    def _batch_type(cls, value: Any) -> AsyncBatchType | None:
        return _lenient_enum(AsyncBatchType, value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> AsyncBatchStatus | None:
        return _lenient_enum(AsyncBatchStatus, value)


class AsyncBatchTask(RechargeModel):
    batch_id: int | None = None
    body: dict[str, Any] = Field(default_factory=dict)
    status: str | None = None
    result: dict[str, Any] | None = None
    queued_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def status_code(self) -> int | None:
        """HTTP status of the task's own request, once it has run."""
        if not self.result or self.result.get("status_code") is None:
            return None
        return int(self.result["status_code"])
