from collections.abc import Mapping
from enum import Enum
from typing import Any

from .config import ApiVersion


class CaseInsensitiveEnum(str, Enum):
    """
    String enum that also accepts its values in any casing.

    The 2021-01 dialect sends statuses in UPPERCASE, 2021-11 in lowercase;
    both resolve to the same member.
    """

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


class SubscriptionStatus(CaseInsensitiveEnum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    PAUSED = "paused"
    QUEUED = "queued"
    SKIPPED = "skipped"
    UNPAID = "unpaid"

    def is_active(self) -> bool:
        return self is SubscriptionStatus.ACTIVE

    def is_cancelled(self) -> bool:
        return self is SubscriptionStatus.CANCELLED


class ChargeStatus(CaseInsensitiveEnum):
    QUEUED = "queued"
    SUCCESS = "success"
    ERROR = "error"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"
    SKIPPED = "skipped"

    def is_success(self) -> bool:
        return self is ChargeStatus.SUCCESS

    def has_error(self) -> bool:
        return self is ChargeStatus.ERROR

    def is_refunded(self) -> bool:
        return self in (ChargeStatus.REFUNDED, ChargeStatus.PARTIALLY_REFUNDED)

    def is_pending(self) -> bool:
        return self is ChargeStatus.QUEUED


class PaymentMethodStatus(CaseInsensitiveEnum):
    VALID = "valid"
    INVALID = "invalid"
    UNVALIDATED = "unvalidated"
    EMPTY = "empty"


class PaymentType(CaseInsensitiveEnum):
    CREDIT_CARD = "CREDIT_CARD"
    PAYPAL = "PAYPAL"
    APPLE_PAY = "APPLE_PAY"
    GOOGLE_PAY = "GOOGLE_PAY"
    SEPA_DEBIT = "SEPA_DEBIT"

    def is_digital_wallet(self) -> bool:
        return self in (PaymentType.APPLE_PAY, PaymentType.GOOGLE_PAY)


class OrderStatus(CaseInsensitiveEnum):
    QUEUED = "queued"
    SUCCESS = "success"
    ERROR = "error"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"
    SKIPPED = "skipped"


class AsyncBatchStatus(CaseInsensitiveEnum):
    NOT_STARTED = "not_started"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        return self in (AsyncBatchStatus.COMPLETED, AsyncBatchStatus.FAILED)

    def is_processing(self) -> bool:
        return self is AsyncBatchStatus.PROCESSING

    def has_started(self) -> bool:
        return self is not AsyncBatchStatus.NOT_STARTED


class AsyncBatchType(str, Enum):
    """Bulk operations accepted by /async_batches. Availability depends on the API version."""

    DISCOUNT_CREATE = "discount_create"
    DISCOUNT_UPDATE = "discount_update"
    DISCOUNT_DELETE = "discount_delete"
    BULK_PLANS_CREATE = "bulk_plans_create"
    BULK_PLANS_UPDATE = "bulk_plans_update"
    BULK_PLANS_DELETE = "bulk_plans_delete"
    ONETIME_CREATE = "onetime_create"
    ONETIME_DELETE = "onetime_delete"
    BULK_SUBSCRIPTIONS_CREATE = "bulk_subscriptions_create"
    BULK_SUBSCRIPTIONS_UPDATE = "bulk_subscriptions_update"
    BULK_SUBSCRIPTIONS_DELETE = "bulk_subscriptions_delete"
    SUBSCRIPTION_CANCEL = "subscription_cancel"
    ADDRESS_DISCOUNT_APPLY = "address_discount_apply"
    ADDRESS_DISCOUNT_REMOVE = "address_discount_remove"
    PRODUCT_CREATE = "product_create"
    PRODUCT_UPDATE = "product_update"
    PRODUCT_DELETE = "product_delete"

    @classmethod
    def for_version(cls, version: ApiVersion) -> tuple["AsyncBatchType", ...]:
        shared = (
            cls.DISCOUNT_CREATE,
            cls.DISCOUNT_UPDATE,
            cls.DISCOUNT_DELETE,
            cls.ONETIME_CREATE,
            cls.ONETIME_DELETE,
        )
        if version is ApiVersion.V2021_01:
            return shared + (
                cls.BULK_SUBSCRIPTIONS_CREATE,
                cls.BULK_SUBSCRIPTIONS_UPDATE,
                cls.BULK_SUBSCRIPTIONS_DELETE,
                cls.SUBSCRIPTION_CANCEL,
                cls.ADDRESS_DISCOUNT_APPLY,
                cls.ADDRESS_DISCOUNT_REMOVE,
                cls.PRODUCT_CREATE,
                cls.PRODUCT_UPDATE,
                cls.PRODUCT_DELETE,
            )
        return shared + (cls.BULK_PLANS_CREATE, cls.BULK_PLANS_UPDATE, cls.BULK_PLANS_DELETE)

    def is_available_in(self, version: ApiVersion) -> bool:
        return self in self.for_version(version)


# --- SORT ORDERS ---


class CustomerSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class SubscriptionSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class ChargeSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"
    SCHEDULED_AT_ASC = "scheduled_at-asc"
    SCHEDULED_AT_DESC = "scheduled_at-desc"


class PaymentMethodSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class OrderSort(str, Enum):
    """Sorting orders is only supported by 2021-01."""

    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"


class ProductSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"
    UPDATED_AT_ASC = "updated_at-asc"
    UPDATED_AT_DESC = "updated_at-desc"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"


class AsyncBatchSort(str, Enum):
    ID_ASC = "id-asc"
    ID_DESC = "id-desc"
    CREATED_AT_ASC = "created_at-asc"
    CREATED_AT_DESC = "created_at-desc"


def validate_sort(params: Mapping[str, Any], sort_enum: type[Enum]) -> dict[str, Any]:
    """
    Normalizes the 'sort_by' query parameter against a sort enum.

    Enum members are converted to their string value; strings are checked
    against the allowed values.

    Args:
        params: Query parameters (not modified)
        sort_enum: The sort enum of the resource (e.g. ChargeSort)

    Returns:
        A copy of params with a validated 'sort_by'

    Raises:
        ValueError: If sort_by is not one of the enum's values
    """
    result = dict(params)
    sort_by = result.get("sort_by")
    if sort_by is None:
        return result

    if isinstance(sort_by, Enum):
        if not isinstance(sort_by, sort_enum):
            raise ValueError(
                f"sort_by must be a {sort_enum.__name__}, got {type(sort_by).__name__}"
            )
        result["sort_by"] = sort_by.value
        return result

    allowed = [member.value for member in sort_enum]
    if sort_by not in allowed:
        raise ValueError(
            f'Invalid sort_by value "{sort_by}". Allowed values: {", ".join(allowed)}'
        )
    return result
