from .batch import BatchError, BatchProcessor, BatchResult
from .client import RechargeClient
from .config import ApiVersion, ClientOptions, CursorSource
from .cursor import Cursor
from .enums import (
    AsyncBatchSort,
    AsyncBatchStatus,
    AsyncBatchType,
    ChargeSort,
    ChargeStatus,
    CustomerSort,
    OrderSort,
    OrderStatus,
    PaymentMethodSort,
    PaymentMethodStatus,
    PaymentType,
    ProductSort,
    SubscriptionSort,
    SubscriptionStatus,
)
from .exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    RateLimitError,
    RechargeError,
    RequestError,
    UnprocessableEntityError,
    UnsupportedVersionError,
    WebhookSignatureError,
)
from .http import Connector, RateLimitInfo, Response
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
from .pagination import PageResult, Paginator
from .versioning import VersionContext
from .webhooks import SIGNATURE_HEADER, is_valid_signature, is_valid_webhook

__all__ = [
    "RechargeClient",
    "ClientOptions",
    "ApiVersion",
    "CursorSource",
    # Pagination
    "Cursor",
    "Paginator",
    "PageResult",
    # Version switching
    "VersionContext",
    # Transport
    "Connector",
    "Response",
    "RateLimitInfo",
    # Records
    "RechargeModel",
    "Customer",
    "Subscription",
    "Charge",
    "PaymentMethod",
    "Address",
    "Order",
    "Product",
    "AsyncBatch",
    "AsyncBatchTask",
    # Enums
    "SubscriptionStatus",
    "ChargeStatus",
    "PaymentMethodStatus",
    "PaymentType",
    "OrderStatus",
    "AsyncBatchStatus",
    "AsyncBatchType",
    "CustomerSort",
    "SubscriptionSort",
    "ChargeSort",
    "PaymentMethodSort",
    "OrderSort",
    "ProductSort",
    "AsyncBatchSort",
    # Webhooks
    "SIGNATURE_HEADER",
    "is_valid_signature",
    "is_valid_webhook",
    # Bulk processing
    "BatchProcessor",
    "BatchResult",
    "BatchError",
    # Exceptions
    "RechargeError",
    "ConfigurationError",
    "UnsupportedVersionError",
    "WebhookSignatureError",
    "RequestError",
    "ApiError",
    "AuthenticationError",
    "NotFoundError",
    "UnprocessableEntityError",
    "RateLimitError",
]
