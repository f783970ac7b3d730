"""Error Hierarchy — typed, categorized exceptions for every ordering failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business-rule rejections (400-level) leave the store untouched
    - StoreUnavailableError is the only retryable kind
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with StorefrontError base: FastAPI global handler catches all
    - ErrorContext as dataclass: carries ids for observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    customer_id: int | None = None
    product_id: int | None = None
    order_id: int | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    retryable = False

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "customer_id": self.context.customer_id,
                    "product_id": self.context.product_id,
                    "order_id": self.context.order_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Caller Errors (400-level) ──────────────────────────────────

class InvalidRequestError(StorefrontError):
    """Request failed structural validation; the store was never touched."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class CustomerNotFoundError(StorefrontError):
    """Order references a customer that does not exist."""
    def __init__(self, customer_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.customer_id = customer_id
        super().__init__(
            f"Customer '{customer_id}' not found",
            "CUSTOMER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.customer_id = customer_id


class ProductNotFoundError(StorefrontError):
    """A line or stock patch references a product that does not exist."""
    def __init__(self, product_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        super().__init__(
            f"Product '{product_id}' not found",
            "PRODUCT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.product_id = product_id


class InsufficientStockError(StorefrontError):
    """A line asks for more units than the product has at lock time."""
    def __init__(
        self,
        product_id: int,
        requested: int,
        available: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        super().__init__(
            f"Insufficient stock for product '{product_id}': "
            f"requested {requested}, available {available}",
            "INSUFFICIENT_STOCK", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreUnavailableReason(str, Enum):
    """Why the unit of work could not begin or commit."""
    CONNECTIVITY = "connectivity"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"
    INTEGRITY = "integrity"


class StoreUnavailableError(StorefrontError):
    """Store could not begin/commit the unit of work. Nothing was committed."""

    retryable = True

    def __init__(
        self,
        message: str,
        reason: StoreUnavailableReason = StoreUnavailableReason.CONNECTIVITY,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Store unavailable ({reason.value}): {message}",
            "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.reason = reason
