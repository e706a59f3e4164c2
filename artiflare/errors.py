"""
Errors — closed set of failure kinds.

Gateways, the inventory ledger, the order orchestrator and checkout return these
as ``Error(...)`` values instead of raising, so callers can match exhaustively:

    match await placer.place(draft):
        case Ok(order_id):
            ...
        case Error(InsufficientInventory(product_id=pid, available=n)):
            ...
        case Error(ProductNotFound(product_id=pid)):
            ...
        case Error(TransactionAborted() | Unknown()):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Kinds
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """Discriminator shared by every error value."""

    VALIDATION = auto()
    NOT_FOUND = auto()
    PRODUCT_NOT_FOUND = auto()
    INSUFFICIENT_INVENTORY = auto()
    TRANSACTION_ABORTED = auto()
    NOTIFICATION_FAILURE = auto()
    CHECKOUT_REJECTED = auto()
    UNKNOWN = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class FieldIssue:
    """One violated constraint. ``field`` is a dotted path, e.g. ``items.0.price``."""

    field: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Input failed schema constraints. Never reaches the store."""

    issues: tuple[FieldIssue, ...] = field(default_factory=tuple)

    kind = ErrorKind.VALIDATION

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(issue.field for issue in self.issues)

    def __str__(self) -> str:
        details = ", ".join(f"{i.field}: {i.message}" for i in self.issues)
        return f"Validation failed: {details}"


# ═══════════════════════════════════════════════════════════════════════════════
# Lookup
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class NotFound:
    """A referenced document does not exist."""

    collection: str
    id: str

    kind = ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        return f"{self.collection}:{self.id} not found"


# ═══════════════════════════════════════════════════════════════════════════════
# Order placement
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductNotFound:
    """A cart line references a product that no longer exists."""

    product_id: str

    kind = ErrorKind.PRODUCT_NOT_FOUND

    def __str__(self) -> str:
        return f"Product {self.product_id} not found"


@dataclass(frozen=True, slots=True)
class InsufficientInventory:
    """Requested quantity exceeds current stock. Business-rule failure, never retried."""

    product_id: str
    available: int
    requested: int
    product_name: str | None = None

    kind = ErrorKind.INSUFFICIENT_INVENTORY

    def __str__(self) -> str:
        name = self.product_name or self.product_id
        return (
            f"Not enough inventory for product {name}. "
            f"Available: {self.available}, Requested: {self.requested}"
        )


@dataclass(frozen=True, slots=True)
class TransactionAborted:
    """Store aborted the transaction (write conflict, contention). Transient."""

    reason: str = "transaction aborted"
    attempts: int = 1

    kind = ErrorKind.TRANSACTION_ABORTED

    def __str__(self) -> str:
        return f"Transaction aborted after {self.attempts} attempt(s): {self.reason}"


@dataclass(frozen=True, slots=True)
class Unknown:
    """Anything not covered above."""

    message: str

    kind = ErrorKind.UNKNOWN

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class NotificationFailure:
    """Best-effort order email failed. Always downgraded to a warning."""

    message: str
    status: int | None = None

    kind = ErrorKind.NOTIFICATION_FAILURE

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"


@dataclass(frozen=True, slots=True)
class CheckoutRejected:
    """Checkout precondition failed (no user, empty cart, no address, busy)."""

    reason: str

    kind = ErrorKind.CHECKOUT_REJECTED

    def __str__(self) -> str:
        return self.reason


# ═══════════════════════════════════════════════════════════════════════════════
# Unions
# ═══════════════════════════════════════════════════════════════════════════════

type GatewayError = ValidationError | NotFound | TransactionAborted
type LedgerError = ValidationError | ProductNotFound | InsufficientInventory | TransactionAborted
type OrderError = (
    ValidationError | ProductNotFound | InsufficientInventory | TransactionAborted | Unknown
)
type CheckoutError = CheckoutRejected | ValidationError | OrderError
type AppError = (
    ValidationError
    | NotFound
    | ProductNotFound
    | InsufficientInventory
    | TransactionAborted
    | NotificationFailure
    | CheckoutRejected
    | Unknown
)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ErrorKind",
    "FieldIssue",
    "ValidationError",
    "NotFound",
    "ProductNotFound",
    "InsufficientInventory",
    "TransactionAborted",
    "Unknown",
    "NotificationFailure",
    "CheckoutRejected",
    "GatewayError",
    "LedgerError",
    "OrderError",
    "CheckoutError",
    "AppError",
)
