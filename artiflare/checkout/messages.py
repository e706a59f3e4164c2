"""
User-facing messages for every failure a checkout can surface.
"""

from __future__ import annotations

from artiflare.errors import (
    AppError,
    CheckoutRejected,
    InsufficientInventory,
    NotFound,
    NotificationFailure,
    ProductNotFound,
    TransactionAborted,
    Unknown,
    ValidationError,
)

GENERIC_FAILURE = "Failed to place order. Please try again."
NOTIFICATION_WARNING = (
    "Your order was placed, but we could not send the confirmation email."
)

# Store-level error codes the storefront has always mapped to friendly text.
STORE_CODE_MESSAGES: dict[str, str] = {
    "permission-denied": "You do not have permission to perform this action.",
    "not-found": "The requested document was not found.",
    "already-exists": "This document already exists.",
    "resource-exhausted": "The operation was aborted due to resource constraints.",
    "failed-precondition": (
        "The operation was rejected because the system is not in a state "
        "required for the operation's execution."
    ),
    "aborted": "The operation was aborted.",
    "out-of-range": "The operation was attempted past the valid range.",
    "unimplemented": "The operation is not implemented or not supported/enabled.",
    "internal": "Internal error occurred.",
    "unavailable": "The service is currently unavailable.",
    "data-loss": "Unrecoverable data loss or corruption.",
    "unauthenticated": "The request does not have valid authentication credentials.",
}


def message_for_code(code: str, fallback: str | None = None) -> str:
    return STORE_CODE_MESSAGES.get(code, fallback or "An unexpected error occurred.")


def failure_message(error: AppError) -> str:
    """Distinguishes out-of-stock, missing product and everything else."""
    match error:
        case InsufficientInventory(product_id=pid, available=available, product_name=name):
            label = name or pid
            if available == 0:
                return f"Sorry, {label} is out of stock."
            return f"Sorry, only {available} of {label} left in stock."
        case ProductNotFound():
            return "One of the products in your cart is no longer available."
        case ValidationError(issues=issues) if issues:
            return f"Please check {issues[0].field}: {issues[0].message}"
        case CheckoutRejected(reason=reason):
            return reason
        case NotificationFailure():
            return NOTIFICATION_WARNING
        case NotFound():
            return message_for_code("not-found")
        case TransactionAborted() | Unknown():
            return GENERIC_FAILURE
        case _:
            return GENERIC_FAILURE


__all__ = (
    "GENERIC_FAILURE",
    "NOTIFICATION_WARNING",
    "STORE_CODE_MESSAGES",
    "message_for_code",
    "failure_message",
)
