from __future__ import annotations

from artiflare.checkout import (
    GENERIC_FAILURE,
    NOTIFICATION_WARNING,
    artisan_label,
    display_name,
    failure_message,
    format_phone_number,
    initials,
    message_for_code,
)
from artiflare.errors import (
    CheckoutRejected,
    FieldIssue,
    InsufficientInventory,
    NotFound,
    NotificationFailure,
    ProductNotFound,
    TransactionAborted,
    Unknown,
    ValidationError,
)
from artiflare.schemas import User


def user(**fields: object) -> User:
    return User.model_validate({"uid": "u1", "displayName": "User", **fields})


def test_phone_formatting() -> None:
    assert format_phone_number("5551234567") == "(555) 123-4567"
    assert format_phone_number("+1 555 123 4567") == "+1 (555) 123-4567"
    assert format_phone_number("+44 20 7946 0958") == "+44 20 7946 0958"
    assert format_phone_number(None) == ""


def test_display_name_prefers_real_names() -> None:
    assert display_name(user(displayName="Asha Rao")) == "Asha Rao"
    assert display_name(user(displayName="User 4567", phoneNumber="5551234567")) == "(555) 123-4567"
    assert display_name(user()) == "User"
    assert display_name(None) == "User"


def test_initials() -> None:
    assert initials(user(displayName="asha rao")) == "AR"
    assert initials(user(phoneNumber="5551234567")) == "4567"
    assert initials(None) == "U"


def test_artisan_label() -> None:
    assert artisan_label(user(displayName="Meera", companyName="Meera's Pottery")) == "Meera's Pottery"
    assert artisan_label(user(displayName="Meera")) == "Meera"
    assert artisan_label(None) == "Artisan"


def test_failure_messages() -> None:
    assert failure_message(InsufficientInventory("p", 0, 1, "Vase")) == "Sorry, Vase is out of stock."
    assert failure_message(InsufficientInventory("p", 2, 3)) == "Sorry, only 2 of p left in stock."
    assert failure_message(ProductNotFound("p")).startswith("One of the products")
    assert failure_message(CheckoutRejected("Your cart is empty.")) == "Your cart is empty."
    assert failure_message(TransactionAborted()) == GENERIC_FAILURE
    assert failure_message(Unknown("boom")) == GENERIC_FAILURE
    assert failure_message(NotificationFailure("x")) == NOTIFICATION_WARNING
    assert failure_message(NotFound("users", "u")) == message_for_code("not-found")
    issue = ValidationError((FieldIssue("items.0.price", "must be positive"),))
    assert failure_message(issue) == "Please check items.0.price: must be positive"


def test_store_codes() -> None:
    assert message_for_code("permission-denied").startswith("You do not have permission")
    assert message_for_code("weird") == "An unexpected error occurred."
    assert message_for_code("weird", "Try later") == "Try later"
