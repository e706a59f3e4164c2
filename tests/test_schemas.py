from __future__ import annotations

from kungfu import Error, Ok

from artiflare.errors import ValidationError
from artiflare.schemas import (
    Address,
    Order,
    OrderStatus,
    Product,
    Review,
    User,
    validate,
    validate_partial,
)
from tests.factories import address_data, product_data


def test_well_formed_product_validates_every_time() -> None:
    for _ in range(2):
        match validate(Product, product_data()):
            case Ok(product):
                assert product.name == "Clay Mug"
                assert product.artisan_id == "artisan-1"
            case Error(err):
                raise AssertionError(err)


def test_negative_price_always_fails_on_price() -> None:
    for extra in ({}, {"inventory": -3}, {"name": ""}, {"images": []}):
        result = validate(Product, product_data(price=-1, **extra))
        assert isinstance(result, Error)
        assert "price" in result.error.fields


def test_every_violation_is_reported() -> None:
    result = validate(Product, product_data(name="  ", images=[], inventory=-1))
    assert isinstance(result, Error)
    assert {"name", "images", "inventory"} <= set(result.error.fields)


def test_inventory_must_be_integer() -> None:
    result = validate(Product, product_data(inventory=2.5))
    assert isinstance(result, Error)
    assert result.error.fields == ("inventory",)


def test_validation_error_message_lists_fields() -> None:
    result = validate(Product, product_data(price=0))
    assert isinstance(result, Error)
    assert isinstance(result.error, ValidationError)
    assert str(result.error).startswith("Validation failed: price")


def test_camel_and_snake_case_both_accepted() -> None:
    a = validate(Address, address_data())
    b = validate(
        Address,
        {
            "id": "home",
            "street": "12 MG Road",
            "city": "Pune",
            "state": "MH",
            "zip_code": "411001",
            "country": "India",
        },
    )
    assert isinstance(a, Ok) and isinstance(b, Ok)
    assert a.value.zip_code == b.value.zip_code == "411001"


def test_address_label_is_kept_as_null() -> None:
    address = Address.model_validate(address_data())
    document = address.to_document()
    assert "label" in document and document["label"] is None
    assert "phoneNumber" not in document


def test_user_email_may_be_empty_but_not_malformed() -> None:
    assert isinstance(validate(User, {"uid": "u", "displayName": "U", "email": ""}), Ok)
    bad = validate(User, {"uid": "u", "displayName": "U", "email": "not-an-email"})
    assert isinstance(bad, Error)
    assert bad.error.fields and all(f.startswith("email") for f in bad.error.fields)


def test_review_rating_bounds_and_image_urls() -> None:
    base = {"productId": "p", "userId": "u", "userName": "U", "comment": "Lovely"}
    assert isinstance(validate(Review, {**base, "rating": 5}), Ok)
    assert isinstance(validate(Review, {**base, "rating": 6}), Error)
    bad_image = validate(Review, {**base, "rating": 4, "images": ["not a url"]})
    assert isinstance(bad_image, Error)
    assert bad_image.error.fields[0].startswith("images")


def test_order_needs_at_least_one_item() -> None:
    result = validate(
        Order,
        {
            "userId": "u",
            "items": [],
            "total": 10,
            "shippingAddress": address_data(),
            "paymentMethod": "cod",
            "shippingMethod": "standard",
            "shippingCost": 0,
        },
    )
    assert isinstance(result, Error)
    assert "items" in result.error.fields


def test_partial_validation_checks_only_given_keys() -> None:
    match validate_partial(Product, {"price": 30, "inventory": 2}):
        case Ok(document):
            assert document == {"price": 30.0, "inventory": 2}
        case Error(err):
            raise AssertionError(err)


def test_partial_validation_reports_alias_paths() -> None:
    result = validate_partial(Product, {"discounted_price": -5})
    assert isinstance(result, Error)
    assert result.error.fields == ("discountedPrice",)


def test_partial_validation_passes_unknown_keys_through() -> None:
    result = validate_partial(Product, {"legacyFlag": True})
    assert isinstance(result, Ok)
    assert result.value == {"legacyFlag": True}


def test_order_status_transitions() -> None:
    assert OrderStatus.PENDING.can_transition(OrderStatus.PROCESSING)
    assert OrderStatus.SHIPPED.can_transition(OrderStatus.DELIVERED)
    assert OrderStatus.PROCESSING.can_transition(OrderStatus.CANCELLED)
    assert not OrderStatus.PENDING.can_transition(OrderStatus.DELIVERED)
    assert not OrderStatus.DELIVERED.can_transition(OrderStatus.CANCELLED)
    assert not OrderStatus.CANCELLED.can_transition(OrderStatus.PENDING)
