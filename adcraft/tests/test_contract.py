"""
Contract tests for the persisted Product and Avatar layouts.
"""
import pytest

from adcraft.errors import DataContractError
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product, as_list, generate_id


def test_product_defaults():
    product = Product(name="Lamp")

    assert product.id.startswith("prod_")
    assert product.created_at
    assert product.currency == "ILS"
    assert product.features == []
    assert product.specifications == {}
    assert product.is_valid
    assert not product.has_price


def test_product_validation():
    assert not Product(name="   ").is_valid
    assert not Product(name="Lamp", price=-1).is_valid
    assert not Product(name="Lamp", id="").is_valid


def test_product_persisted_layout(product_factory):
    data = product_factory().to_dict()

    assert data["imageUrl"] == "https://example.com/smart-bottle"
    assert data["createdAt"] == "2025-01-01T00:00:00+00:00"
    assert "image_url" not in data
    assert set(data) == {
        "id", "name", "description", "price", "currency", "imageUrl",
        "category", "brand", "features", "specifications", "createdAt",
    }


def test_product_from_dict_accepts_snake_case():
    product = Product.from_dict({
        "id": "P9",
        "name": "Desk",
        "price": "120.5",
        "image_url": "https://example.com/desk",
        "created_at": "2025-02-02T00:00:00+00:00",
        "features": "Adjustable",
    })

    assert product.id == "P9"
    assert product.price == 120.5
    assert product.image_url == "https://example.com/desk"
    assert product.features == ["Adjustable"]
    assert product.created_at == "2025-02-02T00:00:00+00:00"


def test_product_from_dict_rejects_bad_records():
    with pytest.raises(DataContractError):
        Product.from_dict(["not", "a", "mapping"])
    with pytest.raises(DataContractError):
        Product.from_dict({"name": "Desk", "price": "cheap"})


def test_avatar_omits_absent_system_fields():
    data = Avatar(name="Dana").to_dict()

    assert "id" not in data
    assert "createdAt" not in data
    assert "productId" not in data
    assert data["painPoints"] == []
    assert data["dreamOutcome"] == []


def test_avatar_persisted_layout(avatar_factory):
    data = avatar_factory().to_dict()

    assert data["productId"] == "P1"
    assert data["painPoints"] == ["time management", "work-life balance"]
    assert data["preferences"] == {"communication": "email", "frequency": "daily"}
    assert Avatar.from_dict(data) == avatar_factory()


def test_avatar_age_keeps_shape():
    assert Avatar.from_dict({"name": "A", "age": ["25-34", "35-44"]}).age == ["25-34", "35-44"]
    assert Avatar.from_dict({"name": "A", "age": 30}).age == "30"
    assert Avatar.from_dict({"name": "A"}).age == ""


def test_avatar_linking_and_validation():
    assert not Avatar(name="").is_valid
    assert Avatar(name="Dana").is_valid
    assert not Avatar(name="Dana").is_linked
    assert not Avatar(name="Dana", product_id="").is_linked
    assert Avatar(name="Dana", product_id="P1").is_linked


def test_avatar_from_dict_rejects_non_mapping():
    with pytest.raises(DataContractError):
        Avatar.from_dict("Dana")


def test_helpers():
    assert as_list(None) == []
    assert as_list("") == []
    assert as_list("one") == ["one"]
    assert as_list(("a", "b")) == ["a", "b"]
    assert generate_id("avatar").startswith("avatar_")
    assert generate_id("x") != generate_id("x")
