"""
Test normalization of webhook payloads.
"""
import pytest

from adcraft.errors import NormalizationError
from adcraft.normalizers.webhook import WebhookNormalizer


def test_normalize_product_basic():
    raw = {
        "title": "  Smart Water Bottle ",
        "price": "₪89.99",
        "currency": "ils",
        "url": "https://example.com/bottle",
        "features": "Temperature sensor, Daily memory",
        "specifications": '{"Volume": "750ml"}',
    }

    product = WebhookNormalizer.normalize_product(raw)

    assert product.name == "Smart Water Bottle"
    assert product.price == 89.99
    assert product.currency == "ILS"
    assert product.image_url == "https://example.com/bottle"
    assert product.features == ["Temperature sensor", "Daily memory"]
    assert product.specifications == {"Volume": "750ml"}
    assert product.id.startswith("prod_")
    assert product.created_at


def test_normalize_product_keeps_given_id_and_image():
    product = WebhookNormalizer.normalize_product({
        "id": "P7",
        "name": "Desk",
        "imageUrl": "https://cdn.example.com/desk.png",
        "url": "https://example.com/desk",
    })
    assert product.id == "P7"
    assert product.image_url == "https://cdn.example.com/desk.png"


def test_normalize_product_missing_price():
    product = WebhookNormalizer.normalize_product({"name": "Desk", "price": "call us"})
    assert product.price == 0.0


def test_normalize_product_requires_name():
    with pytest.raises(NormalizationError):
        WebhookNormalizer.normalize_product({"price": 10})
    with pytest.raises(NormalizationError):
        WebhookNormalizer.normalize_product("Desk")


def test_normalize_product_bad_specifications():
    with pytest.raises(NormalizationError):
        WebhookNormalizer.normalize_product({"name": "Desk", "specifications": "not json"})
    with pytest.raises(NormalizationError):
        WebhookNormalizer.normalize_product({"name": "Desk", "specifications": ["a", "b"]})


def test_normalize_avatar():
    raw = {
        "name": "Dana",
        "age": ["25-34", " 35-44 "],
        "interests": '["fitness", "travel"]',
        "pain_points": "no time, stress",
        "dreamOutcome": ["Calm mornings"],
        "preferences": {"channel": "Instagram", "tone ": " warm"},
        "productId": "P1",
    }

    avatar = WebhookNormalizer.normalize_avatar(raw)

    assert avatar.id.startswith("avatar_")
    assert avatar.age == ["25-34", "35-44"]
    assert avatar.interests == ["fitness", "travel"]
    assert avatar.pain_points == ["no time", "stress"]
    assert avatar.dream_outcome == ["Calm mornings"]
    assert avatar.preferences == {"channel": "Instagram", "tone": "warm"}
    assert avatar.product_id == "P1"


def test_normalize_avatar_without_product():
    avatar = WebhookNormalizer.normalize_avatar({"name": "Dana", "productId": ""})
    assert avatar.product_id is None
    assert avatar.age == ""


def test_normalize_avatar_requires_name():
    with pytest.raises(NormalizationError):
        WebhookNormalizer.normalize_avatar({"age": "30"})


def test_normalize_list_shapes():
    assert WebhookNormalizer._normalize_list(None) == []
    assert WebhookNormalizer._normalize_list("a, ,b") == ["a", "b"]
    assert WebhookNormalizer._normalize_list('["a", "b"]') == ["a", "b"]
    assert WebhookNormalizer._normalize_list("[not json") == ["[not json"]
    assert WebhookNormalizer._normalize_list(7) == ["7"]


def test_normalize_price():
    assert WebhookNormalizer._normalize_price("1,299.90 ILS") == 1299.90
    assert WebhookNormalizer._normalize_price(15) == 15.0
    assert WebhookNormalizer._normalize_price("") is None
    assert WebhookNormalizer._normalize_price(".") is None
