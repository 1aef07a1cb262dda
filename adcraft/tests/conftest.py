"""Shared fixtures for the data layer tests."""

import pytest

from adcraft.data import DataLayer
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product
from adcraft.storage import MemoryStorage


@pytest.fixture
def data_layer():
    """Isolated data layer over in-memory storage."""
    return DataLayer(MemoryStorage())


def make_product(**overrides) -> Product:
    fields = dict(
        id="P1",
        name="SmartBottle",
        description="Water bottle with a temperature sensor",
        price=89.99,
        currency="ILS",
        image_url="https://example.com/smart-bottle",
        category="Health",
        brand="SmartHydrate",
        features=["Temperature sensor", "Daily memory"],
        specifications={"Volume": "750ml", "Material": "Steel"},
        created_at="2025-01-01T00:00:00+00:00",
    )
    fields.update(overrides)
    return Product(**fields)


def make_avatar(**overrides) -> Avatar:
    fields = dict(
        id="A1",
        name="Test User",
        age="25",
        gender="female",
        personality="Extroverted and friendly",
        interests=["technology", "fitness", "travel"],
        background="Marketing professional",
        goals="Increase productivity",
        pain_points=["time management", "work-life balance"],
        objections=["cost concerns", "complexity"],
        dream_outcome=["efficiency", "success"],
        preferences={"communication": "email", "frequency": "daily"},
        created_at="2025-01-01T00:00:00+00:00",
        product_id="P1",
    )
    fields.update(overrides)
    return Avatar(**fields)


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def avatar_factory():
    return make_avatar
