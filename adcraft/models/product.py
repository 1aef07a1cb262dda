"""
Canonical Product data contract.
Everything that reads or writes the products collection depends on this shape.
"""
import uuid
from dataclasses import dataclass, field
from typing import List, Dict, Any
from datetime import datetime, timezone

from adcraft.errors import DataContractError


def generate_id(prefix: str) -> str:
    """Opaque, stable identifier such as ``prod_3f9c0a...``."""
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def as_list(value: Any) -> List[Any]:
    """Stored list fields; a bare string becomes a one-item list."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def pick(data: Dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    """Read a field stored under its camelCase or snake_case name."""
    if camel in data:
        return data[camel]
    return data.get(snake, default)


@dataclass(frozen=True)
class Product:
    """
    A sellable item entered by a user or scraped by the product webhook.

    ``image_url`` doubles as the product's external identity for
    duplicate detection. ``id`` and ``created_at`` never change after
    creation.
    """
    name: str
    description: str = ""
    price: float = 0.0
    currency: str = "ILS"
    image_url: str = ""
    category: str = ""
    brand: str = ""

    # Lists and maps (empty by default, not null)
    features: List[str] = field(default_factory=list)
    specifications: Dict[str, str] = field(default_factory=dict)

    # System fields
    id: str = field(default_factory=lambda: generate_id("prod"))
    created_at: str = field(default_factory=utc_timestamp)

    @property
    def is_valid(self) -> bool:
        """Basic validation rules."""
        if not self.id or not self.name or not self.name.strip():
            return False
        if self.price < 0:
            return False
        return True

    @property
    def has_price(self) -> bool:
        return self.price > 0

    def to_dict(self) -> Dict[str, Any]:
        """Persisted (camelCase) layout."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "currency": self.currency,
            "imageUrl": self.image_url,
            "category": self.category,
            "brand": self.brand,
            "features": list(self.features),
            "specifications": dict(self.specifications),
            "createdAt": self.created_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """
        Build a Product from a stored record.

        Raises:
            DataContractError: If the record is not a mapping or a field
                has the wrong type.
        """
        if not isinstance(data, dict):
            raise DataContractError(f"Product record must be a mapping, got {type(data).__name__}")

        try:
            kwargs = {
                "name": data.get("name") or "",
                "description": data.get("description") or "",
                "price": float(data.get("price") or 0),
                "currency": data.get("currency") or "ILS",
                "image_url": pick(data, "imageUrl", "image_url") or "",
                "category": data.get("category") or "",
                "brand": data.get("brand") or "",
                "features": as_list(data.get("features")),
                "specifications": dict(data.get("specifications") or {}),
            }
        except (TypeError, ValueError) as e:
            raise DataContractError(f"Invalid product record: {e}") from e

        if data.get("id"):
            kwargs["id"] = str(data["id"])
        created_at = pick(data, "createdAt", "created_at")
        if created_at:
            kwargs["created_at"] = str(created_at)
        return cls(**kwargs)
