"""
Explicit normalization layer.
Converts product/avatar payloads from the scraping webhook into the
internal models before they reach the repositories.
"""
import json
import re
from typing import Any, Dict, List, Optional

from adcraft.errors import NormalizationError
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product, generate_id, pick, utc_timestamp


class WebhookNormalizer:
    """
    Normalizes raw webhook output into Product and Avatar.

    The workflow is driven by an LLM, so the same value can arrive as a
    list, a comma-separated string or a JSON-encoded string.
    """

    @staticmethod
    def normalize_product(raw_product: Dict[str, Any]) -> Product:
        """
        Convert a webhook product to the internal model.

        Returns:
            Normalized Product (a fresh ``prod_`` id when none is given)

        Raises:
            NormalizationError: If data cannot be normalized
        """
        if not isinstance(raw_product, dict):
            raise NormalizationError(f"Product payload must be an object, got {type(raw_product).__name__}")

        try:
            name = WebhookNormalizer._text(raw_product.get("name") or raw_product.get("title"))
            if not name:
                raise ValueError("product name is missing")

            image_url = WebhookNormalizer._text(
                pick(raw_product, "imageUrl", "image_url")
                or raw_product.get("url")
                or raw_product.get("productUrl")
            )

            return Product(
                id=WebhookNormalizer._text(raw_product.get("id")) or generate_id("prod"),
                name=name,
                description=WebhookNormalizer._text(raw_product.get("description")),
                price=WebhookNormalizer._normalize_price(raw_product.get("price")) or 0.0,
                currency=WebhookNormalizer._text(raw_product.get("currency")).upper() or "ILS",
                image_url=image_url,
                category=WebhookNormalizer._text(raw_product.get("category")),
                brand=WebhookNormalizer._text(raw_product.get("brand")),
                features=WebhookNormalizer._normalize_list(raw_product.get("features")),
                specifications=WebhookNormalizer._normalize_mapping(raw_product.get("specifications")),
                created_at=WebhookNormalizer._text(pick(raw_product, "createdAt", "created_at")) or utc_timestamp(),
            )

        except (KeyError, ValueError, TypeError) as e:
            raise NormalizationError(
                f"Failed to normalize product: {str(e)}. "
                f"Data keys: {list(raw_product.keys())}"
            )

    @staticmethod
    def normalize_avatar(raw_avatar: Dict[str, Any]) -> Avatar:
        """
        Convert a webhook avatar to the internal model.

        Raises:
            NormalizationError: If data cannot be normalized
        """
        if not isinstance(raw_avatar, dict):
            raise NormalizationError(f"Avatar payload must be an object, got {type(raw_avatar).__name__}")

        try:
            name = WebhookNormalizer._text(raw_avatar.get("name"))
            if not name:
                raise ValueError("avatar name is missing")

            age = raw_avatar.get("age")
            if isinstance(age, (list, tuple)):
                age = WebhookNormalizer._normalize_list(age)
            else:
                age = WebhookNormalizer._text(age)

            return Avatar(
                id=WebhookNormalizer._text(raw_avatar.get("id")) or generate_id("avatar"),
                name=name,
                age=age,
                gender=WebhookNormalizer._text(raw_avatar.get("gender")),
                personality=WebhookNormalizer._text(raw_avatar.get("personality")),
                interests=WebhookNormalizer._normalize_list(raw_avatar.get("interests")),
                background=WebhookNormalizer._text(raw_avatar.get("background")),
                goals=WebhookNormalizer._text(raw_avatar.get("goals")),
                pain_points=WebhookNormalizer._normalize_list(pick(raw_avatar, "painPoints", "pain_points")),
                objections=WebhookNormalizer._normalize_list(raw_avatar.get("objections")),
                dream_outcome=WebhookNormalizer._normalize_list(pick(raw_avatar, "dreamOutcome", "dream_outcome")),
                preferences=WebhookNormalizer._normalize_mapping(raw_avatar.get("preferences")),
                created_at=WebhookNormalizer._text(pick(raw_avatar, "createdAt", "created_at")) or utc_timestamp(),
                product_id=WebhookNormalizer._text(pick(raw_avatar, "productId", "product_id")) or None,
            )

        except (KeyError, ValueError, TypeError) as e:
            raise NormalizationError(
                f"Failed to normalize avatar: {str(e)}. "
                f"Data keys: {list(raw_avatar.keys())}"
            )

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v).strip() for v in value if str(v).strip())
        return str(value).strip()

    @staticmethod
    def _normalize_price(raw_price: Any) -> Optional[float]:
        """Normalize price to float."""
        if raw_price is None or raw_price == "":
            return None

        try:
            if isinstance(raw_price, str):
                # Remove currency symbols, commas, spaces
                clean_price = re.sub(r'[^\d.]', '', raw_price)
                if clean_price and clean_price != ".":
                    return float(clean_price)
            elif isinstance(raw_price, (int, float)):
                return float(raw_price)
        except (ValueError, TypeError):
            pass

        return None

    @staticmethod
    def _normalize_list(raw_list: Any) -> List[str]:
        """List, JSON array string or comma-separated string -> list of strings."""
        if raw_list is None or raw_list == "":
            return []

        if isinstance(raw_list, str):
            stripped = raw_list.strip()
            if stripped.startswith("["):
                try:
                    decoded = json.loads(stripped)
                    if isinstance(decoded, list):
                        raw_list = decoded
                except ValueError:
                    pass
            if isinstance(raw_list, str):
                raw_list = raw_list.split(",")

        if not isinstance(raw_list, (list, tuple)):
            raw_list = [raw_list]

        return [item for item in (WebhookNormalizer._text(v) for v in raw_list) if item]

    @staticmethod
    def _normalize_mapping(raw_map: Any) -> Dict[str, str]:
        """Object or JSON object string -> string-keyed map of strings."""
        if not raw_map:
            return {}

        if isinstance(raw_map, str):
            try:
                raw_map = json.loads(raw_map)
            except ValueError:
                raise ValueError(f"expected a JSON object, got '{raw_map[:50]}'")

        if not isinstance(raw_map, dict):
            raise TypeError(f"expected an object, got {type(raw_map).__name__}")

        return {str(k).strip(): WebhookNormalizer._text(v) for k, v in raw_map.items() if str(k).strip()}
