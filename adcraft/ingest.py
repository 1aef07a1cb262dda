"""
Merge webhook results into the store.

A product the store already knows is reused rather than duplicated, and
an avatar that arrives without a product reference is attached to the
product from the same response.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from adcraft.errors import NormalizationError
from adcraft.logger import logger
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product
from adcraft.normalizers.webhook import WebhookNormalizer
from adcraft.repositories import AvatarRepository, ProductRepository
from adcraft.sentry import capture_normalization_error
from adcraft.services.webhook_service import WebhookResponse


@dataclass
class IngestResult:
    product: Optional[Product] = None
    avatar: Optional[Avatar] = None
    product_created: bool = False
    avatar_created: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product.to_dict() if self.product else None,
            "avatar": self.avatar.to_dict() if self.avatar else None,
            "productCreated": self.product_created,
            "avatarCreated": self.avatar_created,
        }


class WebhookIngestor:

    def __init__(self, products: ProductRepository, avatars: AvatarRepository):
        self.products = products
        self.avatars = avatars
        self.normalizer = WebhookNormalizer()

    def merge(self, response: WebhookResponse) -> IngestResult:
        """
        Normalize and store the product and avatar from ``response``.

        Raises:
            NormalizationError: If either payload cannot be normalized.
                Nothing is written in that case.
        """
        result = IngestResult()
        product = self._normalize(self.normalizer.normalize_product, response.product)
        avatar = self._normalize(self.normalizer.normalize_avatar, response.avatar)

        if product is not None:
            result.product_created = self.products.create(product)
            if result.product_created:
                result.product = product
            else:
                result.product = self.products.find_duplicate(product) or product
                logger.info(f"Reusing existing product '{result.product.name}' ({result.product.id})")

        if avatar is not None:
            if not avatar.product_id and result.product is not None:
                avatar = Avatar.from_dict({**avatar.to_dict(), "productId": result.product.id})

            result.avatar_created = self.avatars.create(avatar)
            if result.avatar_created:
                result.avatar = avatar
            else:
                result.avatar = self.avatars.find_duplicate(avatar) or avatar
                logger.info(f"Reusing existing avatar '{result.avatar.name}' ({result.avatar.id})")

        return result

    @staticmethod
    def _normalize(normalize, raw: Optional[Dict[str, Any]]):
        if not raw:
            return None
        try:
            return normalize(raw)
        except NormalizationError as e:
            logger.warning(f"Failed to normalize webhook payload: {e}")
            if isinstance(raw, dict):
                capture_normalization_error(raw, str(e))
            raise
