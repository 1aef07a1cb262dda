"""
Referential integrity between avatars and products.

validate() is advisory: an avatar briefly pointing nowhere is normal right
after a webhook fills one side. repair() is an explicit, opt-in tool and
is never run on load.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from adcraft.dedup import normalize_text
from adcraft.logger import logger
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product
from adcraft.repositories import AvatarRepository, ProductRepository

NAME_MATCH = "name_match"
FALLBACK = "fallback"


@dataclass
class IntegrityReport:
    orphaned_avatars: List[Avatar] = field(default_factory=list)
    products_without_avatars: List[Product] = field(default_factory=list)
    unlinked_avatars: List[Avatar] = field(default_factory=list)
    connected_avatars: List[Avatar] = field(default_factory=list)
    total_products: int = 0
    total_avatars: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.orphaned_avatars and not self.products_without_avatars

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "orphanedAvatars": [
                {"id": a.id, "name": a.name, "productId": a.product_id} for a in self.orphaned_avatars
            ],
            "productsWithoutAvatars": [
                {"id": p.id, "name": p.name} for p in self.products_without_avatars
            ],
            "unlinkedAvatars": [{"id": a.id, "name": a.name} for a in self.unlinked_avatars],
            "connectedAvatars": len(self.connected_avatars),
            "totalProducts": self.total_products,
            "totalAvatars": self.total_avatars,
        }


@dataclass(frozen=True)
class Relink:
    avatar_id: Optional[str]
    avatar_name: str
    previous_product_id: Optional[str]
    product_id: str
    method: str


@dataclass
class RepairResult:
    relinks: List[Relink] = field(default_factory=list)
    unresolved: List[Avatar] = field(default_factory=list)
    saved: bool = True

    @property
    def fixed_count(self) -> int:
        return len(self.relinks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fixed": self.fixed_count,
            "saved": self.saved,
            "relinks": [
                {
                    "avatarId": r.avatar_id,
                    "avatarName": r.avatar_name,
                    "previousProductId": r.previous_product_id,
                    "productId": r.product_id,
                    "method": r.method,
                }
                for r in self.relinks
            ],
            "unresolved": [{"id": a.id, "name": a.name} for a in self.unresolved],
        }


@dataclass
class ConnectionReport:
    url: str
    product: Optional[Product] = None
    connected_avatars: List[Avatar] = field(default_factory=list)
    candidate_avatars: List[Avatar] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "product": self.product.to_dict() if self.product else None,
            "connectedAvatars": [a.to_dict() for a in self.connected_avatars],
            "candidateAvatars": [a.to_dict() for a in self.candidate_avatars],
        }


def match_product_by_name(avatar: Avatar, products: List[Product]) -> Optional[Product]:
    """First product whose normalized name contains, or is contained in, the avatar's."""
    avatar_name = normalize_text(avatar.name)
    if not avatar_name:
        return None
    for product in products:
        product_name = normalize_text(product.name)
        if product_name and (product_name in avatar_name or avatar_name in product_name):
            return product
    return None


class IntegrityChecker:
    """Diagnostics and repair over the two collections."""

    def __init__(self, products: ProductRepository, avatars: AvatarRepository):
        self.products = products
        self.avatars = avatars

    def validate(self) -> IntegrityReport:
        products = self.products.list()
        avatars = self.avatars.list()
        product_ids = {p.id for p in products}

        report = IntegrityReport(total_products=len(products), total_avatars=len(avatars))
        referenced = set()
        for avatar in avatars:
            if not avatar.product_id:
                report.unlinked_avatars.append(avatar)
            elif avatar.product_id in product_ids:
                report.connected_avatars.append(avatar)
                referenced.add(avatar.product_id)
            else:
                report.orphaned_avatars.append(avatar)
        report.products_without_avatars = [p for p in products if p.id not in referenced]

        logger.info(
            "Avatar connection validation",
            extra={"context": {
                "is_valid": report.is_valid,
                "orphaned_avatars": len(report.orphaned_avatars),
                "products_without_avatars": len(report.products_without_avatars),
                "unlinked_avatars": len(report.unlinked_avatars),
                "total_avatars": report.total_avatars,
                "total_products": report.total_products,
            }}
        )
        return report

    def repair(self, allow_fallback: bool = True) -> RepairResult:
        """
        Relink avatars whose product id is missing or dangling.

        A product whose name overlaps the avatar's name wins; otherwise the
        first product in the collection is used when ``allow_fallback`` is
        set. The fallback can mis-associate a persona, so callers that need
        certainty should pass ``allow_fallback=False`` and review the
        unresolved avatars.
        """
        products = self.products.list()
        product_ids = {p.id for p in products}
        result = RepairResult()

        def relink(avatar: Avatar) -> Optional[Avatar]:
            if avatar.product_id and avatar.product_id in product_ids:
                return None

            target = match_product_by_name(avatar, products)
            method = NAME_MATCH
            if target is None and allow_fallback and products:
                target, method = products[0], FALLBACK

            if target is None:
                result.unresolved.append(avatar)
                return None

            logger.info(f"Relinked avatar '{avatar.name}' -> product '{target.name}' ({method})")
            result.relinks.append(Relink(
                avatar_id=avatar.id,
                avatar_name=avatar.name,
                previous_product_id=avatar.product_id,
                product_id=target.id,
                method=method,
            ))
            return Avatar.from_dict({**avatar.to_dict(), "productId": target.id})

        _, result.saved = self.avatars.rewrite(relink)
        if result.relinks:
            logger.info(f"Fixed {result.fixed_count} product-avatar connections")
        else:
            logger.info("No product-avatar connections found to fix")
        return result

    def check_connection_for_url(self, url: str) -> ConnectionReport:
        """Avatars attached to the product at ``url``, and ones that could be."""
        report = ConnectionReport(url=url)
        product = self.products.find_by_url(url)
        if product is None:
            logger.info(f"No product found for URL: {url}")
            return report

        report.product = product
        avatars = self.avatars.list()
        report.connected_avatars = [a for a in avatars if a.product_id == product.id]
        if not report.connected_avatars:
            report.candidate_avatars = [
                a for a in avatars
                if not a.product_id or (a.interests and a.pain_points)
            ]
        return report
