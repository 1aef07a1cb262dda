"""
Composition root for the data layer.

One DataLayer is built at start-up and passed to whatever needs the store;
tests build their own over MemoryStorage.
"""
from typing import Callable, List, Optional

from adcraft.events import EventBus
from adcraft.integrity import ConnectionReport, IntegrityChecker, IntegrityReport, RepairResult
from adcraft.logger import logger
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product
from adcraft.repositories import AvatarRepository, ProductRepository
from adcraft.storage import BaseStorage, MemoryStorage, PersistentStore, create_storage
from adcraft.sync import SynchronizedData


class DataLayer:
    """Products, avatars, their event bus and integrity tools over one store."""

    def __init__(self, backend: Optional[BaseStorage] = None,
                 products_key: str = "products", avatars_key: str = "avatars"):
        self.backend = backend or MemoryStorage()
        self.store = PersistentStore(self.backend)
        self.bus = EventBus()
        self.products = ProductRepository(self.store, self.bus, products_key)
        self.avatars = AvatarRepository(self.store, self.bus, avatars_key)
        self.integrity = IntegrityChecker(self.products, self.avatars)

    @classmethod
    def from_config(cls, config) -> "DataLayer":
        backend = create_storage(config)
        logger.info(f"Data layer using '{backend.name}' storage")
        return cls(backend, products_key=config.PRODUCTS_KEY, avatars_key=config.AVATARS_KEY)

    def list_products(self) -> List[Product]:
        return self.products.list()

    def list_avatars(self) -> List[Avatar]:
        return self.avatars.list()

    def create_product(self, candidate: Product) -> bool:
        return self.products.create(candidate)

    def create_avatar(self, candidate: Avatar) -> bool:
        return self.avatars.create(candidate)

    def update_product(self, entity) -> bool:
        return self.products.update(entity)

    def update_avatar(self, entity) -> bool:
        return self.avatars.update(entity)

    def delete_product(self, product_id: str) -> bool:
        return self.products.delete(product_id)

    def delete_avatar(self, avatar_id: str) -> bool:
        return self.avatars.delete(avatar_id)

    def subscribe(self, topic: str, callback: Callable[[], None]) -> Callable[[], None]:
        return self.bus.subscribe(topic, callback)

    def validate_integrity(self) -> IntegrityReport:
        return self.integrity.validate()

    def repair_orphans(self, allow_fallback: bool = True) -> RepairResult:
        return self.integrity.repair(allow_fallback=allow_fallback)

    def check_connection_for_url(self, url: str) -> ConnectionReport:
        return self.integrity.check_connection_for_url(url)

    def bind(self, on_change: Optional[Callable[[SynchronizedData], None]] = None) -> SynchronizedData:
        """Attached binder; call ``detach()`` (or use it as a context manager) when done."""
        return SynchronizedData(self.products, self.avatars, self.bus, on_change=on_change).attach()

    def clear(self) -> None:
        """Empty both collections and notify subscribers."""
        self.products.replace_all([])
        self.avatars.replace_all([])
