"""
Reactive snapshot of both collections for a consumer surface.

A binder re-reads the repositories whenever the bus signals a change and
keeps its previous snapshot when nothing actually differs, so its owner
is only told about real changes.
"""
from typing import Callable, List, Optional, Tuple

from adcraft.events import DataEvents, EventBus
from adcraft.logger import logger
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product
from adcraft.repositories import AvatarRepository, ProductRepository


class SynchronizedData:
    """
    Read-only, self-refreshing copy of products and avatars.

    Snapshots are tuples; writes must go through the repositories.
    ``on_change`` is called after a reload that replaced at least one
    snapshot.
    """

    def __init__(
        self,
        products: ProductRepository,
        avatars: AvatarRepository,
        bus: EventBus,
        on_change: Optional[Callable[["SynchronizedData"], None]] = None,
    ):
        self._products_repo = products
        self._avatars_repo = avatars
        self._bus = bus
        self._on_change = on_change

        self._products: Optional[Tuple[Product, ...]] = None
        self._avatars: Optional[Tuple[Avatar, ...]] = None
        self._unsubscribers: List[Callable[[], None]] = []
        self.is_loading = False
        self.version = 0

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._products or ()

    @property
    def avatars(self) -> Tuple[Avatar, ...]:
        return self._avatars or ()

    @property
    def is_attached(self) -> bool:
        return bool(self._unsubscribers)

    def attach(self) -> "SynchronizedData":
        if self.is_attached:
            return self
        for topic in DataEvents.ALL:
            self._unsubscribers.append(self._bus.subscribe(topic, self._handle_event(topic)))
        self.reload()
        return self

    def detach(self) -> None:
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    def _handle_event(self, topic: str) -> Callable[[], None]:
        def handler():
            logger.debug(f"Update event received: {topic}")
            self.reload()
        return handler

    def reload(self) -> bool:
        """Re-read both collections. Returns True when a snapshot was replaced."""
        self.is_loading = True
        changed = False
        try:
            products = tuple(self._products_repo.list())
            avatars = tuple(self._avatars_repo.list())

            if self._products is None or products != self._products:
                logger.debug(f"Products updated: {len(products)}")
                self._products = products
                changed = True

            if self._avatars is None or avatars != self._avatars:
                logger.debug(f"Avatars updated: {len(avatars)}")
                self._avatars = avatars
                changed = True
        finally:
            self.is_loading = False

        if changed:
            self.version += 1
            if self._on_change is not None:
                self._on_change(self)
        return changed

    def __enter__(self) -> "SynchronizedData":
        return self.attach()

    def __exit__(self, exc_type, exc, tb):
        self.detach()
