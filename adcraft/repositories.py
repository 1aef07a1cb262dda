"""
Product and Avatar repositories.

The repositories are the only writers of the persisted collections. Every
successful write persists the whole collection and then emits the entity
topic followed by ALL_DATA_UPDATED. Writes work on the stored records as
they are, so a record the models cannot read is carried through untouched.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from adcraft.dedup import find_avatar_duplicate, find_product_duplicate, normalize_text
from adcraft.errors import DataContractError
from adcraft.events import DataEvents, EventBus
from adcraft.logger import logger
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product
from adcraft.storage import PersistentStore

# Fields that keep their original value on update
IMMUTABLE_FIELDS = ("id", "createdAt")

# (stored record, parsed model or None when unreadable)
Entry = Tuple[Any, Optional[Any]]


def to_persisted_key(key: str) -> str:
    """``pain_points`` -> ``painPoints``; camelCase keys pass through."""
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def stored_id(raw: Any) -> Optional[str]:
    if isinstance(raw, dict) and raw.get("id"):
        return str(raw["id"])
    return None


class BaseRepository:
    model: Type = None
    topic: str = None
    label = "record"

    def __init__(self, store: PersistentStore, bus: EventBus, key: str):
        self.store = store
        self.bus = bus
        self.key = key

    def _entries(self) -> List[Entry]:
        entries = []
        for raw in self.store.load_collection(self.key, []):
            try:
                entries.append((raw, self.model.from_dict(raw)))
            except DataContractError as e:
                logger.warning(f"Skipping unreadable {self.label} in '{self.key}': {e}")
                entries.append((raw, None))
        return entries

    def list(self) -> List[Any]:
        return [record for _, record in self._entries() if record is not None]

    def get(self, entity_id: str) -> Optional[Any]:
        if not entity_id:
            return None
        for record in self.list():
            if record.id == entity_id:
                return record
        return None

    def _find_match(self, candidate: Any, records: List[Any]) -> Optional[Any]:
        raise NotImplementedError

    def find_duplicate(self, candidate: Any, records: Optional[List[Any]] = None) -> Optional[Any]:
        """Stored record with the candidate's id, or one equivalent to it."""
        if records is None:
            records = self.list()
        if candidate.id:
            for existing in records:
                if existing.id == candidate.id:
                    return existing
        return self._find_match(candidate, records)

    def _persist(self, raw_records: List[Any]) -> bool:
        saved = self.store.save_collection(self.key, raw_records)
        if saved:
            self.bus.emit(self.topic)
            self.bus.emit(DataEvents.ALL_DATA_UPDATED)
        return saved

    def create(self, candidate: Any) -> bool:
        """
        Insert ``candidate`` unless an equivalent record already exists.

        Returns:
            True when stored. False when a duplicate exists (callers should
            reuse the existing record) or when the backend refused the write.

        Raises:
            DataContractError: If the candidate fails basic validation.
        """
        if not isinstance(candidate, self.model):
            raise DataContractError(f"Expected {self.model.__name__}, got {type(candidate).__name__}")
        if not candidate.is_valid:
            raise DataContractError(f"Invalid {self.label}: {candidate.to_dict()}")

        entries = self._entries()
        existing = self.find_duplicate(candidate, [r for _, r in entries if r is not None])
        if existing is not None:
            logger.info(f"{self.label.capitalize()} already exists, skipping save: {candidate.name}")
            return False

        saved = self._persist([raw for raw, _ in entries] + [candidate.to_dict()])
        if saved:
            logger.info(f"{self.label.capitalize()} saved: {candidate.name}")
        return saved

    def _prepare_update(self, changes: Union[Any, Dict[str, Any]]) -> Optional[Tuple[List[Entry], int, Any]]:
        """Locate the target and build the merged model; None for unknown ids."""
        if isinstance(changes, self.model):
            patch = changes.to_dict()
        elif isinstance(changes, dict):
            patch = {to_persisted_key(k): v for k, v in changes.items()}
        else:
            raise DataContractError(f"Cannot update {self.label} from {type(changes).__name__}")

        entity_id = patch.get("id")
        entries = self._entries()
        for index, (raw, record) in enumerate(entries):
            if entity_id and stored_id(raw) == str(entity_id):
                break
        else:
            return None

        current = record.to_dict() if record is not None else dict(raw)
        merged = {**current, **patch}
        for name in IMMUTABLE_FIELDS:
            if name in current:
                merged[name] = current[name]

        updated = self.model.from_dict(merged)
        if not updated.is_valid:
            raise DataContractError(f"Invalid {self.label} after update: {updated.to_dict()}")
        return entries, index, updated

    @staticmethod
    def _others(entries: List[Entry], index: int) -> List[Any]:
        return [record for i, (_, record) in enumerate(entries) if i != index and record is not None]

    def find_update_conflict(self, changes: Union[Any, Dict[str, Any]]) -> Optional[Any]:
        """Another stored record the updated one would duplicate."""
        prepared = self._prepare_update(changes)
        if prepared is None:
            return None
        entries, index, updated = prepared
        return self._find_match(updated, self._others(entries, index))

    def update(self, changes: Union[Any, Dict[str, Any]]) -> bool:
        """
        Merge ``changes`` into the record with the same id.

        ``changes`` is a full model instance or a partial mapping that
        includes ``id``. Unknown ids are a logged no-op returning False, and
        so is a change that would make the record duplicate another one.

        Raises:
            DataContractError: If the merged record fails basic validation.
        """
        prepared = self._prepare_update(changes)
        if prepared is None:
            entity_id = changes.id if isinstance(changes, self.model) else changes.get("id")
            logger.warning(f"Update skipped, {self.label} not found: {entity_id}")
            return False

        entries, index, updated = prepared
        clash = self._find_match(updated, self._others(entries, index))
        if clash is not None:
            logger.warning(f"Update skipped, {self.label} {updated.id} would duplicate {clash.id}")
            return False

        raw_records = [raw for raw, _ in entries]
        raw_records[index] = updated.to_dict()
        return self._persist(raw_records)

    def delete(self, entity_id: str) -> bool:
        """Remove the record with ``entity_id``. Unknown ids are a logged no-op."""
        raw_records = self.store.load_collection(self.key, [])
        remaining = [raw for raw in raw_records if not (entity_id and stored_id(raw) == entity_id)]
        if len(remaining) == len(raw_records):
            logger.warning(f"Delete skipped, {self.label} not found: {entity_id}")
            return False
        return self._persist(remaining)

    def rewrite(self, transform: Callable[[Any], Optional[Any]]) -> Tuple[int, bool]:
        """
        Offer every readable record to ``transform``; a returned model
        replaces it. Unreadable records are written back as stored.

        Returns:
            (number of replaced records, whether the write succeeded). Nothing
            is written when no record was replaced.
        """
        raw_records = []
        replaced = 0
        for raw, record in self._entries():
            replacement = transform(record) if record is not None else None
            if replacement is None:
                raw_records.append(raw)
            else:
                raw_records.append(replacement.to_dict())
                replaced += 1

        if not replaced:
            return 0, True
        return replaced, self._persist(raw_records)

    def replace_all(self, records: List[Any]) -> bool:
        """Rewrite the whole collection with one pair of events."""
        return self._persist([r.to_dict() for r in records])


class ProductRepository(BaseRepository):
    model = Product
    topic = DataEvents.PRODUCTS_UPDATED
    label = "product"

    def _find_match(self, candidate: Product, records: List[Product]) -> Optional[Product]:
        return find_product_duplicate(candidate, records)

    def find_by_url(self, url: str) -> Optional[Product]:
        target = normalize_text(url)
        if not target:
            return None
        for product in self.list():
            if normalize_text(product.image_url) == target:
                return product
        return None

    def find_by_name(self, name: str) -> Optional[Product]:
        target = normalize_text(name)
        if not target:
            return None
        for product in self.list():
            if normalize_text(product.name) == target:
                return product
        return None

    def seed_samples(self) -> int:
        """Store the sample catalogue when no products exist yet."""
        if self.list():
            logger.info("Sample products already exist, skipping initialization")
            return 0
        created = sum(1 for product in SAMPLE_PRODUCTS if self.create(product))
        logger.info(f"Sample products initialized: {created}")
        return created


class AvatarRepository(BaseRepository):
    model = Avatar
    topic = DataEvents.AVATARS_UPDATED
    label = "avatar"

    def _find_match(self, candidate: Avatar, records: List[Avatar]) -> Optional[Avatar]:
        return find_avatar_duplicate(candidate, records)

    def list_for_product(self, product_id: str) -> List[Avatar]:
        return [a for a in self.list() if product_id and a.product_id == product_id]


SAMPLE_PRODUCTS = (
    Product(
        id="sample_1",
        name="Smart Water Bottle",
        description="Water bottle with a temperature sensor and daily intake memory",
        price=89.99,
        currency="ILS",
        image_url="https://example.com/smart-water-bottle",
        category="Health & Sport",
        brand="SmartHydrate",
        features=["Temperature sensor", "Daily memory", "App connection"],
        specifications={"Volume": "750ml", "Material": "Stainless steel", "Battery": "Up to 7 days"},
    ),
    Product(
        id="sample_2",
        name="Wireless Headphones",
        description="Headphones with active noise cancelling and great sound",
        price=299.99,
        currency="ILS",
        image_url="https://example.com/wireless-headphones",
        category="Electronics",
        brand="SoundPro",
        features=["Noise cancelling", "Bluetooth 5.0", "Up to 30 hours playback"],
        specifications={"Battery": "Up to 30 hours", "Connection": "Bluetooth 5.0", "Weight": "250g"},
    ),
    Product(
        id="sample_3",
        name="Ergonomic Pillow",
        description="Neck support pillow with advanced memory foam",
        price=159.99,
        currency="ILS",
        image_url="https://example.com/ergonomic-pillow",
        category="Home & Bedroom",
        brand="ComfortSleep",
        features=["Memory foam", "Ergonomic", "Breathable"],
        specifications={"Size": "60x40cm", "Material": "Memory foam", "Cover": "100% cotton"},
    ),
)
