"""
Duplicate detection for products and avatars.

Payloads come from forms, the scraping webhook and admin tools, none of
which share a serialization, so every comparison runs on normalized
values: trimmed, case-folded strings; lists as sets; maps as sets of
(key, value) pairs. All functions here are pure.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from adcraft.models.avatar import Avatar
from adcraft.models.product import Product

TEXT = "text"
LIST = "list"
MAPPING = "mapping"

# Avatar core profile fields, keyed by their persisted name
AVATAR_CORE_FIELDS: Dict[str, str] = {
    "name": TEXT,
    "age": LIST,
    "gender": TEXT,
    "personality": TEXT,
    "interests": LIST,
    "background": TEXT,
    "goals": TEXT,
    "painPoints": LIST,
    "objections": LIST,
    "dreamOutcome": LIST,
    "preferences": MAPPING,
}


def normalize_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().casefold()


def normalize_list(value: Any) -> FrozenSet[str]:
    """Membership only: order and repeats are ignored, ``"a, b"`` == ``["b", "a"]``."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        items = [value]
    return frozenset(n for n in (normalize_text(item) for item in items) if n)


def normalize_mapping(value: Any) -> FrozenSet[Tuple[str, str]]:
    if not isinstance(value, dict):
        return frozenset()
    return frozenset((str(k), normalize_text(v)) for k, v in value.items())


_NORMALIZERS = {
    TEXT: normalize_text,
    LIST: normalize_list,
    MAPPING: normalize_mapping,
}


def _as_record(entity: Any) -> Dict[str, Any]:
    if isinstance(entity, (Avatar, Product)):
        return entity.to_dict()
    if isinstance(entity, dict):
        return entity
    raise TypeError(f"Cannot compare {type(entity).__name__}")


def normalize_avatar_for_comparison(avatar: Any) -> Dict[str, Any]:
    record = _as_record(avatar)
    return {
        name: _NORMALIZERS[kind](record.get(name))
        for name, kind in AVATAR_CORE_FIELDS.items()
    }


@dataclass(frozen=True)
class FieldMatch:
    is_match: bool
    matched_fields: List[str] = field(default_factory=list)
    mismatched_fields: List[str] = field(default_factory=list)


def check_core_fields_match(a: Any, b: Any, fields: Optional[Dict[str, str]] = None) -> FieldMatch:
    """Compare two records field by field and report which fields differ."""
    fields = fields or AVATAR_CORE_FIELDS
    left, right = _as_record(a), _as_record(b)

    matched: List[str] = []
    mismatched: List[str] = []
    for name, kind in fields.items():
        normalize = _NORMALIZERS[kind]
        if normalize(left.get(name)) == normalize(right.get(name)):
            matched.append(name)
        else:
            mismatched.append(name)

    return FieldMatch(is_match=not mismatched, matched_fields=matched, mismatched_fields=mismatched)


def products_match(a: Product, b: Product) -> bool:
    """Same normalized name, or same normalized non-empty image URL."""
    name_a, name_b = normalize_text(a.name), normalize_text(b.name)
    if name_a and name_a == name_b:
        return True
    url_a, url_b = normalize_text(a.image_url), normalize_text(b.image_url)
    return bool(url_a) and url_a == url_b


def find_product_duplicate(candidate: Product, products: Iterable[Product]) -> Optional[Product]:
    for existing in products:
        if products_match(existing, candidate):
            return existing
    return None


def same_product_scope(a: Avatar, b: Avatar) -> bool:
    """Absent and empty product ids share one scope; otherwise ids must be equal."""
    return (a.product_id or "") == (b.product_id or "")


def find_avatar_duplicate(candidate: Avatar, avatars: Iterable[Avatar]) -> Optional[Avatar]:
    for existing in avatars:
        if not same_product_scope(existing, candidate):
            continue
        if check_core_fields_match(existing, candidate).is_match:
            return existing
    return None
