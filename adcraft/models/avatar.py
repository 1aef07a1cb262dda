"""
Avatar (target-audience persona) data contract.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Union

from adcraft.errors import DataContractError
from adcraft.models.product import as_list, pick


@dataclass(frozen=True)
class Avatar:
    """
    Target-audience persona scoped to one Product.

    ``product_id`` is a non-enforced reference to ``Product.id`` and may be
    absent or dangling until the integrity repairer links it. ``id`` is
    assigned by the caller.
    """
    name: str
    age: Union[str, List[str]] = ""
    gender: str = ""
    personality: str = ""
    interests: List[str] = field(default_factory=list)
    background: str = ""
    goals: str = ""
    pain_points: List[str] = field(default_factory=list)
    objections: List[str] = field(default_factory=list)
    dream_outcome: List[str] = field(default_factory=list)
    preferences: Dict[str, str] = field(default_factory=dict)

    # System fields
    id: Optional[str] = None
    created_at: Optional[str] = None
    product_id: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return bool(self.name and self.name.strip())

    @property
    def is_linked(self) -> bool:
        return bool(self.product_id)

    def to_dict(self) -> Dict[str, Any]:
        """Persisted (camelCase) layout. Absent optional fields are omitted."""
        data: Dict[str, Any] = {
            "name": self.name,
            "age": list(self.age) if isinstance(self.age, list) else self.age,
            "gender": self.gender,
            "personality": self.personality,
            "interests": list(self.interests),
            "background": self.background,
            "goals": self.goals,
            "painPoints": list(self.pain_points),
            "objections": list(self.objections),
            "dreamOutcome": list(self.dream_outcome),
            "preferences": dict(self.preferences),
        }
        if self.id is not None:
            data["id"] = self.id
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        if self.product_id is not None:
            data["productId"] = self.product_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Avatar":
        """
        Build an Avatar from a stored record.

        Raises:
            DataContractError: If the record is not a mapping or a field
                has the wrong type.
        """
        if not isinstance(data, dict):
            raise DataContractError(f"Avatar record must be a mapping, got {type(data).__name__}")

        age = data.get("age") or ""
        try:
            return cls(
                name=data.get("name") or "",
                age=list(age) if isinstance(age, (list, tuple)) else str(age),
                gender=data.get("gender") or "",
                personality=data.get("personality") or "",
                interests=as_list(data.get("interests")),
                background=data.get("background") or "",
                goals=data.get("goals") or "",
                pain_points=as_list(pick(data, "painPoints", "pain_points")),
                objections=as_list(data.get("objections")),
                dream_outcome=as_list(pick(data, "dreamOutcome", "dream_outcome")),
                preferences=dict(data.get("preferences") or {}),
                id=data.get("id"),
                created_at=pick(data, "createdAt", "created_at"),
                product_id=pick(data, "productId", "product_id"),
            )
        except (TypeError, ValueError) as e:
            raise DataContractError(f"Invalid avatar record: {e}") from e
