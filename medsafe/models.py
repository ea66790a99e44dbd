import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .exceptions import DrugDataError

logger = logging.getLogger(__name__)


class RankOrdered:
    """
    Enum mixin comparing members by rank. A plain str-valued enum compares
    alphabetically, so "high" < "low".
    """

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank >= other.rank


class InteractionSeverity(RankOrdered, str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]

    @classmethod
    def parse(cls, value: Any) -> "InteractionSeverity":
        """Parse a stored severity label, defaulting to mild when absent"""
        return _parse_enum(cls, value, cls.MILD, "interaction severity")


class FoodRestriction(RankOrdered, str, Enum):
    LIMIT = "limit"
    CAUTION = "caution"
    AVOID = "avoid"

    @property
    def rank(self) -> int:
        return _RESTRICTION_RANKS[self]

    @classmethod
    def parse(cls, value: Any) -> "FoodRestriction":
        """Parse a stored food restriction label, defaulting to caution when absent"""
        return _parse_enum(cls, value, cls.CAUTION, "food restriction")


_SEVERITY_RANKS = {
    InteractionSeverity.MILD: 0,
    InteractionSeverity.MODERATE: 1,
    InteractionSeverity.SEVERE: 2,
}

_RESTRICTION_RANKS = {
    FoodRestriction.LIMIT: 0,
    FoodRestriction.CAUTION: 1,
    FoodRestriction.AVOID: 2,
}


def _parse_enum(enum_cls, value, default, label: str):
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    text = str(value).strip().lower()
    if not text:
        return default
    try:
        return enum_cls(text)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise DrugDataError(f"Unrecognized {label} '{value}' (expected one of: {allowed})") from None


@dataclass(frozen=True)
class ActiveIngredient:
    """One active substance of a drug, with an optional strength like '400mg'"""
    name: str
    strength: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ActiveIngredient":
        if isinstance(data, ActiveIngredient):
            return data
        if isinstance(data, str):
            return cls(name=data.strip())
        if not isinstance(data, Mapping):
            raise DrugDataError(f"Invalid active ingredient entry: {data!r}")
        strength = data.get("strength")
        return cls(
            name=str(data.get("name") or "").strip(),
            strength=str(strength).strip() if strength else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "strength": self.strength}

    def __str__(self) -> str:
        if self.strength:
            return f"{self.name} {self.strength}"
        return self.name


@dataclass(frozen=True)
class DrugInteraction:
    drug_name: str
    severity: InteractionSeverity
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "DrugInteraction":
        if isinstance(data, DrugInteraction):
            return data
        if not isinstance(data, Mapping):
            raise DrugDataError(f"Invalid drug interaction entry: {data!r}")
        return cls(
            drug_name=str(data.get("drugName") or data.get("drug_name") or "").strip(),
            severity=InteractionSeverity.parse(data.get("severity")),
            description=str(data.get("description") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "drugName": self.drug_name,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class FoodInteraction:
    food: str
    restriction: FoodRestriction
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "FoodInteraction":
        if isinstance(data, FoodInteraction):
            return data
        if not isinstance(data, Mapping):
            raise DrugDataError(f"Invalid food interaction entry: {data!r}")
        # Stored documents call the restriction "severity"
        restriction = data.get("severity", data.get("restriction"))
        return cls(
            food=str(data.get("food") or "").strip(),
            restriction=FoodRestriction.parse(restriction),
            description=str(data.get("description") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "food": self.food,
            "severity": self.restriction.value,
            "description": self.description,
        }


@dataclass(frozen=True, eq=False)
class DrugRecord:
    """
    A catalog drug, either a single ingredient or a combination product.

    For single-ingredient drugs:
        display_name = "Paracetamol"
        is_combination = False
        active_ingredients = () (or one item)

    For combination drugs:
        display_name = "Combiflam"
        is_combination = True
        active_ingredients = (Ibuprofen 400mg, Paracetamol 325mg)

    Ingredient names of a combination must be spelled like the display name
    of the matching single record, otherwise the matcher cannot suppress it.
    """
    display_name: str
    brand_names: Tuple[str, ...] = ()
    category: str = ""
    is_combination: bool = False
    active_ingredients: Tuple[ActiveIngredient, ...] = ()
    allergy_warnings: Tuple[str, ...] = ()
    condition_warnings: Tuple[str, ...] = ()
    drug_interactions: Tuple[DrugInteraction, ...] = ()
    food_interactions: Tuple[FoodInteraction, ...] = ()
    physical_form: str = "Tablet"
    drug_id: Optional[str] = None
    created_at: Optional[datetime] = field(default=None, repr=False)
    updated_at: Optional[datetime] = field(default=None, repr=False)

    def __post_init__(self):
        # Accept lists from callers but keep the record immutable
        for name in ("brand_names", "active_ingredients", "allergy_warnings",
                     "condition_warnings", "drug_interactions", "food_interactions"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    @property
    def generic_name(self) -> str:
        return self.display_name

    @property
    def ingredient_names(self) -> List[str]:
        """Ingredient names used for safety checks"""
        if not self.active_ingredients:
            return [self.display_name]
        return [ingredient.name for ingredient in self.active_ingredients]

    @property
    def ingredients_display(self) -> str:
        if not self.active_ingredients:
            return self.display_name
        return " + ".join(ingredient.name for ingredient in self.active_ingredients)

    def _values(self) -> tuple:
        return tuple(getattr(self, f.name) for f in fields(self))

    def __eq__(self, other):
        if not isinstance(other, DrugRecord):
            return NotImplemented
        if self.drug_id is not None or other.drug_id is not None:
            return self.drug_id == other.drug_id
        return self._values() == other._values()

    def __hash__(self):
        if self.drug_id is not None:
            return hash(self.drug_id)
        return hash(self.display_name.lower())

    def __str__(self) -> str:
        if self.is_combination and self.active_ingredients:
            return f"{self.display_name} ({self.ingredients_display})"
        return self.display_name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], drug_id: Optional[str] = None) -> "DrugRecord":
        """
        Build a record from a stored document.

        Accepts the document store's camelCase keys as well as snake_case
        ones. Older documents only carry 'genericName'.

        Raises:
            DrugDataError: if the document has no name or carries an
                unrecognized severity/restriction value
        """
        if not isinstance(data, Mapping):
            raise DrugDataError(f"Drug document must be a mapping, got {type(data).__name__}")

        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        display_name = str(pick("displayName", "display_name", "genericName", "generic_name", default="")).strip()
        if not display_name:
            raise DrugDataError(f"Drug document {drug_id or '<new>'} has no display name")

        record_id = drug_id if drug_id is not None else pick("id", "drug_id")

        try:
            return cls(
                drug_id=str(record_id) if record_id is not None else None,
                display_name=display_name,
                brand_names=_string_tuple(pick("brandNames", "brand_names")),
                category=str(pick("category", default="")).strip(),
                is_combination=_as_bool(pick("isCombination", "is_combination", default=False)),
                physical_form=str(pick("physicalForm", "physical_form", default="Tablet")),
                active_ingredients=tuple(
                    ActiveIngredient.from_dict(item)
                    for item in _as_list(pick("activeIngredients", "active_ingredients"))
                ),
                allergy_warnings=_string_tuple(pick("allergyWarnings", "allergy_warnings")),
                condition_warnings=_string_tuple(pick("conditionWarnings", "condition_warnings")),
                drug_interactions=tuple(
                    DrugInteraction.from_dict(item)
                    for item in _as_list(pick("drugInteractions", "drug_interactions"))
                ),
                food_interactions=tuple(
                    FoodInteraction.from_dict(item)
                    for item in _as_list(pick("foodInteractions", "food_interactions"))
                ),
                created_at=_as_datetime(pick("createdAt", "created_at")),
                updated_at=_as_datetime(pick("updatedAt", "updated_at")),
            )
        except DrugDataError as e:
            raise DrugDataError(f"{display_name}: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the document store's camelCase form"""
        return {
            "displayName": self.display_name,
            "brandNames": list(self.brand_names),
            "category": self.category,
            "isCombination": self.is_combination,
            "physicalForm": self.physical_form,
            "activeIngredients": [i.to_dict() for i in self.active_ingredients],
            "allergyWarnings": list(self.allergy_warnings),
            "conditionWarnings": list(self.condition_warnings),
            "drugInteractions": [i.to_dict() for i in self.drug_interactions],
            "foodInteractions": [i.to_dict() for i in self.food_interactions],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            # Older readers still look up genericName
            "genericName": self.display_name,
        }


@dataclass(frozen=True)
class UserProfile:
    """Allergies and chronic conditions supplied per evaluation"""
    allergies: FrozenSet[str] = frozenset()
    chronic_conditions: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "allergies", frozenset(_clean_strings(self.allergies)))
        object.__setattr__(self, "chronic_conditions", frozenset(_clean_strings(self.chronic_conditions)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        return cls(
            allergies=_as_list(data.get("allergies")),
            chronic_conditions=_as_list(data.get("chronicConditions", data.get("chronic_conditions"))),
        )


def _clean_strings(values: Iterable[Any]) -> List[str]:
    if isinstance(values, str):
        values = [values]
    cleaned = []
    for value in values:
        text = str(value).strip()
        if text:
            cleaned.append(text)
    return cleaned


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    raise DrugDataError(f"Expected a list, got {type(value).__name__}")


def _string_tuple(value: Any) -> Tuple[str, ...]:
    return tuple(_clean_strings(_as_list(value)))


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "1"):
            return True
        if text in ("false", "no", "0", ""):
            return False
        raise DrugDataError(f"Invalid boolean value '{value}'")
    return bool(value)


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparseable timestamp: {value}")
        return None
