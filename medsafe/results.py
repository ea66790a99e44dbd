from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

from .models import DrugInteraction, DrugRecord, FoodInteraction, InteractionSeverity, RankOrdered


class RiskLevel(RankOrdered, str, Enum):
    """Risk tier of an evaluated drug, ordered low < medium < high"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANKS[self]


_RISK_RANKS = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


def highest_risk(levels: Iterable[RiskLevel]) -> RiskLevel:
    """Return the most severe tier, or LOW for an empty input"""
    return max(levels, key=lambda level: level.rank, default=RiskLevel.LOW)


@dataclass(frozen=True)
class DuplicateIngredient:
    """An ingredient the evaluated drug shares with another drug in use"""
    ingredient_name: str
    other_drug_name: str


@dataclass(frozen=True)
class WarningResult:
    """
    Outcome of checking one drug against a user profile and the other
    drugs in use. Presentation and alerting branch on risk_level and
    has_warnings only.
    """
    drug: DrugRecord
    matched_allergies: Tuple[str, ...] = ()
    matched_conditions: Tuple[str, ...] = ()
    matched_drug_interactions: Tuple[DrugInteraction, ...] = ()
    food_interactions: Tuple[FoodInteraction, ...] = ()
    matched_duplicates: Tuple[DuplicateIngredient, ...] = ()

    @property
    def risk_level(self) -> RiskLevel:
        # Order matters: allergy and severe interaction signals are never masked
        if self.matched_allergies:
            return RiskLevel.HIGH
        if any(i.severity is InteractionSeverity.SEVERE for i in self.matched_drug_interactions):
            return RiskLevel.HIGH
        if self.matched_conditions:
            return RiskLevel.MEDIUM
        if self.matched_drug_interactions:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    @property
    def has_warnings(self) -> bool:
        return bool(self.matched_allergies or self.matched_conditions or self.matched_drug_interactions)

    @property
    def has_allergy_warning(self) -> bool:
        return bool(self.matched_allergies)

    @property
    def has_condition_warning(self) -> bool:
        return bool(self.matched_conditions)

    @property
    def has_drug_interaction(self) -> bool:
        return bool(self.matched_drug_interactions)

    @property
    def has_food_warning(self) -> bool:
        return bool(self.food_interactions)

    @property
    def has_duplicate_therapy(self) -> bool:
        return bool(self.matched_duplicates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "drug_id": self.drug.drug_id,
            "drug": self.drug.display_name,
            "risk_level": self.risk_level.value,
            "has_warnings": self.has_warnings,
            "matched_allergies": list(self.matched_allergies),
            "matched_conditions": list(self.matched_conditions),
            "matched_drug_interactions": [i.to_dict() for i in self.matched_drug_interactions],
            "food_interactions": [f.to_dict() for f in self.food_interactions],
            "matched_duplicates": [
                {"ingredient": d.ingredient_name, "other_drug": d.other_drug_name}
                for d in self.matched_duplicates
            ],
        }


def summarize_results(results: List[WarningResult]) -> Dict[str, Any]:
    """
    Get summary statistics for a batch of evaluated drugs
    """
    counts = {level: 0 for level in RiskLevel}
    for result in results:
        counts[result.risk_level] += 1

    max_risk = highest_risk(result.risk_level for result in results)

    return {
        'total': len(results),
        'high_risk': counts[RiskLevel.HIGH],
        'medium_risk': counts[RiskLevel.MEDIUM],
        'low_risk': counts[RiskLevel.LOW],
        'with_warnings': sum(1 for result in results if result.has_warnings),
        'max_risk': max_risk.value if results else 'none',
        'has_high_risk': counts[RiskLevel.HIGH] > 0,
    }
