import logging
from typing import Iterable, Iterator, List, Optional, Sequence

from .models import DrugInteraction, DrugRecord, UserProfile
from .results import DuplicateIngredient, WarningResult

# Set up logging
logger = logging.getLogger(__name__)

_BUILD_TOKEN = object()


class OtherDrugs:
    """
    Drugs in use alongside a subject drug, with the subject removed.

    Only OtherDrugs.excluding() builds one, so a drug can never be checked
    against its own interaction list.
    """

    __slots__ = ("_subject", "_drugs")

    def __init__(self, subject: DrugRecord, drugs: Sequence[DrugRecord], _token=None):
        if _token is not _BUILD_TOKEN:
            raise TypeError("Use OtherDrugs.excluding(subject, drugs) to build an OtherDrugs collection")
        self._subject = subject
        self._drugs = tuple(drugs)

    @classmethod
    def excluding(cls, subject: DrugRecord, drugs: Iterable[DrugRecord]) -> "OtherDrugs":
        return cls(subject, [drug for drug in drugs if drug != subject], _token=_BUILD_TOKEN)

    @property
    def subject(self) -> DrugRecord:
        return self._subject

    def __iter__(self) -> Iterator[DrugRecord]:
        return iter(self._drugs)

    def __len__(self) -> int:
        return len(self._drugs)

    def __contains__(self, drug) -> bool:
        return drug in self._drugs

    def __repr__(self) -> str:
        names = ", ".join(drug.display_name for drug in self._drugs)
        return f"OtherDrugs(subject={self._subject.display_name!r}, drugs=[{names}])"


def _lower_set(values: Iterable[str]) -> set:
    if isinstance(values, str):
        values = [values]
    return {value.lower() for value in values}


def _interaction_applies(interaction: DrugInteraction, other_drugs: OtherDrugs) -> bool:
    target = interaction.drug_name.lower()
    for other in other_drugs:
        if other.display_name.lower() == target:
            return True
        if any(brand.lower() == target for brand in other.brand_names):
            return True
    return False


def _find_duplicates(drug: DrugRecord, other_drugs: OtherDrugs) -> List[DuplicateIngredient]:
    duplicates = []
    own_ingredients = [name for name in drug.ingredient_names if name.strip()]
    for other in other_drugs:
        other_ingredients = _lower_set(other.ingredient_names)
        for name in own_ingredients:
            if name.lower() in other_ingredients:
                duplicate = DuplicateIngredient(ingredient_name=name, other_drug_name=other.display_name)
                if duplicate not in duplicates:
                    duplicates.append(duplicate)
    return duplicates


def evaluate_drug(drug: DrugRecord,
                  allergies: Iterable[str] = (),
                  conditions: Iterable[str] = (),
                  other_drugs: Optional[OtherDrugs] = None) -> WarningResult:
    """
    Check one drug against a user's allergies, chronic conditions and the
    other drugs in use.

    Args:
        drug: The drug to check
        allergies: User allergy labels, matched case-insensitively
        conditions: User chronic condition labels, matched case-insensitively
        other_drugs: Built with OtherDrugs.excluding(drug, ...); None when
            nothing else is being taken

    Returns:
        WarningResult with the matched hazards and derived risk level
    """
    if other_drugs is None:
        other_drugs = OtherDrugs.excluding(drug, ())
    elif not isinstance(other_drugs, OtherDrugs):
        raise TypeError(
            f"other_drugs must be built with OtherDrugs.excluding(), got {type(other_drugs).__name__}"
        )
    assert other_drugs.subject == drug and drug not in other_drugs, \
        "other_drugs was built for a different subject drug"

    user_allergies = _lower_set(allergies)
    user_conditions = _lower_set(conditions)

    matched_allergies = tuple(w for w in drug.allergy_warnings if w.lower() in user_allergies)
    matched_conditions = tuple(w for w in drug.condition_warnings if w.lower() in user_conditions)
    matched_interactions = tuple(
        interaction for interaction in drug.drug_interactions
        if _interaction_applies(interaction, other_drugs)
    )

    result = WarningResult(
        drug=drug,
        matched_allergies=matched_allergies,
        matched_conditions=matched_conditions,
        matched_drug_interactions=matched_interactions,
        food_interactions=drug.food_interactions,
        matched_duplicates=tuple(_find_duplicates(drug, other_drugs)),
    )

    logger.debug(f"Evaluated {drug.display_name}: risk {result.risk_level.value}")
    return result


def evaluate_confirmed_drugs(confirmed: Sequence[DrugRecord],
                             profile: UserProfile,
                             in_use: Iterable[DrugRecord] = ()) -> List[WarningResult]:
    """
    Evaluate every drug the user confirmed after a scan

    Args:
        confirmed: Drugs confirmed by the user, in display order
        profile: The user's allergies and chronic conditions
        in_use: Drugs already being taken, e.g. from the medicine cabinet

    Returns:
        One WarningResult per confirmed drug; each drug is checked against
        the other confirmed drugs plus the drugs in use
    """
    confirmed = list(confirmed)
    candidates = confirmed + list(in_use)

    results = [
        evaluate_drug(
            drug,
            profile.allergies,
            profile.chronic_conditions,
            OtherDrugs.excluding(drug, candidates),
        )
        for drug in confirmed
    ]

    flagged = sum(1 for result in results if result.has_warnings)
    logger.info(f"Evaluated {len(results)} drugs, {flagged} with warnings")
    return results
