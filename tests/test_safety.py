import os
import sys
from itertools import combinations

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from medsafe.models import (
    ActiveIngredient,
    DrugInteraction,
    DrugRecord,
    FoodInteraction,
    FoodRestriction,
    InteractionSeverity,
    UserProfile,
)
from medsafe.results import RiskLevel, summarize_results
from medsafe.safety import OtherDrugs, evaluate_confirmed_drugs, evaluate_drug


def make_drug(name: str, **kwargs) -> DrugRecord:
    kwargs.setdefault("drug_id", name.lower())
    return DrugRecord(display_name=name, **kwargs)


def interaction(name: str, severity: str) -> DrugInteraction:
    return DrugInteraction(name, InteractionSeverity(severity), f"Interacts with {name}")


def build_combiflam() -> DrugRecord:
    return make_drug(
        "Combiflam",
        brand_names=["Combiflam"],
        is_combination=True,
        active_ingredients=[ActiveIngredient("Ibuprofen", "400mg"), ActiveIngredient("Paracetamol", "325mg")],
        allergy_warnings=["NSAIDs"],
        condition_warnings=["Asthma", "Peptic Ulcer Disease"],
        drug_interactions=[interaction("Warfarin", "severe")],
        food_interactions=[FoodInteraction("Alcohol", FoodRestriction.AVOID, "Liver damage")],
    )


def test_allergy_makes_risk_high():
    result = evaluate_drug(build_combiflam(), {"NSAIDs"}, set(), None)

    assert result.matched_allergies == ("NSAIDs",)
    assert result.risk_level is RiskLevel.HIGH
    assert result.has_warnings


def test_severe_interaction_with_other_drug_makes_risk_high():
    aspirin = make_drug("Aspirin", drug_interactions=[interaction("Warfarin", "severe")])
    warfarin = make_drug("Warfarin")

    result = evaluate_drug(aspirin, other_drugs=OtherDrugs.excluding(aspirin, [warfarin]))

    assert len(result.matched_drug_interactions) == 1
    assert result.risk_level is RiskLevel.HIGH


def test_labels_match_case_insensitively_but_exactly():
    drug = build_combiflam()

    assert evaluate_drug(drug, {"nsaids"}).matched_allergies == ("NSAIDs",)
    assert evaluate_drug(drug, {"NSAID"}).matched_allergies == ()
    assert evaluate_drug(drug, conditions={"ASTHMA"}).matched_conditions == ("Asthma",)


def test_single_label_string_is_one_label():
    drug = make_drug("Testdrug", allergy_warnings=["N"], condition_warnings=["Asthma"])

    assert evaluate_drug(drug, "NSAIDs").matched_allergies == ()
    assert evaluate_drug(drug, conditions="asthma").matched_conditions == ("Asthma",)


def test_risk_precedence():
    drug = make_drug(
        "Testdrug",
        allergy_warnings=["Sulfa Drugs (Sulfonamides)"],
        condition_warnings=["Asthma"],
        drug_interactions=[interaction("Otherdrug", "mild"), interaction("Severedrug", "severe")],
    )
    mild_partner = OtherDrugs.excluding(drug, [make_drug("Otherdrug")])
    severe_partner = OtherDrugs.excluding(drug, [make_drug("Severedrug")])

    assert evaluate_drug(drug).risk_level is RiskLevel.LOW
    assert evaluate_drug(drug, {"Sulfa Drugs (Sulfonamides)"}).risk_level is RiskLevel.HIGH
    assert evaluate_drug(drug, conditions={"Asthma"}).risk_level is RiskLevel.MEDIUM
    assert evaluate_drug(drug, other_drugs=mild_partner).risk_level is RiskLevel.MEDIUM
    assert evaluate_drug(drug, other_drugs=severe_partner).risk_level is RiskLevel.HIGH
    assert evaluate_drug(drug, conditions={"Asthma"}, other_drugs=severe_partner).risk_level is RiskLevel.HIGH


def test_risk_levels_order_by_rank():
    assert RiskLevel.LOW < RiskLevel.MEDIUM < RiskLevel.HIGH
    assert RiskLevel.HIGH >= RiskLevel.HIGH
    assert max([RiskLevel.HIGH, RiskLevel.MEDIUM]) is RiskLevel.HIGH
    assert sorted([RiskLevel.HIGH, RiskLevel.LOW, RiskLevel.MEDIUM]) == [
        RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH,
    ]
    assert RiskLevel.MEDIUM == "medium"


def test_more_allergies_never_lower_the_risk():
    drug = build_combiflam()
    warfarin = make_drug("Warfarin")
    labels = ["NSAIDs", "Penicillins", "Aspirin (Salicylates)"]
    subsets = [set(c) for size in range(len(labels) + 1) for c in combinations(labels, size)]

    for other_drugs in (None, OtherDrugs.excluding(drug, [warfarin])):
        for subset in subsets:
            for superset in subsets:
                if not subset <= superset:
                    continue
                low = evaluate_drug(drug, subset, {"Asthma"}, other_drugs).risk_level
                high = evaluate_drug(drug, superset, {"Asthma"}, other_drugs).risk_level
                assert high.rank >= low.rank


def test_drug_is_never_checked_against_itself():
    drug = make_drug("Selfish", drug_interactions=[interaction("Selfish", "severe")])
    other = make_drug("Harmless")

    other_drugs = OtherDrugs.excluding(drug, [drug, other])
    result = evaluate_drug(drug, other_drugs=other_drugs)

    assert drug not in other_drugs
    assert len(other_drugs) == 1
    assert result.matched_drug_interactions == ()
    assert result.risk_level is RiskLevel.LOW


def test_other_drugs_must_be_built_with_excluding():
    drug = make_drug("Aspirin")

    with pytest.raises(TypeError):
        OtherDrugs(drug, [drug])
    with pytest.raises(TypeError):
        evaluate_drug(drug, other_drugs=[make_drug("Warfarin")])


def test_other_drugs_for_another_subject_is_rejected():
    aspirin = make_drug("Aspirin")
    warfarin = make_drug("Warfarin")

    with pytest.raises(AssertionError):
        evaluate_drug(aspirin, other_drugs=OtherDrugs.excluding(warfarin, [aspirin]))


def test_interaction_matches_other_drug_brand():
    aspirin = make_drug("Aspirin", drug_interactions=[interaction("Coumadin", "severe")])
    warfarin = make_drug("Warfarin", brand_names=["Coumadin"])

    result = evaluate_drug(aspirin, other_drugs=OtherDrugs.excluding(aspirin, [warfarin]))

    assert result.risk_level is RiskLevel.HIGH


def test_each_interaction_reported_once():
    aspirin = make_drug("Aspirin", drug_interactions=[interaction("Warfarin", "moderate")])
    warfarin = make_drug("Warfarin", brand_names=["Warfarin"])

    result = evaluate_drug(aspirin, other_drugs=OtherDrugs.excluding(aspirin, [warfarin]))

    assert len(result.matched_drug_interactions) == 1
    assert result.risk_level is RiskLevel.MEDIUM


def test_food_interactions_pass_through_without_raising_risk():
    drug = build_combiflam()

    result = evaluate_drug(drug)

    assert result.food_interactions == drug.food_interactions
    assert result.has_food_warning
    assert not result.has_warnings
    assert result.risk_level is RiskLevel.LOW


def test_drug_without_hazards_is_low_risk():
    result = evaluate_drug(make_drug("Placebo"), {"NSAIDs"}, {"Asthma"})

    assert result.risk_level is RiskLevel.LOW
    assert not result.has_warnings


def test_confirmed_drugs_are_checked_against_each_other():
    aspirin = make_drug("Aspirin", drug_interactions=[interaction("Warfarin", "severe")])
    warfarin = make_drug("Warfarin", drug_interactions=[interaction("Aspirin", "severe")])
    cetirizine = make_drug("Cetirizine")

    results = evaluate_confirmed_drugs([aspirin, warfarin, cetirizine], UserProfile())

    assert [r.drug.display_name for r in results] == ["Aspirin", "Warfarin", "Cetirizine"]
    assert [r.risk_level for r in results] == [RiskLevel.HIGH, RiskLevel.HIGH, RiskLevel.LOW]

    summary = summarize_results(results)
    assert summary["high_risk"] == 2
    assert summary["max_risk"] == "high"


def test_drugs_in_use_count_as_other_drugs():
    combiflam = build_combiflam()
    warfarin = make_drug("Warfarin")

    results = evaluate_confirmed_drugs([combiflam], UserProfile(), in_use=[warfarin])

    assert len(results) == 1
    assert results[0].risk_level is RiskLevel.HIGH


def test_duplicate_ingredient_is_informational():
    combiflam = build_combiflam()
    paracetamol = make_drug("Paracetamol")

    result = evaluate_confirmed_drugs([combiflam], UserProfile(), in_use=[paracetamol])[0]

    assert result.has_duplicate_therapy
    assert result.matched_duplicates[0].ingredient_name == "Paracetamol"
    assert result.matched_duplicates[0].other_drug_name == "Paracetamol"
    assert result.risk_level is RiskLevel.LOW
    assert not result.has_warnings


def test_result_to_dict():
    result = evaluate_drug(build_combiflam(), {"NSAIDs"})

    data = result.to_dict()

    assert data["drug"] == "Combiflam"
    assert data["risk_level"] == "high"
    assert data["matched_allergies"] == ["NSAIDs"]
    assert data["food_interactions"][0]["severity"] == "avoid"
