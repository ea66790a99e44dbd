import os
import sys

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from medsafe.exceptions import DrugDataError, MedSafeError
from medsafe.models import (
    DrugRecord,
    FoodRestriction,
    InteractionSeverity,
    UserProfile,
)


def build_document() -> dict:
    return {
        "displayName": "Combiflam",
        "brandNames": ["Combiflam", " "],
        "category": "NSAID + Analgesic",
        "isCombination": True,
        "physicalForm": "Tablet",
        "activeIngredients": [
            {"name": "Ibuprofen", "strength": "400mg"},
            {"name": "Paracetamol", "strength": "325mg"},
        ],
        "allergyWarnings": ["NSAIDs (General)"],
        "conditionWarnings": ["Asthma"],
        "drugInteractions": [
            {"drugName": "Warfarin", "severity": "Severe", "description": "Bleeding risk"},
        ],
        "foodInteractions": [
            {"food": "Alcohol", "severity": "avoid", "description": "Liver damage"},
        ],
        "createdAt": "2024-03-01T10:00:00Z",
    }


def test_from_dict_reads_store_document():
    record = DrugRecord.from_dict(build_document(), "combiflam")

    assert record.drug_id == "combiflam"
    assert record.brand_names == ("Combiflam",)
    assert record.is_combination
    assert record.ingredient_names == ["Ibuprofen", "Paracetamol"]
    assert record.ingredients_display == "Ibuprofen + Paracetamol"
    assert record.drug_interactions[0].severity is InteractionSeverity.SEVERE
    assert record.food_interactions[0].restriction is FoodRestriction.AVOID
    assert record.created_at.year == 2024
    assert str(record) == "Combiflam (Ibuprofen + Paracetamol)"


def test_from_dict_accepts_snake_case_and_generic_name():
    record = DrugRecord.from_dict({
        "genericName": "Paracetamol",
        "brand_names": ["Crocin"],
        "is_combination": "false",
        "drug_interactions": [{"drug_name": "Warfarin"}],
    })

    assert record.display_name == "Paracetamol"
    assert record.generic_name == "Paracetamol"
    assert record.brand_names == ("Crocin",)
    assert not record.is_combination
    assert record.drug_interactions[0].severity is InteractionSeverity.MILD
    assert record.ingredient_names == ["Paracetamol"]
    assert record.physical_form == "Tablet"


def test_from_dict_rejects_missing_name():
    with pytest.raises(DrugDataError):
        DrugRecord.from_dict({"brandNames": ["Crocin"]})


def test_from_dict_rejects_unknown_severity():
    document = build_document()
    document["drugInteractions"][0]["severity"] = "fatal"

    with pytest.raises(DrugDataError) as excinfo:
        DrugRecord.from_dict(document)

    assert "Combiflam" in str(excinfo.value)
    assert isinstance(excinfo.value, MedSafeError)
    assert isinstance(excinfo.value, ValueError)


def test_from_dict_rejects_non_list_field():
    with pytest.raises(DrugDataError):
        DrugRecord.from_dict({"displayName": "Crocin", "brandNames": "Crocin"})


def test_to_dict_round_trip_keeps_camel_case_keys():
    record = DrugRecord.from_dict(build_document(), "combiflam")

    data = record.to_dict()

    assert data["displayName"] == "Combiflam"
    assert data["genericName"] == "Combiflam"
    assert data["foodInteractions"][0] == {"food": "Alcohol", "severity": "avoid", "description": "Liver damage"}
    assert DrugRecord.from_dict(data, "combiflam") == record


def test_enum_parsing():
    assert InteractionSeverity.parse(" MODERATE ") is InteractionSeverity.MODERATE
    assert InteractionSeverity.parse(None) is InteractionSeverity.MILD
    assert FoodRestriction.parse("") is FoodRestriction.CAUTION
    assert InteractionSeverity.SEVERE.rank > InteractionSeverity.MODERATE.rank > InteractionSeverity.MILD.rank

    with pytest.raises(DrugDataError):
        FoodRestriction.parse("never")


def test_enums_order_by_rank():
    assert InteractionSeverity.MILD < InteractionSeverity.SEVERE
    assert max([InteractionSeverity.SEVERE, InteractionSeverity.MODERATE]) is InteractionSeverity.SEVERE
    assert FoodRestriction.AVOID > FoodRestriction.LIMIT
    assert FoodRestriction.CAUTION >= FoodRestriction.CAUTION
    assert sorted([FoodRestriction.AVOID, FoodRestriction.LIMIT, FoodRestriction.CAUTION]) == [
        FoodRestriction.LIMIT, FoodRestriction.CAUTION, FoodRestriction.AVOID,
    ]
    assert InteractionSeverity.SEVERE == "severe"


def test_record_identity():
    first = DrugRecord(display_name="Aspirin", drug_id="aspirin")
    renamed = DrugRecord(display_name="Aspirin 75", drug_id="aspirin")
    other = DrugRecord(display_name="Aspirin", drug_id="ecosprin")

    assert first == renamed
    assert first != other
    assert len({first, renamed}) == 1

    assert DrugRecord(display_name="Aspirin") == DrugRecord(display_name="Aspirin")
    assert DrugRecord(display_name="Aspirin") != DrugRecord(display_name="Aspirin", category="NSAID")


def test_record_fields_are_immutable_tuples():
    record = DrugRecord(display_name="Aspirin", brand_names=["Ecosprin"])

    assert record.brand_names == ("Ecosprin",)
    with pytest.raises(AttributeError):
        record.display_name = "Other"


def test_user_profile_cleans_labels():
    profile = UserProfile.from_dict({"allergies": ["NSAIDs", " ", "Penicillins"], "chronicConditions": ["Asthma"]})

    assert profile.allergies == frozenset({"NSAIDs", "Penicillins"})
    assert profile.chronic_conditions == frozenset({"Asthma"})
