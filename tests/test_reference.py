import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from medsafe.models import UserProfile
from medsafe.reference import (
    CHRONIC_CONDITIONS,
    DRUG_ALLERGIES,
    is_valid_allergy,
    is_valid_condition,
    search_allergies,
    search_conditions,
    unknown_profile_entries,
)
from medsafe.sample_data import sample_catalog


def test_search_is_case_insensitive_substring():
    assert "Diabetes Type 2" in search_conditions("diabetes")
    assert "Sulfa Drugs (Sulfonamides)" in search_allergies("SULFA")
    assert search_conditions("") == list(CHRONIC_CONDITIONS)
    assert search_allergies(None) == list(DRUG_ALLERGIES)


def test_validity_checks():
    assert is_valid_condition("asthma")
    assert not is_valid_condition("Broken Leg")
    assert is_valid_allergy("penicillins")
    assert not is_valid_allergy("Penicillin")


def test_unknown_profile_entries():
    profile = UserProfile(allergies={"NSAIDs (General)", "Cats"}, chronic_conditions={"Asthma", "Sore Knee"})

    assert unknown_profile_entries(profile) == {"allergies": ["Cats"], "chronic_conditions": ["Sore Knee"]}


def test_sample_catalog_uses_reference_labels():
    for drug in sample_catalog():
        for label in drug.allergy_warnings:
            assert is_valid_allergy(label), f"{drug.display_name}: {label}"
        for label in drug.condition_warnings:
            assert is_valid_condition(label), f"{drug.display_name}: {label}"
