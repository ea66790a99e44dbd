"""
MedSafe - Drug Identification & Safety Warning Engine

This package contains the core functionality for scanned-medicine safety checks:
- Drug catalog snapshots and catalog sources
- Matching OCR text to catalog drugs (combinations first)
- Allergy, condition and drug interaction warnings with risk tiers
- Medicine cabinet expiry tracking
- Medical reference vocabulary
"""

__version__ = "1.0.0"
__author__ = "MedSafe Team"

# Import main functions for easy access
from .catalog import Catalog, CsvCatalogSource, JsonCatalogSource, StaticCatalogSource
from .exceptions import CatalogLoadError, DoseRefusedError, DrugDataError, MedSafeError
from .matcher import DrugTextMatcher, find_drugs_in_text, tokenize
from .models import (
    ActiveIngredient,
    DrugInteraction,
    DrugRecord,
    FoodInteraction,
    FoodRestriction,
    InteractionSeverity,
    UserProfile,
)
from .remote import HttpCatalogSource
from .results import RiskLevel, WarningResult, summarize_results
from .safety import OtherDrugs, evaluate_confirmed_drugs, evaluate_drug

__all__ = [
    "Catalog",
    "CsvCatalogSource",
    "JsonCatalogSource",
    "StaticCatalogSource",
    "HttpCatalogSource",
    "CatalogLoadError",
    "DrugDataError",
    "DoseRefusedError",
    "MedSafeError",
    "DrugTextMatcher",
    "find_drugs_in_text",
    "tokenize",
    "ActiveIngredient",
    "DrugInteraction",
    "DrugRecord",
    "FoodInteraction",
    "FoodRestriction",
    "InteractionSeverity",
    "UserProfile",
    "RiskLevel",
    "WarningResult",
    "summarize_results",
    "OtherDrugs",
    "evaluate_confirmed_drugs",
    "evaluate_drug",
]
