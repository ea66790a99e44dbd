import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from .results import RiskLevel, WarningResult, summarize_results

# Set up logging
logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    'Drug', 'Ingredients', 'Risk Level', 'Allergy Warnings', 'Condition Warnings',
    'Drug Interactions', 'Food Interactions', 'Duplicate Therapy',
]


def format_warning_result(result: WarningResult) -> str:
    """
    Format one evaluated drug as a single line
    """
    icon = {RiskLevel.LOW: '🟢', RiskLevel.MEDIUM: '🟡', RiskLevel.HIGH: '🔴'}[result.risk_level]
    line = f"{icon} {result.drug} ({result.risk_level.value.title()} risk)"
    if not result.has_warnings:
        return line
    details = []
    if result.matched_allergies:
        details.append(f"allergy: {', '.join(result.matched_allergies)}")
    if result.matched_conditions:
        details.append(f"condition: {', '.join(result.matched_conditions)}")
    for interaction in result.matched_drug_interactions:
        details.append(f"interacts with {interaction.drug_name} ({interaction.severity.value})")
    return f"{line}: " + "; ".join(details)


def results_to_dataframe(results: List[WarningResult]) -> pd.DataFrame:
    """One row per evaluated drug"""
    rows = []
    for result in results:
        rows.append({
            'Drug': result.drug.display_name,
            'Ingredients': result.drug.ingredients_display,
            'Risk Level': result.risk_level.value,
            'Allergy Warnings': '; '.join(result.matched_allergies),
            'Condition Warnings': '; '.join(result.matched_conditions),
            'Drug Interactions': '; '.join(
                f"{i.drug_name} ({i.severity.value}): {i.description}"
                for i in result.matched_drug_interactions
            ),
            'Food Interactions': '; '.join(
                f"{f.food} ({f.restriction.value}): {f.description}"
                for f in result.food_interactions
            ),
            'Duplicate Therapy': '; '.join(
                f"{d.ingredient_name} in {d.other_drug_name}" for d in result.matched_duplicates
            ),
        })
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def save_results_csv(results: List[WarningResult], path: Optional[str] = None) -> str:
    """
    Export evaluated drugs as CSV

    Args:
        results: Evaluated drugs
        path: Optional file to write as well

    Returns:
        The CSV text
    """
    csv_text = results_to_dataframe(results).to_csv(index=False)
    if path:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(csv_text)
        logger.info(f"Saved {len(results)} results to {path}")
    return csv_text


def create_summary_stats(results: List[WarningResult]) -> Dict[str, Any]:
    """
    Create summary statistics for a scan, with a timestamp
    """
    stats = summarize_results(results)
    stats['food_warnings'] = sum(1 for result in results if result.has_food_warning)
    stats['duplicate_therapy'] = sum(1 for result in results if result.has_duplicate_therapy)
    stats['analysis_timestamp'] = datetime.now().isoformat()
    return stats


def load_json_config(config_path: str) -> Dict[str, Any]:
    """
    Load JSON configuration file
    """
    try:
        with open(config_path, 'r') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading config from {config_path}: {e}")
        return {}


def save_json_config(config: Dict[str, Any], config_path: str) -> bool:
    """
    Save configuration to JSON file
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)
        return True
    except (OSError, TypeError) as e:
        logger.error(f"Error saving config to {config_path}: {e}")
        return False
