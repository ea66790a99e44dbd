#!/usr/bin/env python3
"""
Scan Text Checker
Match scanned medicine text against the drug catalog and show safety warnings
"""

import sys
import argparse
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from medsafe.catalog import Catalog
from medsafe.config import Settings, build_catalog, setup_logging
from medsafe.matcher import find_drugs_in_text
from medsafe.models import UserProfile
from medsafe.results import RiskLevel
from medsafe.safety import evaluate_confirmed_drugs
from medsafe.utils import create_summary_stats, format_warning_result, load_json_config, save_results_csv



def build_profile(args) -> UserProfile:
    allergies = list(args.allergy or [])
    conditions = list(args.condition or [])

    if args.profile:
        stored = UserProfile.from_dict(load_json_config(args.profile))
        allergies.extend(stored.allergies)
        conditions.extend(stored.chronic_conditions)

    return UserProfile(allergies=allergies, chronic_conditions=conditions)


def check_scan_text(text: str, profile: UserProfile, catalog: Catalog,
                    taking: list = None, csv_path: str = None) -> bool:
    """
    Match text, evaluate every matched drug and print a report

    Returns:
        False when nothing matched, True otherwise
    """
    print("🔍 STEP 1: Drug Matching")
    print("-" * 30)
    drugs = find_drugs_in_text(text, catalog)

    if not drugs:
        print("⚠️  No catalog drugs found in the text")
        print("💡 Suggestions:")
        print("   • Make sure the drug or brand name is visible on the strip")
        print("   • Try scanning again with better lighting")
        return False

    print(f"✅ Found {len(drugs)} drugs")
    for i, drug in enumerate(drugs, 1):
        print(f"  {i}. {drug}")

    in_use = []
    for name in taking or []:
        in_use.extend(d for d in find_drugs_in_text(name, catalog) if d not in in_use)
    if in_use:
        print(f"\n💊 Already taking: {', '.join(d.display_name for d in in_use)}")

    print(f"\n⚠️  STEP 2: Safety Check")
    print("-" * 30)
    results = evaluate_confirmed_drugs(drugs, profile, in_use=in_use)

    for result in results:
        print(format_warning_result(result))
        for food in result.food_interactions:
            print(f"   🍽  {food.food} ({food.restriction.value}): {food.description}")
        for duplicate in result.matched_duplicates:
            print(f"   ⚠️  Already taking {duplicate.ingredient_name} in {duplicate.other_drug_name}")

    stats = create_summary_stats(results)
    print(f"\n📊 Summary: {stats['total']} drugs, {stats['with_warnings']} with warnings, "
          f"max risk {stats['max_risk']}")
    if stats['has_high_risk']:
        print(f"🔴 {RiskLevel.HIGH.value.upper()} RISK: consult a doctor or pharmacist before taking")

    if csv_path:
        save_results_csv(results, csv_path)
        print(f"💾 Saved results to {csv_path}")

    return True


def main():
    parser = argparse.ArgumentParser(description='Check scanned medicine text for safety warnings')
    parser.add_argument('text', nargs='?', help='Scanned text (or use --file)')
    parser.add_argument('--file', help='Read the scanned text from a file')
    parser.add_argument('--allergy', action='append', help='User allergy label (repeatable)')
    parser.add_argument('--condition', action='append', help='User chronic condition (repeatable)')
    parser.add_argument('--profile', help='JSON file with "allergies" and "chronicConditions"')
    parser.add_argument('--taking', action='append', help='Drug already being taken (repeatable)')
    parser.add_argument('--csv', help='Write results to this CSV file')
    parser.add_argument('--debug', action='store_true', help='Show debug logging')

    args = parser.parse_args()

    settings = Settings.from_env()
    setup_logging('DEBUG' if args.debug else settings.log_level)

    if args.file:
        file_path = Path(args.file)
        if not file_path.exists():
            print(f"❌ File not found: {file_path}")
            sys.exit(1)
        text = file_path.read_text(encoding='utf-8')
    elif args.text:
        text = args.text
    else:
        parser.error('provide the scanned text or --file')

    catalog = build_catalog(settings)
    ok = check_scan_text(text, build_profile(args), catalog, taking=args.taking, csv_path=args.csv)
    sys.exit(0 if ok else 2)


if __name__ == "__main__":
    main()
