#!/usr/bin/env python3
"""
Catalog Validator
Check a JSON/CSV catalog export before it is loaded by the matcher
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List

from tqdm import tqdm

sys.path.append(str(Path(__file__).parent.parent))

from medsafe.catalog import CatalogSource, CsvCatalogSource, JsonCatalogSource
from medsafe.config import setup_logging
from medsafe.exceptions import CatalogLoadError, DrugDataError
from medsafe.models import DrugRecord
from medsafe.utils import save_json_config

logger = logging.getLogger(__name__)


class CatalogValidator:
    """
    Validate every document in a catalog export and report records the
    matcher would handle badly
    """

    def __init__(self, source: CatalogSource):
        self.source = source
        self.records: List[DrugRecord] = []
        self.errors: List[Dict[str, str]] = []
        self.stats = {
            'total_documents': 0,
            'valid_documents': 0,
            'invalid_documents': 0,
            'combinations': 0,
            'categories': 0,
        }

    def validate_documents(self):
        documents = list(self.source.fetch_documents())
        self.stats['total_documents'] = len(documents)

        for drug_id, document in tqdm(documents, desc="Validating drugs"):
            try:
                record = document if isinstance(document, DrugRecord) else DrugRecord.from_dict(document, drug_id)
            except DrugDataError as e:
                self.errors.append({'id': drug_id or '', 'error': str(e)})
                continue
            self.records.append(record)

        self.stats['valid_documents'] = len(self.records)
        self.stats['invalid_documents'] = len(self.errors)
        self.stats['combinations'] = sum(1 for r in self.records if r.is_combination)
        self.stats['categories'] = len({r.category for r in self.records if r.category})

    def find_unsuppressible_ingredients(self) -> List[Dict[str, str]]:
        """
        Combination ingredients with no single drug of the same name.

        The matcher hides a single drug once a combination containing it is
        found, by comparing names. A misspelled ingredient means both records
        are reported.
        """
        single_names = {r.display_name.lower() for r in self.records if not r.is_combination}
        problems = []
        for record in self.records:
            if not record.is_combination:
                continue
            for ingredient in record.active_ingredients:
                if ingredient.name and ingredient.name.lower() not in single_names:
                    problems.append({'drug': record.display_name, 'ingredient': ingredient.name})
        return problems

    def find_short_combinations(self) -> List[str]:
        """Combinations with fewer than two ingredients can only match by brand"""
        return [
            r.display_name for r in self.records
            if r.is_combination and len(r.active_ingredients) < 2
        ]

    def find_duplicate_names(self) -> List[str]:
        seen = set()
        duplicates = []
        for record in self.records:
            key = record.display_name.lower()
            if key in seen and record.display_name not in duplicates:
                duplicates.append(record.display_name)
            seen.add(key)
        return duplicates

    def build_report(self) -> Dict[str, Any]:
        return {
            'source': self.source.name,
            'stats': self.stats,
            'errors': self.errors,
            'unmatched_ingredients': self.find_unsuppressible_ingredients(),
            'short_combinations': self.find_short_combinations(),
            'duplicate_names': self.find_duplicate_names(),
        }


def source_for_path(path: Path) -> CatalogSource:
    if path.suffix.lower() == '.csv':
        return CsvCatalogSource(path)
    return JsonCatalogSource(path)


def print_report(report: Dict[str, Any]):
    stats = report['stats']
    print("\n📊 Catalog Statistics:")
    print(f"   Documents: {stats['total_documents']}")
    print(f"   Valid: {stats['valid_documents']}")
    print(f"   Invalid: {stats['invalid_documents']}")
    print(f"   Combinations: {stats['combinations']}")
    print(f"   Categories: {stats['categories']}")

    for error in report['errors']:
        print(f"❌ {error['id'] or '<no id>'}: {error['error']}")
    for problem in report['unmatched_ingredients']:
        print(f"⚠️  {problem['drug']}: ingredient '{problem['ingredient']}' has no single drug of that name")
    for name in report['short_combinations']:
        print(f"⚠️  {name}: combination with fewer than 2 ingredients")
    for name in report['duplicate_names']:
        print(f"⚠️  {name}: display name used more than once")


def main():
    parser = argparse.ArgumentParser(description='Validate a drug catalog export')
    parser.add_argument('path', help='JSON or CSV catalog file')
    parser.add_argument('--strict', action='store_true', help='Treat warnings as failures')
    parser.add_argument('--report', help='Write the report to this JSON file')
    parser.add_argument('--log-level', default='INFO', help='Logging level')

    args = parser.parse_args()
    setup_logging(args.log_level)

    validator = CatalogValidator(source_for_path(Path(args.path)))
    try:
        validator.validate_documents()
    except CatalogLoadError as e:
        logger.error(f"Could not read catalog: {e}")
        sys.exit(1)

    report = validator.build_report()
    print_report(report)

    if args.report:
        if save_json_config(report, args.report):
            print(f"💾 Report saved to {args.report}")

    warnings = (len(report['unmatched_ingredients']) + len(report['short_combinations'])
                + len(report['duplicate_names']))
    if report['errors'] or (args.strict and warnings):
        print("\n❌ Catalog validation failed")
        sys.exit(1)

    print("\n✅ Catalog is valid")


if __name__ == "__main__":
    main()
