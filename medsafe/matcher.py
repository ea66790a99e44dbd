import re
import logging
from typing import Iterable, List, Set, Union

from .catalog import Catalog
from .models import DrugRecord

# Set up logging
logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 3
MIN_PREFIX_LENGTH = 4
MIN_COMBINATION_HITS = 2

_SPLIT_PATTERN = re.compile(r'[\s,.:;!?()]+')
_DIGITS_PATTERN = re.compile(r'[0-9]')
_BRAND_SEPARATORS = re.compile(r'[-\s]')
_NAME_SEPARATORS = re.compile(r'[\s+]')


def tokenize(text: str) -> List[str]:
    """
    Split OCR text into lower-cased lookup tokens.

    Tokens shorter than 3 characters are dropped. Each kept token also
    contributes its digit-free form ("ibuprofen400" -> "ibuprofen") and
    its hyphen-delimited segments, when those are long enough.
    """
    if not text:
        return []

    tokens: List[str] = []
    seen: Set[str] = set()

    def add(token: str):
        if token not in seen:
            seen.add(token)
            tokens.append(token)

    for word in _SPLIT_PATTERN.split(text.lower()):
        if len(word) < MIN_TOKEN_LENGTH:
            continue
        add(word)

        alpha_only = _DIGITS_PATTERN.sub('', word)
        if len(alpha_only) >= MIN_TOKEN_LENGTH:
            add(alpha_only)

        if '-' in word:
            for part in word.split('-'):
                if len(part) >= MIN_TOKEN_LENGTH:
                    add(part)

    return tokens


def _normalize_display_name(name: str) -> str:
    return _NAME_SEPARATORS.sub('', name.lower())


class DrugTextMatcher:
    """
    Resolve scanned text into catalog drugs.

    Combination products are matched first and their ingredients are then
    suppressed, so "Combiflam" is never reported as Ibuprofen plus
    Paracetamol. The matcher keeps no state between calls.
    """

    def match(self, text: str, drugs: Iterable[DrugRecord]) -> List[DrugRecord]:
        """
        Find catalog drugs mentioned in text

        Args:
            text: Raw OCR output
            drugs: Candidate drug records, in catalog order

        Returns:
            Matched drugs: combinations first, then singles
        """
        if not text or not text.strip():
            return []

        drugs = list(drugs)
        if not drugs:
            return []

        lower_text = text.lower()
        tokens = tokenize(text)

        combo_drugs = [drug for drug in drugs if drug.is_combination]
        single_drugs = [drug for drug in drugs if not drug.is_combination]

        found: List[DrugRecord] = []
        matched_ingredients: Set[str] = set()

        # Combinations first
        for drug in combo_drugs:
            if drug in found or not self._matches_combination(drug, lower_text, tokens):
                continue
            found.append(drug)
            for ingredient in drug.active_ingredients:
                matched_ingredients.add(ingredient.name.lower())

        # Singles, unless already covered by a matched combination
        for drug in single_drugs:
            generic = drug.display_name.lower()
            if not generic.strip() or generic in matched_ingredients:
                continue
            if drug in found or not self._matches_single(drug, lower_text, tokens):
                continue
            if self._is_duplicate_name(drug, found):
                logger.debug(f"Skipping {drug.display_name}: same substance already matched")
                continue
            found.append(drug)

        logger.debug(f"Matched {len(found)} drugs from {len(tokens)} tokens")
        return found

    def _matches_combination(self, drug: DrugRecord, text: str, tokens: List[str]) -> bool:
        for brand in drug.brand_names:
            brand_lower = brand.lower()
            if not brand_lower.strip():
                continue
            brand_clean = _BRAND_SEPARATORS.sub('', brand_lower)

            if brand_lower in text or (brand_clean and brand_clean in text):
                return True

            for token in tokens:
                if len(token) >= MIN_PREFIX_LENGTH and (
                        brand_lower.startswith(token) or brand_clean.startswith(token)):
                    return True

        # Several ingredients printed on the same strip
        ingredient_hits = sum(
            1 for ingredient in drug.active_ingredients
            if ingredient.name.strip() and ingredient.name.lower() in text
        )
        if ingredient_hits >= MIN_COMBINATION_HITS:
            return True

        # Names like "Ibuprofen + Paracetamol"
        parts = [part.strip() for part in drug.display_name.lower().split('+')]
        part_hits = sum(1 for part in parts if part and part in text)
        return part_hits >= MIN_COMBINATION_HITS

    def _matches_single(self, drug: DrugRecord, text: str, tokens: List[str]) -> bool:
        generic = drug.display_name.lower()

        if generic in text:
            return True

        for token in tokens:
            if token == generic:
                return True
            if len(token) >= MIN_PREFIX_LENGTH and generic.startswith(token):
                return True

        for brand in drug.brand_names:
            brand_lower = brand.lower()
            if not brand_lower.strip():
                continue
            if brand_lower in text:
                return True
            for token in tokens:
                if token == brand_lower or token.startswith(brand_lower) or brand_lower.startswith(token):
                    return True

        return False

    def _is_duplicate_name(self, drug: DrugRecord, found: List[DrugRecord]) -> bool:
        """Two rows describing one substance under slightly different names"""
        normalized = _normalize_display_name(drug.display_name)
        for existing in found:
            existing_name = _normalize_display_name(existing.display_name)
            if not existing_name:
                continue
            if existing_name == normalized or normalized in existing_name or existing_name in normalized:
                return True
        return False


def find_drugs_in_text(text: str, catalog: Union[Catalog, Iterable[DrugRecord]]) -> List[DrugRecord]:
    """
    Convenience function for drug matching

    Args:
        text: Raw OCR output
        catalog: A Catalog (one snapshot is used for the whole pass) or
            any sequence of drug records

    Returns:
        Ordered, de-duplicated list of matched drugs
    """
    drugs = catalog.snapshot() if isinstance(catalog, Catalog) else catalog
    return DrugTextMatcher().match(text, drugs)
