import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .exceptions import CatalogLoadError, DrugDataError
from .models import DrugRecord

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_MINUTES = 5.0


class CatalogSource:
    """
    Read side of the drug store. Subclasses implement fetch_documents()
    and yield (drug_id, document) pairs.
    """

    name = "catalog"

    def __init__(self, strict: bool = False):
        self.strict = strict

    def fetch_documents(self) -> Iterable[Tuple[Optional[str], Mapping[str, Any]]]:
        raise NotImplementedError

    def load(self) -> List[DrugRecord]:
        """
        Load and validate every drug document.

        Invalid documents are skipped with a warning, or raise
        CatalogLoadError when the source is strict.
        """
        records = []
        skipped = 0
        for drug_id, document in self.fetch_documents():
            if isinstance(document, DrugRecord):
                records.append(document)
                continue
            try:
                records.append(DrugRecord.from_dict(document, drug_id))
            except DrugDataError as e:
                if self.strict:
                    raise CatalogLoadError(f"Invalid drug document in {self.name}: {e}") from e
                skipped += 1
                logger.warning(f"Skipping invalid drug document {drug_id or ''}: {e}")

        logger.info(f"Loaded {len(records)} drugs from {self.name}" + (f" ({skipped} skipped)" if skipped else ""))
        return records


class StaticCatalogSource(CatalogSource):
    """In-memory source, mostly for tests and the built-in sample catalog"""

    name = "static catalog"

    def __init__(self, drugs: Iterable[Union[DrugRecord, Mapping[str, Any]]], strict: bool = False):
        super().__init__(strict=strict)
        self.drugs = list(drugs)

    def fetch_documents(self):
        for drug in self.drugs:
            if isinstance(drug, DrugRecord):
                yield drug.drug_id, drug
            else:
                yield drug.get("id"), drug


class JsonCatalogSource(CatalogSource):
    """
    JSON export of the drug collection: either a list of documents or an
    object mapping document ids to documents.
    """

    def __init__(self, path: Union[str, Path], strict: bool = False):
        super().__init__(strict=strict)
        self.path = Path(path)
        self.name = str(self.path)

    def fetch_documents(self):
        if not self.path.exists():
            raise CatalogLoadError(f"Catalog file not found at {self.path}")

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogLoadError(f"Failed to read catalog file {self.path}: {e}") from e

        if isinstance(data, dict):
            return [(str(key), value) for key, value in data.items()]
        if isinstance(data, list):
            return [(item.get("id") if isinstance(item, dict) else None, item) for item in data]
        raise CatalogLoadError(f"Unexpected catalog layout in {self.path}")


class CsvCatalogSource(CatalogSource):
    """
    Tabular catalog export.

    List columns are ';'-delimited. Ingredients are written 'name:strength',
    drug and food interactions 'name|severity|description'.
    """

    LIST_COLUMNS = ['brand_names', 'allergy_warnings', 'condition_warnings']

    def __init__(self, path: Union[str, Path], strict: bool = False):
        super().__init__(strict=strict)
        self.path = Path(path)
        self.name = str(self.path)

    def fetch_documents(self):
        if not self.path.exists():
            raise CatalogLoadError(f"Catalog file not found at {self.path}")

        try:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise CatalogLoadError(f"Failed to read catalog file {self.path}: {e}") from e

        if 'display_name' not in df.columns:
            raise CatalogLoadError(f"Catalog file {self.path} has no 'display_name' column")

        return [self._row_to_document(row) for row in df.to_dict(orient='records')]

    def _row_to_document(self, row: Dict[str, str]) -> Tuple[Optional[str], Dict[str, Any]]:
        document: Dict[str, Any] = {
            'display_name': row.get('display_name', ''),
            'category': row.get('category', ''),
            'is_combination': row.get('is_combination', '') or False,
        }
        if row.get('physical_form'):
            document['physical_form'] = row['physical_form']

        for column in self.LIST_COLUMNS:
            document[column] = split_list(row.get(column, ''))

        document['active_ingredients'] = [
            {'name': name.strip(), 'strength': strength.strip() or None}
            for name, _, strength in (item.partition(':') for item in split_list(row.get('active_ingredients', '')))
        ]
        document['drug_interactions'] = [
            {'drug_name': name, 'severity': severity, 'description': description}
            for name, severity, description in split_triples(row.get('drug_interactions', ''))
        ]
        document['food_interactions'] = [
            {'food': food, 'severity': restriction, 'description': description}
            for food, restriction, description in split_triples(row.get('food_interactions', ''))
        ]

        drug_id = row.get('id') or None
        return drug_id, document


def split_list(value: str) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(';') if part.strip()]


def split_triples(value: str) -> List[Tuple[str, str, str]]:
    triples = []
    for item in split_list(value):
        parts = [part.strip() for part in item.split('|', 2)]
        parts += [''] * (3 - len(parts))
        triples.append((parts[0], parts[1], parts[2]))
    return triples


class Catalog:
    """
    Cached snapshot of the drug catalog.

    A refresh loads a new immutable tuple and swaps it in with a single
    assignment, so a matching pass that took a snapshot never sees a
    partially updated list. Refreshes are serialized; reads never lock.

    Args:
        source: Where drug documents come from
        cache_ttl_minutes: Snapshot lifetime; None keeps it until refresh()
            or invalidate() is called
        clock: Monotonic time source in seconds
    """

    def __init__(self, source: CatalogSource,
                 cache_ttl_minutes: Optional[float] = DEFAULT_CACHE_TTL_MINUTES,
                 clock: Callable[[], float] = time.monotonic):
        self.source = source
        self.cache_ttl_seconds = None if cache_ttl_minutes is None else cache_ttl_minutes * 60
        self._clock = clock
        self._drugs: Optional[Tuple[DrugRecord, ...]] = None
        self._last_fetch: Optional[float] = None
        # Bumped by invalidate(); a refresh that started before the bump
        # publishes its data but leaves the snapshot stale
        self._generation = 0
        self._refresh_lock = threading.Lock()

    def is_stale(self) -> bool:
        last_fetch = self._last_fetch
        if self._drugs is None or last_fetch is None:
            return True
        if self.cache_ttl_seconds is None:
            return False
        return self._clock() - last_fetch >= self.cache_ttl_seconds

    def snapshot(self) -> Tuple[DrugRecord, ...]:
        """Current immutable drug list, reloading first if it expired"""
        drugs = self._drugs
        if drugs is not None and not self.is_stale():
            return drugs
        return self.refresh(force=False)

    def refresh(self, force: bool = True) -> Tuple[DrugRecord, ...]:
        """
        Reload from the source.

        On failure the previous snapshot is kept (or an empty one if the
        catalog never loaded) and the next read retries.
        """
        with self._refresh_lock:
            if not force and not self.is_stale():
                return self._drugs

            generation = self._generation
            started = self._clock()
            try:
                drugs = tuple(self.source.load())
            except Exception as e:
                logger.error(f"Error refreshing drug catalog: {e}")
                return self._drugs if self._drugs is not None else ()

            self._drugs = drugs
            self._last_fetch = started
            if generation != self._generation:
                self._last_fetch = None
            return drugs

    def invalidate(self):
        """Force a reload on the next read, even if a refresh is running"""
        self._generation += 1
        self._last_fetch = None

    def list_all(self) -> List[DrugRecord]:
        return list(self.snapshot())

    def list_by_category(self, category: str) -> List[DrugRecord]:
        return [drug for drug in self.snapshot() if drug.category == category]

    def list_categories(self) -> List[str]:
        return sorted({drug.category for drug in self.snapshot() if drug.category})

    def get_drug(self, drug_id: str) -> Optional[DrugRecord]:
        for drug in self.snapshot():
            if drug.drug_id == drug_id:
                return drug
        return None

    def search(self, query: str) -> List[DrugRecord]:
        """Drugs whose display name or any brand name contains the query"""
        drugs = self.snapshot()
        lower_query = (query or '').strip().lower()
        if not lower_query:
            return list(drugs)

        return [
            drug for drug in drugs
            if lower_query in drug.display_name.lower()
            or any(lower_query in brand.lower() for brand in drug.brand_names)
        ]

    def count(self) -> int:
        return len(self.snapshot())
