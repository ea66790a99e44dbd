import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .catalog import Catalog, CatalogSource, CsvCatalogSource, DEFAULT_CACHE_TTL_MINUTES, JsonCatalogSource
from .remote import HttpCatalogSource
from .sample_data import sample_catalog_source

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def _ttl_from_env(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == '':
        return DEFAULT_CACHE_TTL_MINUTES
    if value.strip().lower() in ('none', 'never', 'off'):
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid MEDSAFE_CACHE_TTL_MINUTES '{value}', using {DEFAULT_CACHE_TTL_MINUTES}")
        return DEFAULT_CACHE_TTL_MINUTES


@dataclass
class Settings:
    catalog_path: Optional[str] = None
    catalog_url: Optional[str] = None
    cache_ttl_minutes: Optional[float] = DEFAULT_CACHE_TTL_MINUTES
    request_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from MEDSAFE_* environment variables"""
        timeout = os.getenv('MEDSAFE_REQUEST_TIMEOUT')
        try:
            request_timeout = float(timeout) if timeout else 10.0
        except ValueError:
            logger.warning(f"Invalid MEDSAFE_REQUEST_TIMEOUT '{timeout}', using 10s")
            request_timeout = 10.0

        return cls(
            catalog_path=os.getenv('MEDSAFE_CATALOG_PATH') or None,
            catalog_url=os.getenv('MEDSAFE_CATALOG_URL') or None,
            cache_ttl_minutes=_ttl_from_env(os.getenv('MEDSAFE_CACHE_TTL_MINUTES')),
            request_timeout=request_timeout,
            log_level=os.getenv('MEDSAFE_LOG_LEVEL', 'INFO').upper(),
        )


def setup_logging(level: str = "INFO"):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def build_catalog_source(settings: Settings) -> CatalogSource:
    """
    Pick a catalog source: the document store URL first, then a local
    JSON/CSV export, then the built-in sample catalog.
    """
    if settings.catalog_url:
        return HttpCatalogSource(settings.catalog_url, timeout=settings.request_timeout)

    if settings.catalog_path:
        path = Path(settings.catalog_path)
        if path.suffix.lower() == '.csv':
            return CsvCatalogSource(path)
        return JsonCatalogSource(path)

    logger.warning("No catalog configured, using the built-in sample catalog")
    return sample_catalog_source()


def build_catalog(settings: Optional[Settings] = None) -> Catalog:
    settings = settings or Settings.from_env()
    return Catalog(build_catalog_source(settings), cache_ttl_minutes=settings.cache_ttl_minutes)
