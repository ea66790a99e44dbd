import time
import logging
from typing import Any, Optional

import requests

from .catalog import CatalogSource
from .exceptions import CatalogLoadError

# Set up logging
logger = logging.getLogger(__name__)


class HttpCatalogSource(CatalogSource):
    """
    Drug catalog read from a REST document store.

    GET {base_url}/{collection} must return either a list of drug documents
    (each with an "id"), an object with a "documents" list, or an object
    mapping document ids to documents.
    """

    def __init__(self, base_url: str, collection: str = "drugs", timeout: float = 10,
                 strict: bool = False, session: Optional[requests.Session] = None):
        super().__init__(strict=strict)
        self.base_url = base_url.rstrip('/')
        self.collection = collection
        self.timeout = timeout
        self.name = f"{self.base_url}/{self.collection}"

        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'MedSafe/1.0',
            'Accept': 'application/json'
        })

        # Rate limiting
        self.last_request_time = 0.0
        self.min_request_interval = 0.1  # 100ms between requests

    def _make_request(self, endpoint: str, params: dict = None) -> Any:
        """
        Make a rate-limited request to the document store

        Raises:
            CatalogLoadError: on network, HTTP or JSON decoding failures
        """
        time_since_last_request = time.time() - self.last_request_time
        if time_since_last_request < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last_request)

        url = f"{self.base_url}/{endpoint}"

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            self.last_request_time = time.time()

            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            logger.error(f"Catalog request failed: {e}")
            raise CatalogLoadError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            logger.error(f"Failed to parse catalog response: {e}")
            raise CatalogLoadError(f"Invalid JSON from {url}: {e}") from e

    def fetch_documents(self):
        data = self._make_request(self.collection)

        if isinstance(data, dict) and isinstance(data.get('documents'), list):
            data = data['documents']

        if isinstance(data, list):
            return [(item.get('id') if isinstance(item, dict) else None, item) for item in data]
        if isinstance(data, dict):
            return [(str(key), value) for key, value in data.items()]

        raise CatalogLoadError(f"Unexpected catalog payload from {self.name}")
