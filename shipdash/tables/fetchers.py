"""
HTTP fetcher feeding a TransactionsTable from the query endpoints.

Each fetch takes a generation token. Only the response to the most recent
fetch is applied; slower responses to earlier fetches are dropped.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

ENTITY_PATHS = {
    'shipments': 'data/shipments/',
    'additional-services': 'data/billing/additional-services/',
    'receiving': 'data/billing/receiving/',
    'storage': 'data/billing/storage/',
    'credits': 'data/billing/credits/',
    'returns': 'data/billing/returns/',
    'invoices': 'data/invoices/',
}

LIST_FILTERS = ('status', 'carrier', 'channel', 'type', 'age')
REQUEST_TIMEOUT = 30
DEFAULT_PAGE_SIZE = 50


class FetchError(Exception):
    """A query endpoint request failed; the message is the raw error text."""


@dataclass
class FetchState:
    data: List[Dict] = field(default_factory=list)
    total_count: int = 0
    has_more: bool = False
    carriers: List[str] = field(default_factory=list)
    is_loading: bool = False
    is_page_loading: bool = False
    error: Optional[str] = None


def build_query(client_id=None, page_index=0, page_size=DEFAULT_PAGE_SIZE, sort_field=None,
                sort_direction='desc', filters=None) -> Dict[str, str]:
    """
    Query parameters for a page request.

    List filters are comma-joined; dates are sent as ISO strings; empty
    values are left out.
    """
    filters = filters or {}
    params = {
        'limit': str(page_size),
        'offset': str(page_index * page_size),
    }
    if client_id:
        params['clientId'] = str(client_id)
    if sort_field:
        params['sortField'] = sort_field
        params['sortDirection'] = sort_direction or 'desc'

    for key in ('startDate', 'endDate'):
        value = filters.get(key)
        if isinstance(value, date):
            value = value.isoformat()
        if value:
            params[key] = value

    for key in LIST_FILTERS:
        values = filters.get(key)
        if isinstance(values, str):
            values = [values]
        if values:
            params[key] = ','.join(str(value) for value in values)

    if filters.get('search'):
        params['search'] = filters['search'].strip()
    return params


class TransactionFetcher:
    """
    Loads pages of one entity for one client (or all clients when None).

    The fetcher owns the table's paging, sort and filter state. Changing the
    filters, the sort or the page size goes back to the first page.
    """

    def __init__(self, entity, client_id=None, session: Optional[requests.Session] = None,
                 base_url: Optional[str] = None, token: Optional[str] = None,
                 page_size=DEFAULT_PAGE_SIZE, sort_field=None, sort_direction='desc', filters=None):
        self.entity = entity
        self.client_id = client_id
        self.session = session or requests.Session()
        self.base_url = base_url or settings.SHIPDASH_API_BASE_URL
        self.url = self.url_for(entity)
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

        self.page_index = 0
        self.page_size = page_size
        self.sort_field = sort_field
        self.sort_direction = sort_direction
        self.filters = dict(filters or {})

        self.state = FetchState()
        self._lock = threading.Lock()
        self._generation = 0

    def url_for(self, entity: str) -> str:
        try:
            path = ENTITY_PATHS[entity]
        except KeyError:
            raise ValueError(f"Unknown entity '{entity}'")
        return urljoin(self.base_url, path)

    def query(self) -> Dict[str, str]:
        return build_query(self.client_id, self.page_index, self.page_size,
                           self.sort_field, self.sort_direction, self.filters)

    def _begin(self):
        with self._lock:
            self._generation += 1
            # Nothing on screen yet: full skeleton, otherwise dim the current page
            if self.page_index == 0 and not self.state.data:
                self.state.is_loading = True
            else:
                self.state.is_page_loading = True
            self.state.error = None
            return self._generation, self.query()

    def _is_current(self, generation) -> bool:
        return generation == self._generation

    def fetch(self) -> Optional[FetchState]:
        """
        Fetch the current page and apply it to ``state``.

        Returns:
            The updated state, or None when a newer fetch started meanwhile

        Raises:
            FetchError: If the request fails and this fetch is still the latest
        """
        generation, params = self._begin()

        try:
            response = self.session.get(self.url, params=params, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            with self._lock:
                if not self._is_current(generation):
                    logger.debug(f"Dropping failed {self.entity} fetch #{generation}: superseded")
                    return None
                self.state = FetchState(carriers=self.state.carriers, error=str(e))
            logger.error(f"Fetching {self.entity} failed: {e}")
            raise FetchError(str(e)) from e

        with self._lock:
            if not self._is_current(generation):
                logger.debug(f"Dropping stale {self.entity} response #{generation} (latest #{self._generation})")
                return None
            self.state = FetchState(
                data=payload.get('data', []),
                total_count=payload.get('totalCount', 0),
                has_more=payload.get('hasMore', False),
                carriers=payload.get('carriers', []),
            )
            return self.state

    def set_page(self, page_index, page_size=None) -> Optional[FetchState]:
        """Move to a page; a different page size starts again from the first page."""
        with self._lock:
            if page_size is not None and page_size != self.page_size:
                self.page_size = page_size
                self.page_index = 0
            else:
                self.page_index = max(0, page_index)
        return self.fetch()

    def set_page_size(self, page_size) -> Optional[FetchState]:
        with self._lock:
            self.page_size = page_size
            self.page_index = 0
        return self.fetch()

    def set_sort(self, sort_field, sort_direction='desc') -> Optional[FetchState]:
        with self._lock:
            self.sort_field = sort_field
            self.sort_direction = sort_direction
            self.page_index = 0
        return self.fetch()

    def set_filters(self, filters) -> Optional[FetchState]:
        with self._lock:
            self.filters = dict(filters or {})
            self.page_index = 0
        return self.fetch()
