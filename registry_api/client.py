"""
Client for the company registry API.

Used by the terminal dashboard; works from any script that wants
filtered company pages or aggregates without touching the database.
"""

import requests
from requests.utils import quote
from typing import Any, Dict, List, Mapping, Optional, Tuple

from models import CompanyFilters, SortOrder


class RegistryClient:
    """
    Client for the company registry API.

    Usage:
        client = RegistryClient("http://localhost:8000")
        companies, pagination = client.get_companies({"judet": ["Cluj"]}, limit=25)
        stats = client.get_statistics({"judet": ["Cluj"]})
    """

    def __init__(self, api_url: str = "http://localhost:8000", timeout: float = 30):
        """
        Initialize API client.

        Args:
            api_url: Base URL of the API server (without the /api prefix)
            timeout: Per-request timeout in seconds
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, endpoint: str, params: Any = None) -> Dict:
        """Make GET request to API."""
        url = f"{self.api_url}{endpoint}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _filter_params(filters: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
        """Active criteria as query pairs; set criteria repeat their key."""
        if filters is None:
            return []
        if not isinstance(filters, CompanyFilters):
            filters = CompanyFilters(**filters)
        params = []
        for key, value in filters.active().items():
            if isinstance(value, list):
                params.extend((key, v) for v in value)
            else:
                params.append((key, value))
        return params

    # ----------------------------------------------------------------
    # Health & Info
    # ----------------------------------------------------------------

    def health_check(self) -> Dict:
        """Check API health and get database statistics."""
        return self._get("/")["data"]

    def get_counties(self) -> List[str]:
        return self._get("/api/filters/counties")["data"]["values"]

    def get_caen_codes(self) -> List[str]:
        return self._get("/api/filters/caen")["data"]["values"]

    # ----------------------------------------------------------------
    # Companies
    # ----------------------------------------------------------------

    def get_companies(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 10,
        offset: int = 0,
        sort_by: Optional[str] = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> Tuple[List[Dict], Dict]:
        """
        Get one page of companies.

        Returns:
            (companies, pagination) where pagination carries currentPage,
            itemsPerPage, totalItems and totalPages
        """
        params = [("limit", str(limit)), ("offset", str(offset))]
        if sort_by:
            params += [("sort_by", sort_by), ("sort_order", SortOrder(sort_order).value)]
        params += self._filter_params(filters)

        body = self._get("/api/companies", params)
        return body["data"]["companies"], body["pagination"]

    def get_company(self, cui: str) -> Dict:
        """Get a single company by fiscal code."""
        return self._get(f"/api/companies/{quote(cui, safe='')}")["data"]["company"]

    def get_statistics(self, filters: Optional[Mapping[str, Any]] = None) -> Dict:
        """Aggregates over every company matching ``filters``."""
        return self._get("/api/statistics", self._filter_params(filters))["data"]["statistics"]
