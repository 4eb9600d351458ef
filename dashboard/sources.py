"""
Where the dashboard gets its rows from.

``ApiSource`` asks the registry API; ``LocalSource`` works from an exported
CSV or JSON file and applies filters, sorting and paging in memory. Both
expose the same three calls so the renderer doesn't care which is in use.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from database import read_companies_csv
from models import Company, CompanyFilters, SortOrder
from registry_api.client import RegistryClient
from registry_api.filters import (
    compute_statistics,
    filter_records,
    normalize_filters,
    paginate,
    sort_records,
    top_company,
)


class ApiSource:
    """Rows served by a running registry API."""

    def __init__(self, client: RegistryClient):
        self.client = client

    def fetch_page(
        self,
        filters: Mapping[str, Any],
        limit: int,
        offset: int,
        sort_by: Optional[str] = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> Tuple[List[Dict], int]:
        companies, pagination = self.client.get_companies(
            filters, limit=limit, offset=offset, sort_by=sort_by, sort_order=sort_order
        )
        return companies, pagination["totalItems"]

    def statistics(self, filters: Mapping[str, Any]) -> Dict:
        return self.client.get_statistics(filters)

    def top_company(self, filters: Mapping[str, Any], column: str) -> Optional[Dict]:
        companies, _ = self.client.get_companies(
            filters, limit=1, offset=0, sort_by=column, sort_order=SortOrder.DESC
        )
        return companies[0] if companies else None


class LocalSource:
    """Rows loaded from a file and filtered in memory."""

    def __init__(self, records: List[Dict]):
        self.records = records

    @classmethod
    def from_file(cls, path: str) -> "LocalSource":
        """
        Load a CSV export, a JSON list of records, or a saved API response
        (``{"data": {"companies": [...]}}``).
        """
        p = Path(path)
        if p.suffix.lower() == ".csv":
            companies = read_companies_csv(str(p))
        else:
            with open(p, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            if isinstance(raw, dict):
                raw = raw.get("data", {}).get("companies", [])
            companies = [Company(**r) for r in raw]
        return cls([c.model_dump() for c in companies])

    def _filtered(self, filters: Mapping[str, Any]) -> List[Dict]:
        criteria: CompanyFilters = normalize_filters(filters)
        return filter_records(self.records, criteria)

    def fetch_page(
        self,
        filters: Mapping[str, Any],
        limit: int,
        offset: int,
        sort_by: Optional[str] = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> Tuple[List[Dict], int]:
        rows = sort_records(self._filtered(filters), sort_by, sort_order)
        return paginate(rows, offset, limit), len(rows)

    def statistics(self, filters: Mapping[str, Any]) -> Dict:
        return compute_statistics(self._filtered(filters))

    def top_company(self, filters: Mapping[str, Any], column: str) -> Optional[Dict]:
        return top_company(self._filtered(filters), column)
