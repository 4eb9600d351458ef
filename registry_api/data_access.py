"""
Data access layer for the company registry database.
Provides read-only access to SQLite database with clean query interface.
"""

import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from models import CompanyFilters, SortOrder
from .config import settings
from .errors import BadRequestError, NotFoundError
from .filters import build_order_by, build_where, summarize


class CompanyDataProvider:
    """
    Provides company records from the registry database.
    Thread-safe read-only access for multi-client API server.
    """

    def __init__(self, db_path: str = None):
        """
        Initialize connection to the registry database.

        Args:
            db_path: Path to companies.db (defaults to config setting)
        """
        self.db_path = db_path or settings.DB_PATH

        if not Path(self.db_path).exists():
            raise FileNotFoundError(f"Database not found: {self.db_path}")

        # Read-only connection with WAL mode support
        self.conn = sqlite3.connect(
            f"file:{self.db_path}?mode=ro",
            uri=True,
            check_same_thread=False,
            timeout=settings.DB_TIMEOUT
        )
        self.conn.row_factory = sqlite3.Row

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ----------------------------------------------------------------
    # Company Lookup
    # ----------------------------------------------------------------

    def get_company_by_cui(self, cui: str) -> Dict:
        """
        Get a single company by its fiscal code.

        Raises:
            BadRequestError: cui is blank
            NotFoundError: no company has that cui
        """
        if not cui or not cui.strip():
            raise BadRequestError("CUI is required and cannot be empty")

        cur = self.conn.execute("SELECT * FROM Companies WHERE cui = ?", (cui.strip(),))
        row = cur.fetchone()
        if not row:
            raise NotFoundError("Company not found")
        return dict(row)

    def get_companies_by_filters(
        self,
        filters: CompanyFilters,
        limit: int = settings.DEFAULT_PAGE_SIZE,
        offset: int = 0,
        sort_by: Optional[str] = None,
        sort_order: SortOrder = SortOrder.ASC,
    ) -> Tuple[List[Dict], int]:
        """
        One page of companies matching ``filters``.

        Runs two queries over the same predicate: a COUNT for the whole
        filtered set and a LIMIT/OFFSET select for the page.

        Returns:
            (companies on the page, total matching companies)
        """
        where, params = build_where(filters)
        order_by = build_order_by(sort_by, sort_order)

        cur = self.conn.execute(
            f"SELECT COUNT(*) AS count FROM Companies WHERE {where}",
            params
        )
        total = cur.fetchone()["count"]

        sql = f"""
            SELECT * FROM Companies
            WHERE {where}
            {order_by}
            LIMIT ? OFFSET ?
        """
        cur = self.conn.execute(sql, [*params, int(limit), int(offset)])
        return [dict(row) for row in cur.fetchall()], total

    # ----------------------------------------------------------------
    # Statistics
    # ----------------------------------------------------------------

    def get_companies_statistics(self, filters: CompanyFilters) -> Dict:
        """Count, totals and averages of employees, revenue and profit."""
        where, params = build_where(filters)
        sql = f"""
            SELECT
                COUNT(*) AS companii,
                SUM(numar_mediu_de_salariati) AS numar_mediu_de_salariati_total,
                SUM(cifra_de_afaceri_neta) AS cifra_de_afaceri_neta_totala,
                SUM(profit_net) AS profit_net_total
            FROM Companies
            WHERE {where}
        """
        row = self.conn.execute(sql, params).fetchone()
        return summarize(
            row["companii"],
            row["numar_mediu_de_salariati_total"],
            row["cifra_de_afaceri_neta_totala"],
            row["profit_net_total"],
        )

    def get_database_stats(self) -> Dict:
        """Get database statistics."""
        stats = {}

        cur = self.conn.execute("SELECT COUNT(*) AS count FROM Companies")
        stats['total_companies'] = cur.fetchone()['count']

        cur = self.conn.execute(
            "SELECT COUNT(DISTINCT lower(judet)) AS count FROM Companies WHERE judet != ''"
        )
        stats['total_counties'] = cur.fetchone()['count']

        cur = self.conn.execute(
            "SELECT COUNT(DISTINCT caen) AS count FROM Companies WHERE caen != ''"
        )
        stats['total_caen_codes'] = cur.fetchone()['count']

        return stats

    # ----------------------------------------------------------------
    # Filter Options
    # ----------------------------------------------------------------

    def get_counties(self) -> List[str]:
        """Distinct counties, for the county picker."""
        cur = self.conn.execute(
            "SELECT DISTINCT judet FROM Companies WHERE judet != '' ORDER BY judet"
        )
        return [row['judet'] for row in cur.fetchall()]

    def get_caen_codes(self) -> List[str]:
        """Distinct CAEN activity codes."""
        cur = self.conn.execute(
            "SELECT DISTINCT caen FROM Companies WHERE caen != '' ORDER BY caen"
        )
        return [row['caen'] for row in cur.fetchall()]
