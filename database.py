"""
SQLite database layer for the company registry.

Owns the ``Companies`` table the REST API reads from. Can be populated from a
registry CSV export or written to programmatically.

Usage:
    # Standalone: populate DB from a CSV export
    python database.py --csv data/companies.csv

    # Programmatic
    from database import DatabaseManager
    db = DatabaseManager()
    db.upsert_companies([company1, company2])
"""

import argparse
import os
import sqlite3

import pandas as pd

from models import Company, COMPANY_COLUMNS, NUMERIC_COLUMNS
from utils import log


BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")
DEFAULT_DB_PATH = os.path.join(DATA_DIR, "companies.db")


# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS Companies (
    cui                       TEXT PRIMARY KEY,
    caen                      TEXT DEFAULT '',
    active_imobilizate        REAL,
    active_circulante         REAL,
    stocuri                   REAL,
    creante                   REAL,
    casa_si_conturi_la_banci  REAL,
    cheltuieli_in_avans       REAL,
    datorii                   REAL,
    venituri_in_avans         REAL,
    provizioane               REAL,
    capitaluri                REAL,
    capital_subcris_varsat    REAL,
    patrimoniul_regiei        REAL,
    cifra_de_afaceri_neta     REAL,
    venituri_totale           REAL,
    cheltuieli_totale         REAL,
    profit_brut               REAL,
    pierdere_bruta            REAL,
    profit_net                REAL,
    pierdere_neta             REAL,
    numar_mediu_de_salariati  REAL,
    denumire                  TEXT DEFAULT '',
    telefon                   TEXT DEFAULT '',
    judet                     TEXT DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_companies_judet ON Companies(judet);
CREATE INDEX IF NOT EXISTS idx_companies_caen ON Companies(caen);
CREATE INDEX IF NOT EXISTS idx_companies_denumire ON Companies(denumire);
"""


class DatabaseManager:
    """SQLite database manager for the company registry."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path)
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.row_factory = sqlite3.Row
        self._create_schema()

    def _create_schema(self):
        self.conn.executescript(SCHEMA_SQL)
        self.conn.commit()

    def close(self):
        self.conn.close()

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    def upsert_companies(self, companies: list[Company]) -> int:
        """Insert or replace Company records. Returns count written."""
        placeholders = ", ".join("?" * len(COMPANY_COLUMNS))
        sql = f"""
            INSERT OR REPLACE INTO Companies
                ({', '.join(COMPANY_COLUMNS)})
            VALUES ({placeholders})
        """
        rows = [
            tuple(getattr(c, col) for col in COMPANY_COLUMNS)
            for c in companies
        ]
        self.conn.executemany(sql, rows)
        self.conn.commit()
        return len(rows)

    def get_company(self, cui: str) -> dict | None:
        cur = self.conn.execute("SELECT * FROM Companies WHERE cui = ?", (cui,))
        row = cur.fetchone()
        return dict(row) if row else None

    def count_companies(self) -> int:
        cur = self.conn.execute("SELECT COUNT(*) AS count FROM Companies")
        return cur.fetchone()["count"]

    # ------------------------------------------------------------------
    # Generic query
    # ------------------------------------------------------------------

    def query(self, sql: str, params: tuple = ()) -> list[dict]:
        """Execute a raw SQL query and return results as list of dicts."""
        cur = self.conn.execute(sql, params)
        return [dict(r) for r in cur.fetchall()]

    # ------------------------------------------------------------------
    # Bulk population from CSV exports
    # ------------------------------------------------------------------

    def populate_from_csv(self, csv_path: str) -> int:
        """Load a registry CSV export into the Companies table."""
        log.step(f"Reading {csv_path}")
        companies = read_companies_csv(csv_path)
        n = self.upsert_companies(companies)
        log.ok(f"Companies: {n} rows -> {self.db_path}")
        return n


def read_companies_csv(csv_path: str) -> list[Company]:
    """
    Parse a registry CSV export into Company records.

    Unknown columns are ignored; missing numeric cells become None.
    """
    df = pd.read_csv(csv_path, dtype=str)
    df.columns = [c.strip().lower() for c in df.columns]

    missing = [c for c in ("cui",) if c not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing required column(s): {', '.join(missing)}")

    for col in NUMERIC_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    keep = [c for c in COMPANY_COLUMNS if c in df.columns]
    df = df[keep].astype(object).where(df[keep].notna(), None)

    return [Company(**row) for row in df.to_dict(orient="records")]


def main():
    parser = argparse.ArgumentParser(description="Populate the company registry database")
    parser.add_argument("--csv", required=True, help="Path to the registry CSV export")
    parser.add_argument("--db", default=DEFAULT_DB_PATH, help=f"SQLite path (default: {DEFAULT_DB_PATH})")
    args = parser.parse_args()

    log.header("COMPANY REGISTRY: Database Load")
    db = DatabaseManager(db_path=args.db)
    try:
        db.populate_from_csv(args.csv)
        log.summary_table("Database", [
            ("Path", db.db_path),
            ("Companies", str(db.count_companies())),
        ])
    finally:
        db.close()


if __name__ == "__main__":
    main()
