"""
Pydantic data models for the company registry.

These models describe a single row of the ``Companies`` table and the set of
criteria a client can filter that table by. Column names follow the registry
export (Romanian field names) so records round-trip unchanged between the
SQLite store, the REST API and the dashboard.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum


# ---------------------------------------------------------------------------
# Column catalog
# ---------------------------------------------------------------------------

NUMERIC_COLUMNS: List[str] = [
    "active_imobilizate",
    "active_circulante",
    "stocuri",
    "creante",
    "casa_si_conturi_la_banci",
    "cheltuieli_in_avans",
    "datorii",
    "venituri_in_avans",
    "provizioane",
    "capitaluri",
    "capital_subcris_varsat",
    "patrimoniul_regiei",
    "cifra_de_afaceri_neta",
    "venituri_totale",
    "cheltuieli_totale",
    "profit_brut",
    "pierdere_bruta",
    "profit_net",
    "pierdere_neta",
    "numar_mediu_de_salariati",
]

# Table order, as exported by the registry
COMPANY_COLUMNS: List[str] = (
    ["cui", "caen"] + NUMERIC_COLUMNS + ["denumire", "telefon", "judet"]
)

# Criteria that accept several values at once
MULTI_VALUE_FILTERS: List[str] = ["caen", "judet"]


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ---------------------------------------------------------------------------
# Core Entities
# ---------------------------------------------------------------------------

class Company(BaseModel):
    """
    One registry entry: identification, contact data and the balance-sheet
    and profit-and-loss figures reported for the year.
    """
    cui: str
    caen: str = ""
    active_imobilizate: Optional[float] = None
    active_circulante: Optional[float] = None
    stocuri: Optional[float] = None
    creante: Optional[float] = None
    casa_si_conturi_la_banci: Optional[float] = None
    cheltuieli_in_avans: Optional[float] = None
    datorii: Optional[float] = None
    venituri_in_avans: Optional[float] = None
    provizioane: Optional[float] = None
    capitaluri: Optional[float] = None
    capital_subcris_varsat: Optional[float] = None
    patrimoniul_regiei: Optional[float] = None
    cifra_de_afaceri_neta: Optional[float] = None
    venituri_totale: Optional[float] = None
    cheltuieli_totale: Optional[float] = None
    profit_brut: Optional[float] = None
    pierdere_bruta: Optional[float] = None
    profit_net: Optional[float] = None
    pierdere_neta: Optional[float] = None
    numar_mediu_de_salariati: Optional[float] = None
    denumire: str = ""
    telefon: str = ""
    judet: str = ""

    @field_validator("cui", "caen", "denumire", "telefon", "judet", mode="before")
    @classmethod
    def _coerce_code(cls, v):
        # CSV exports hand codes back as ints
        if v is None:
            return ""
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        return str(v)


class CompanyFilters(BaseModel):
    """
    Optional criteria for narrowing the company table.

    Numeric criteria are kept as strings: the server parses them when it
    builds SQL, the in-memory evaluator decides per record whether they are
    thresholds or substrings.
    """
    cui: Optional[str] = None
    caen: List[str] = Field(default_factory=list)
    active_imobilizate: Optional[str] = None
    active_circulante: Optional[str] = None
    stocuri: Optional[str] = None
    creante: Optional[str] = None
    casa_si_conturi_la_banci: Optional[str] = None
    cheltuieli_in_avans: Optional[str] = None
    datorii: Optional[str] = None
    venituri_in_avans: Optional[str] = None
    provizioane: Optional[str] = None
    capitaluri: Optional[str] = None
    capital_subcris_varsat: Optional[str] = None
    patrimoniul_regiei: Optional[str] = None
    cifra_de_afaceri_neta: Optional[str] = None
    venituri_totale: Optional[str] = None
    cheltuieli_totale: Optional[str] = None
    profit_brut: Optional[str] = None
    pierdere_bruta: Optional[str] = None
    profit_net: Optional[str] = None
    pierdere_neta: Optional[str] = None
    numar_mediu_de_salariati: Optional[str] = None
    denumire: Optional[str] = None
    telefon: Optional[str] = None
    judet: List[str] = Field(default_factory=list)

    @field_validator("caen", "judet", mode="before")
    @classmethod
    def _split_values(cls, v):
        """Accept a list, a comma-separated string, or a mix of both."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        values = []
        for item in v:
            values.extend(part.strip() for part in str(item).split(","))
        return [part for part in values if part]

    @field_validator(*(["cui", "denumire", "telefon"] + NUMERIC_COLUMNS), mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def active(self) -> dict:
        """Criteria that are present and non-empty, keyed by column."""
        return {
            k: v for k, v in self.model_dump().items()
            if v not in (None, "", [])
        }
