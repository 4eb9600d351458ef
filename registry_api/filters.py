"""
Filter evaluation for the company table.

The same criteria are applied in two places: the API turns them into a
parameterized SQL ``WHERE`` clause, and the dashboard's local mode evaluates
them against records held in memory. Pagination, sorting and the summary
aggregates live here too so both sides compute them identically.
"""

import math
import string
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from models import (
    COMPANY_COLUMNS,
    NUMERIC_COLUMNS,
    Company,
    CompanyFilters,
    SortOrder,
)
from .errors import BadRequestError

Record = Union[Mapping[str, Any], Company]

# SQLite's NOCASE collation only folds ASCII letters
_ASCII_FOLD = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def normalize_filters(raw: Union[Mapping[str, Any], CompanyFilters, None]) -> CompanyFilters:
    """Coerce a query mapping (or existing filters) into ``CompanyFilters``."""
    if raw is None:
        return CompanyFilters()
    if isinstance(raw, CompanyFilters):
        return raw
    known = {k: v for k, v in raw.items() if k in CompanyFilters.model_fields}
    return CompanyFilters(**known)


def parse_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it isn't one."""
    if isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


# ----------------------------------------------------------------
# SQL generation
# ----------------------------------------------------------------

def build_where(filters: CompanyFilters) -> Tuple[str, List[Any]]:
    """
    Translate active criteria into a SQL predicate.

    Returns:
        (clause, params) where clause is ``"1=1"`` when nothing is active
        and every value is bound through ``params``.

    Raises:
        BadRequestError: a numeric criterion does not parse as a number.
    """
    conditions = ["1=1"]
    params: List[Any] = []

    if filters.cui:
        conditions.append("cui = ?")
        params.append(filters.cui)

    if filters.caen:
        placeholders = ",".join("?" * len(filters.caen))
        conditions.append(f"caen IN ({placeholders})")
        params.extend(filters.caen)

    for column in NUMERIC_COLUMNS:
        raw = getattr(filters, column)
        if raw is None:
            continue
        threshold = parse_number(raw)
        if threshold is None:
            raise BadRequestError(f"{column} must be a number, got '{raw}'")
        conditions.append(f"{column} >= ?")
        params.append(threshold)

    if filters.denumire:
        conditions.append("lower(denumire) LIKE lower(?)")
        params.append(f"%{filters.denumire}%")

    if filters.telefon:
        conditions.append("telefon LIKE ?")
        params.append(f"%{filters.telefon}%")

    if filters.judet:
        placeholders = ",".join("?" * len(filters.judet))
        conditions.append(f"lower(judet) IN ({placeholders})")
        params.extend(j.lower() for j in filters.judet)

    return " AND ".join(conditions), params


def build_order_by(sort_by: Optional[str], sort_order: SortOrder = SortOrder.ASC) -> str:
    """ORDER BY for a whitelisted column, nulls last, cui as tie-breaker."""
    if not sort_by:
        return "ORDER BY rowid"
    if sort_by not in COMPANY_COLUMNS:
        raise BadRequestError(f"Cannot sort by unknown column '{sort_by}'")
    direction = "DESC" if SortOrder(sort_order) == SortOrder.DESC else "ASC"
    if sort_by in NUMERIC_COLUMNS:
        return f"ORDER BY {sort_by} IS NULL, {sort_by} {direction}, cui ASC"
    # Blank text counts as missing, compared case-insensitively like sort_records
    value = f"NULLIF({sort_by}, '')"
    return f"ORDER BY {value} IS NULL, {value} COLLATE NOCASE {direction}, cui ASC"


# ----------------------------------------------------------------
# In-memory evaluation
# ----------------------------------------------------------------

def _value(record: Record, column: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(column)
    return getattr(record, column, None)


def _contains(field: Any, needle: str) -> bool:
    if field is None:
        return False
    return needle.lower() in str(field).lower()


def _contains_tokens(field: Any, accepted: str) -> bool:
    tokens = accepted.lower().split()
    if not tokens or field is None:
        return False
    haystack = str(field).lower()
    return all(token in haystack for token in tokens)


def matches(record: Record, filters: CompanyFilters) -> bool:
    """True when ``record`` passes every active criterion."""
    for column, criterion in filters.active().items():
        field = _value(record, column)

        if column in NUMERIC_COLUMNS:
            threshold = parse_number(criterion)
            if threshold is not None:
                number = parse_number(field) if field is not None else None
                if number is None or number < threshold:
                    return False
                continue

        if isinstance(criterion, list):
            if not any(_contains_tokens(field, accepted) for accepted in criterion):
                return False
            continue

        if not _contains(field, criterion):
            return False

    return True


def filter_records(records: Iterable[Record], filters: CompanyFilters) -> List[Record]:
    return [r for r in records if matches(r, filters)]


def paginate(records: List[Record], offset: int, limit: int) -> List[Record]:
    """Zero-based slice of ``limit`` records starting at ``offset``."""
    offset = max(0, offset)
    if limit <= 0:
        return []
    return records[offset:offset + limit]


def sort_records(
    records: Iterable[Record],
    column: Optional[str],
    order: SortOrder = SortOrder.ASC,
) -> List[Record]:
    """
    Sort on ``column`` in the same order ``build_order_by`` gives SQLite.

    Records without a value (None or blank text) always go last, text is
    compared with ASCII case folding, and ties fall back to ascending cui.
    """
    records = list(records)
    if not column:
        return records
    if column not in COMPANY_COLUMNS:
        raise ValueError(f"Unknown column: {column}")

    def key(r):
        v = _value(r, column)
        return v.translate(_ASCII_FOLD) if isinstance(v, str) else v

    records.sort(key=lambda r: str(_value(r, "cui") or ""))
    present = [r for r in records if _value(r, column) not in (None, "")]
    missing = [r for r in records if _value(r, column) in (None, "")]
    present.sort(key=key, reverse=SortOrder(order) == SortOrder.DESC)
    return present + missing


# ----------------------------------------------------------------
# Aggregates
# ----------------------------------------------------------------

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def summarize(count: int, employees: float, revenue: float, profit: float) -> Dict[str, Any]:
    """Totals plus per-company averages; averages are 0 for an empty set."""
    employees = employees or 0
    revenue = revenue or 0
    profit = profit or 0
    return {
        "total_companies": count,
        "total_employees": employees,
        "average_employees": _round_half_up(employees / count) if count else 0,
        "total_revenue": revenue,
        "average_revenue": _round_half_up(revenue / count) if count else 0,
        "total_profit": profit,
        "average_profit": _round_half_up(profit / count) if count else 0,
    }


def compute_statistics(records: Iterable[Record]) -> Dict[str, Any]:
    records = list(records)
    return summarize(
        len(records),
        sum(_value(r, "numar_mediu_de_salariati") or 0 for r in records),
        sum(_value(r, "cifra_de_afaceri_neta") or 0 for r in records),
        sum(_value(r, "profit_net") or 0 for r in records),
    )


def top_company(records: Iterable[Record], column: str) -> Optional[Record]:
    """Record with the largest ``column`` value (missing counts as 0)."""
    best = None
    for r in records:
        if best is None or (_value(r, column) or 0) > (_value(best, column) or 0):
            best = r
    return best
