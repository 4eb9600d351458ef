"""
Terminal rendering for the dashboard: company table and summary cards.

Everything returns strings; the CLI decides when to print.
"""

from typing import Dict, List, Optional, Sequence

from utils.log import C

from models import COMPANY_COLUMNS, NUMERIC_COLUMNS

# Balance-sheet detail is off unless asked for
HIDDEN_BY_DEFAULT = [
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
    "telefon",
]

DEFAULT_COLUMNS = [c for c in COMPANY_COLUMNS if c not in HIDDEN_BY_DEFAULT]

HEADERS = {
    "cui": "CUI",
    "caen": "CAEN",
    "denumire": "Denumire",
    "judet": "Judet",
    "numar_mediu_de_salariati": "Salariati",
    "cifra_de_afaceri_neta": "Cifra afaceri",
    "venituri_totale": "Venituri tot.",
    "cheltuieli_totale": "Cheltuieli tot.",
    "profit_brut": "Profit brut",
    "pierdere_bruta": "Pierdere bruta",
    "profit_net": "Profit net",
    "pierdere_neta": "Pierdere neta",
    "telefon": "Telefon",
}

MAX_TEXT_WIDTH = 32


def resolve_columns(spec: Optional[str]) -> List[str]:
    """
    Turn ``--columns`` into a column list: None for the defaults, ``all``
    for everything, or a comma-separated list (``+col`` adds to defaults).
    """
    if not spec:
        return list(DEFAULT_COLUMNS)
    if spec.strip().lower() == "all":
        return list(COMPANY_COLUMNS)

    parts = [p.strip() for p in spec.split(",") if p.strip()]
    if all(p.startswith("+") for p in parts):
        extra = [p[1:] for p in parts]
        wanted = set(DEFAULT_COLUMNS) | set(extra)
    else:
        wanted = set(parts)

    unknown = wanted - set(COMPANY_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown column(s): {', '.join(sorted(unknown))}")
    return [c for c in COMPANY_COLUMNS if c in wanted]


def format_number(value) -> str:
    if value is None:
        return "-"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def _cell(row: Dict, column: str) -> str:
    value = row.get(column)
    if column in NUMERIC_COLUMNS:
        return format_number(value)
    text = "" if value is None else str(value)
    if len(text) > MAX_TEXT_WIDTH:
        text = text[:MAX_TEXT_WIDTH - 1] + "~"
    return text


def render_table(rows: Sequence[Dict], columns: Sequence[str]) -> str:
    if not rows:
        return f"{C.WARN}No companies match the current filters.{C.RESET}"

    headers = [HEADERS.get(c, c) for c in columns]
    cells = [[_cell(r, c) for c in columns] for r in rows]
    widths = [
        max(len(headers[i]), *(len(line[i]) for line in cells))
        for i in range(len(columns))
    ]

    def fmt(values):
        out = []
        for col, value, width in zip(columns, values, widths):
            out.append(value.rjust(width) if col in NUMERIC_COLUMNS else value.ljust(width))
        return "  ".join(out)

    lines = [
        f"{C.HEADER}{fmt(headers)}{C.RESET}",
        "  ".join("-" * w for w in widths),
    ]
    lines.extend(fmt(line) for line in cells)
    return "\n".join(lines)


def render_cards(title: str, stats: Dict) -> str:
    """Four stat cards: companies, employees, revenue, profit (with averages)."""
    cards = [
        ("Companii", format_number(stats["total_companies"]), None),
        ("Salariati", format_number(stats["total_employees"]),
         f"medie {format_number(stats['average_employees'])}"),
        ("Cifra de afaceri", format_number(stats["total_revenue"]),
         f"medie {format_number(stats['average_revenue'])}"),
        ("Profit net", format_number(stats["total_profit"]),
         f"medie {format_number(stats['average_profit'])}"),
    ]
    lines = [f"{C.HEADER}{title}{C.RESET}"]
    for label, value, sub in cards:
        line = f"  {label:<18}{C.VALUE}{value}{C.RESET}"
        if sub:
            line += f"  {C.DIM}({sub}){C.RESET}"
        lines.append(line)
    return "\n".join(lines)


def render_top(title: str, top: Dict[str, Optional[Dict]]) -> str:
    """Leading company per metric, e.g. most employees."""
    labels = {
        "numar_mediu_de_salariati": "Most employees",
        "cifra_de_afaceri_neta": "Highest revenue",
        "profit_net": "Highest profit",
    }
    lines = [f"{C.HEADER}{title}{C.RESET}"]
    for column, label in labels.items():
        company = top.get(column)
        if company is None:
            lines.append(f"  {label:<18}-")
            continue
        lines.append(
            f"  {label:<18}{C.COMPANY}{company.get('denumire') or company.get('cui')}{C.RESET}"
            f"  {C.VALUE}{format_number(company.get(column))}{C.RESET}"
        )
    return "\n".join(lines)


def render_footer(current_page: int, total_pages: int, total_items: int) -> str:
    return f"{C.DIM}Page {current_page} of {total_pages}  ({format_number(total_items)} companies){C.RESET}"
