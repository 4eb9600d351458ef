"""
Terminal dashboard for the company registry.

Usage:
    python -m dashboard                                     # API at localhost:8000
    python -m dashboard --api http://registry:8000 --judet Cluj Iasi
    python -m dashboard --file export.csv --min-employees 50 --sort profit_net --desc
    python -m dashboard --file export.csv --interactive      # n/p/g <page>/l <size>/q
"""

import argparse
from typing import Any, Dict, List, Optional

import requests

from models import COMPANY_COLUMNS, NUMERIC_COLUMNS, SortOrder
from registry_api.client import RegistryClient
from registry_api.filters import compute_statistics
from utils import log

from . import render
from .sources import ApiSource, LocalSource
from .state import PaginationState

logger = log.setup_verbose_logging("dashboard")

TOP_COLUMNS = ["numar_mediu_de_salariati", "cifra_de_afaceri_neta", "profit_net"]


class Dashboard:
    """Fetches a page plus aggregates for the current state and renders them."""

    def __init__(
        self,
        source,
        state: PaginationState,
        columns: List[str],
        sort_by: Optional[str] = None,
        sort_order: SortOrder = SortOrder.ASC,
    ):
        self.source = source
        self.state = state
        self.columns = columns
        self.sort_by = sort_by
        self.sort_order = sort_order
        self.companies: List[Dict] = []

    def refresh(self) -> None:
        self.companies, total = self.source.fetch_page(
            self.state.filters,
            limit=self.state.limit,
            offset=self.state.offset,
            sort_by=self.sort_by,
            sort_order=self.sort_order,
        )
        self.state.update_total(total)
        logger.debug(
            f"Fetched page {self.state.current_page}/{self.state.total_pages} "
            f"({len(self.companies)} rows, {total} total)"
        )

    def render(self) -> str:
        filters = self.state.filters
        top = {col: self.source.top_company(filters, col) for col in TOP_COLUMNS}
        sections = [
            render.render_table(self.companies, self.columns),
            render.render_footer(self.state.current_page, self.state.total_pages, self.state.total_items or 0),
            "",
            render.render_cards("Pagina curenta", compute_statistics(self.companies)),
            "",
            render.render_cards("Toate companiile filtrate", self.source.statistics(filters)),
            "",
            render.render_top("Top companii", top),
        ]
        return "\n".join(sections)

    def handle(self, command: str) -> bool:
        """
        Apply one interactive command. Returns False when the user quits.

        n: next page, p: previous page, g N: go to page N,
        l N: change page size, s COL [desc]: sort, q: quit
        """
        parts = command.strip().split()
        if not parts:
            return True
        op, args = parts[0].lower(), parts[1:]

        if op == "q":
            return False
        if op == "n":
            if not self.state.next_page():
                log.warn("Already on the last page")
        elif op == "p":
            if not self.state.previous_page():
                log.warn("Already on the first page")
        elif op == "g" and args and args[0].isdigit():
            if not self.state.go_to_page(int(args[0])):
                log.warn(f"Page {args[0]} is out of range")
        elif op == "l" and args and args[0].isdigit() and int(args[0]) > 0:
            self.state.change_limit(int(args[0]))
        elif op == "s" and args and args[0] in COMPANY_COLUMNS:
            self.sort_by = args[0]
            desc = len(args) > 1 and args[1].lower() == "desc"
            self.sort_order = SortOrder.DESC if desc else SortOrder.ASC
            self.state.offset = 0
        else:
            log.warn(f"Unknown command: {command.strip()}")
        return True


def filters_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    filters: Dict[str, Any] = {}
    for key in ("cui", "denumire", "telefon"):
        if getattr(args, key):
            filters[key] = getattr(args, key)
    for key in ("caen", "judet"):
        if getattr(args, key):
            filters[key] = list(getattr(args, key))

    shortcuts = {
        "min_employees": "numar_mediu_de_salariati",
        "min_revenue": "cifra_de_afaceri_neta",
        "min_profit": "profit_net",
    }
    for arg, column in shortcuts.items():
        if getattr(args, arg) is not None:
            filters[column] = str(getattr(args, arg))

    for item in args.min or []:
        column, sep, value = item.partition("=")
        if not sep or column not in NUMERIC_COLUMNS:
            raise ValueError(f"--min expects COLUMN=VALUE with a numeric column, got '{item}'")
        filters[column] = value
    return filters


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browse the company registry from the terminal")
    where = parser.add_mutually_exclusive_group()
    where.add_argument("--api", default="http://localhost:8000", help="Registry API base URL")
    where.add_argument("--file", help="CSV or JSON export to browse offline")

    parser.add_argument("--cui", help="Exact fiscal code")
    parser.add_argument("--caen", nargs="+", help="CAEN activity codes")
    parser.add_argument("--judet", nargs="+", help="Counties")
    parser.add_argument("--denumire", help="Name contains")
    parser.add_argument("--telefon", help="Phone contains")
    parser.add_argument("--min-employees", type=float, help="Minimum average employee count")
    parser.add_argument("--min-revenue", type=float, help="Minimum net revenue")
    parser.add_argument("--min-profit", type=float, help="Minimum net profit")
    parser.add_argument("--min", action="append", metavar="COLUMN=VALUE",
                        help="Minimum for any numeric column (repeatable)")

    parser.add_argument("--limit", type=int, default=10, help="Rows per page (default: 10)")
    parser.add_argument("--page", type=int, default=1, help="Page to show (default: 1)")
    parser.add_argument("--sort", choices=COMPANY_COLUMNS, help="Column to sort by")
    parser.add_argument("--desc", action="store_true", help="Sort descending")
    parser.add_argument("--columns", help="Comma-separated columns, '+col' to add, or 'all'")
    parser.add_argument("--interactive", action="store_true", help="Page through results interactively")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        filters = filters_from_args(args)
        columns = render.resolve_columns(args.columns)
        state = PaginationState(limit=args.limit, filters=filters)
    except ValueError as e:
        log.err(str(e))
        return 2

    if args.file:
        try:
            source = LocalSource.from_file(args.file)
        except (OSError, ValueError) as e:
            log.err(f"Cannot load {args.file}: {e}")
            return 2
        log.info(f"Loaded {len(source.records)} companies from {args.file}")
    else:
        source = ApiSource(RegistryClient(args.api))

    dashboard = Dashboard(
        source,
        state,
        columns,
        sort_by=args.sort,
        sort_order=SortOrder.DESC if args.desc else SortOrder.ASC,
    )

    try:
        dashboard.refresh()
        if args.page > 1 and state.go_to_page(args.page):
            dashboard.refresh()
        print(dashboard.render())

        while args.interactive:
            command = input("\n[n]ext [p]rev [g]o N [l]imit N [s]ort COL [desc] [q]uit > ")
            if not dashboard.handle(command):
                break
            dashboard.refresh()
            print(dashboard.render())
    except requests.RequestException as e:
        log.err(f"Registry API request failed: {e}")
        logger.exception("API request failed")
        return 1
    except (EOFError, KeyboardInterrupt):
        print()

    return 0
